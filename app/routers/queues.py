from fastapi import APIRouter, Depends, Query

from app.core.audit import log_event
from app.deps import get_store
from app.services import dashboard
from app.services.runtime import JobQueueRuntime
from app.store.client import Store

router = APIRouter()


@router.get("")
async def queues_list(store: Store = Depends(get_store)):
    """All registered queues with their pending sizes, plus the failed count."""
    return await dashboard.queues(store)


@router.get("/{name}")
async def queue_detail(name: str, start: int = Query(0, ge=0), store: Store = Depends(get_store)):
    """One page of pending jobs in a queue."""
    return await dashboard.queue_detail(store, name, start)


@router.post("/{name}/remove")
async def queue_remove(name: str, store: Store = Depends(get_store)):
    """Admin: unregister a queue and drop its pending jobs."""
    await JobQueueRuntime(store).remove_queue(name)
    log_event("remove_queue", "queue", name)
    return {"ok": True, "action": "remove_queue", "queue": name}
