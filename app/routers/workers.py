from fastapi import APIRouter, Depends

from app.deps import get_store
from app.services import dashboard
from app.store.client import Store

router = APIRouter()


@router.get("")
async def workers_list(store: Store = Depends(get_store)):
    """Workers grouped by host; the workers themselves when there is only one host."""
    return await dashboard.workers(store)


@router.get("/{worker_id}")
async def worker_detail(worker_id: str, store: Store = Depends(get_store)):
    """Worker detail: "all", a hostname, or a full worker id."""
    return await dashboard.workers(store, worker_id)
