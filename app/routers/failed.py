from fastapi import APIRouter, Depends, Query

from app.core.audit import log_event
from app.deps import get_store
from app.services import dashboard
from app.services.failures import FailureIndex
from app.store.client import Store

router = APIRouter()


@router.get("")
async def failed_list(start: int = Query(0, ge=0), store: Store = Depends(get_store)):
    """One page of failures (oldest first) and failure counts per queue."""
    return await dashboard.failed_list(store, start)


@router.post("/clear")
async def failed_clear(store: Store = Depends(get_store)):
    """Admin: delete every failure."""
    index = FailureIndex(store)
    cleared = await index.count()
    await index.clear()
    log_event("clear_failures", "failed", metadata={"cleared": cleared})
    return {"ok": True, "action": "clear_failures", "cleared": cleared}


@router.post("/clear/{queue}")
async def failed_clear_queue(queue: str, store: Store = Depends(get_store)):
    """Admin: delete the failures of one queue."""
    removed = await FailureIndex(store).remove_queue(queue)
    log_event("clear_queue_failures", "failed", queue, {"removed": removed})
    return {"ok": True, "action": "clear_queue_failures", "queue": queue, "removed": removed}


@router.post("/clear/{queue}/{exception}")
async def failed_clear_exception(queue: str, exception: str, store: Store = Depends(get_store)):
    """Admin: delete the failures of one queue raised with one exception."""
    removed = await FailureIndex(store).remove_matching(queue, exception)
    log_event("clear_exception_failures", "failed", queue, {"exception": exception, "removed": removed})
    return {
        "ok": True,
        "action": "clear_exception_failures",
        "queue": queue,
        "exception": exception,
        "removed": removed,
    }


@router.post("/requeue/all")
async def failed_requeue_all(store: Store = Depends(get_store)):
    """Admin: requeue every failure by position. Not atomic; see FailureIndex."""
    requeued = await FailureIndex(store).requeue_all()
    log_event("requeue_all", "failed", metadata={"requeued": requeued})
    return {"ok": True, "action": "requeue_all", "requeued": requeued}


@router.post("/requeue/{index}")
async def failed_requeue(index: int, store: Store = Depends(get_store)):
    """Admin: requeue the failure at this position; returns its new retried_at."""
    record = await FailureIndex(store).requeue(index)
    log_event("requeue", "failed", str(index), {"queue": record.queue, "job_class": record.job_class})
    return {"ok": True, "action": "requeue", "index": index, "retried_at": record.retried_at}


@router.post("/remove/{index}")
async def failed_remove(index: int, store: Store = Depends(get_store)):
    """Admin: delete the failure at this position."""
    await FailureIndex(store).remove(index)
    log_event("remove_failure", "failed", str(index))
    return {"ok": True, "action": "remove_failure", "index": index}


@router.get("/{queue}")
async def failed_by_queue(queue: str, start: int = Query(0, ge=0), store: Store = Depends(get_store)):
    """Failures of one queue, grouped by exception."""
    return await dashboard.failed_by_queue(store, queue, start)


@router.get("/{queue}/{exception}")
async def failed_by_exception(
    queue: str,
    exception: str,
    start: int = Query(0, ge=0),
    store: Store = Depends(get_store),
):
    """Failures of one queue raised with one exception; empty when there are none."""
    return await dashboard.failed_by_exception(store, queue, exception, start)
