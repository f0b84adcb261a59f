from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from app.deps import get_store
from app.services import dashboard
from app.services.runtime import JobQueueRuntime
from app.services.stats import StatsExporter
from app.store.client import Store

router = APIRouter()
text_router = APIRouter()


@router.get("/keys")
async def stats_keys(store: Store = Depends(get_store)):
    """Every key under the namespace with its type and size."""
    return await dashboard.key_browser(store)


@router.get("/keys/{key:path}")
async def stats_key(key: str, start: int = Query(0, ge=0), store: Store = Depends(get_store)):
    """Key inspector: type, size and one page of values."""
    return await dashboard.key_inspector(store, key, start)


@router.get("/{stats_id}")
async def stats_section(stats_id: str, store: Store = Depends(get_store)):
    """resque (queue counters), redis (server INFO) or keys."""
    return await dashboard.stats(store, stats_id)


@text_router.get("/stats.txt", response_class=PlainTextResponse)
async def stats_text(store: Store = Depends(get_store)):
    return await StatsExporter(JobQueueRuntime(store)).export_text()
