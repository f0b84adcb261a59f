"""Server-rendered dashboard pages. Overview and workers also serve condensed .poll fragments."""

from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from htpy import Node

from app.core.exceptions import StoreUnavailableError
from app.core.logging import get_logger
from app.deps import get_store
from app.services import dashboard
from app.store.client import Store
from app.views.layout import render_page
from app.views.pages import (
    render_error,
    render_failed,
    render_overview,
    render_queue,
    render_queues,
    render_stats,
    render_workers,
    render_working,
)
from app.views.polling import RenderMode, condense

log = get_logger(__name__)
router = APIRouter()

NO_CACHE = {"Cache-Control": "max-age=0, private, must-revalidate"}


async def show(
    request: Request,
    title_text: str,
    load: Callable[[], Awaitable[dict[str, Any]]],
    render: Callable[[dict[str, Any], RenderMode], Node],
) -> HTMLResponse:
    """Render a page in full, or condensed when the path ends in .poll.

    An unreachable Redis renders the error page instead of failing the request.
    """
    mode = RenderMode.for_path(request.url.path)
    try:
        data = await load()
    except StoreUnavailableError as e:
        log.warning("degraded_view", redis=e.redis_id, path=request.url.path)
        return HTMLResponse(str(render_error(e.message)), status_code=503, headers=NO_CACHE)
    fragment = render(data, mode)
    if mode.polling:
        return HTMLResponse(condense(str(fragment)), headers=NO_CACHE)
    page = render_page(title_text=title_text, current=mode.path, content=fragment)
    return HTMLResponse(str(page), headers=NO_CACHE)


@router.get("/", include_in_schema=False)
async def index():
    return RedirectResponse("/overview")


@router.get("/overview", response_class=HTMLResponse)
@router.get("/overview.poll", response_class=HTMLResponse)
async def overview_page(request: Request, store: Store = Depends(get_store)):
    return await show(request, "Overview", lambda: dashboard.overview(store), render_overview)


@router.get("/workers", response_class=HTMLResponse)
@router.get("/workers.poll", response_class=HTMLResponse)
async def workers_page(request: Request, store: Store = Depends(get_store)):
    return await show(request, "Workers", lambda: dashboard.workers(store), render_workers)


@router.get("/workers/{worker_id}", response_class=HTMLResponse)
@router.get("/workers/{worker_id}.poll", response_class=HTMLResponse)
async def worker_page(worker_id: str, request: Request, store: Store = Depends(get_store)):
    return await show(request, "Workers", lambda: dashboard.workers(store, worker_id), render_workers)


@router.get("/working", response_class=HTMLResponse)
async def working_page(request: Request, store: Store = Depends(get_store)):
    return await show(request, "Working", lambda: dashboard.working(store), render_working)


@router.get("/queues", response_class=HTMLResponse)
async def queues_page(request: Request, store: Store = Depends(get_store)):
    return await show(request, "Queues", lambda: dashboard.queues(store), render_queues)


@router.get("/queues/{name}", response_class=HTMLResponse)
async def queue_page(name: str, request: Request, start: int = Query(0, ge=0), store: Store = Depends(get_store)):
    return await show(request, "Queues", lambda: dashboard.queue_detail(store, name, start), render_queue)


@router.get("/failed", response_class=HTMLResponse)
async def failed_page(request: Request, start: int = Query(0, ge=0), store: Store = Depends(get_store)):
    return await show(request, "Failed", lambda: dashboard.failed_list(store, start), render_failed)


@router.get("/stats", response_class=HTMLResponse)
async def stats_page(request: Request, store: Store = Depends(get_store)):
    return await show(request, "Stats", lambda: dashboard.stats(store, "resque"), render_stats)
