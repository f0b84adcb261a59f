"""One read accessor per dashboard view. Each returns plain JSON-able data."""

from typing import Any

from app.core.config import get_settings
from app.core.exceptions import NotFoundError
from app.core.pagination import Page, clamp_start, slice_page
from app.models.failure import FailureRecord
from app.models.worker import WorkerInfo
from app.services.failures import FailureIndex
from app.services.runtime import JobQueueRuntime, group_by_host
from app.services.summary import SummaryAggregator
from app.store.adapter import StoreAdapter
from app.store.client import Store


def _page_size() -> int:
    return get_settings().page_size


def _failure_page(items: list[FailureRecord], start: int, total: int) -> dict[str, Any]:
    return Page[FailureRecord](items=items, start=start, page_size=_page_size(), total=total).model_dump(mode="json")


def _workers(workers: list[WorkerInfo]) -> list[dict[str, Any]]:
    return [w.model_dump(mode="json") | {"working": w.working} for w in workers]


async def overview(store: Store) -> dict[str, Any]:
    runtime = JobQueueRuntime(store)
    queues = await runtime.queue_sizes()
    working = await runtime.working()
    return {
        "queues": [q.model_dump() for q in queues],
        "failed": await FailureIndex(store, runtime).count(),
        "working": _workers(working),
        "workers": len(await runtime.list_workers()),
    }


async def queues(store: Store) -> dict[str, Any]:
    runtime = JobQueueRuntime(store)
    return {
        "queues": [q.model_dump() for q in await runtime.queue_sizes()],
        "failed": await FailureIndex(store, runtime).count(),
    }


async def queue_detail(store: Store, name: str, start: int = 0) -> dict[str, Any]:
    runtime = JobQueueRuntime(store)
    start = clamp_start(start)
    return {
        "name": name,
        "size": await runtime.queue_size(name),
        "start": start,
        "page_size": _page_size(),
        "jobs": await runtime.peek(name, start, _page_size()),
    }


async def workers(store: Store, worker_id: str | None = None) -> dict[str, Any]:
    """Hosts overview, every worker ("all"), the workers of one host, or one worker."""
    runtime = JobQueueRuntime(store)
    everyone = await runtime.list_workers()
    hosts = group_by_host(everyone)
    if worker_id is None:
        shown = everyone if len(hosts) == 1 else []
        return {"hosts": hosts, "workers": _workers(shown), "total": len(everyone)}
    if worker_id == "all":
        return {"hosts": hosts, "workers": _workers(everyone), "total": len(everyone)}
    if worker_id in hosts:
        on_host = [w for w in everyone if w.host == worker_id]
        return {"host": worker_id, "workers": _workers(on_host), "total": len(on_host)}
    for w in everyone:
        if w.id == worker_id:
            return {"worker": _workers([w])[0]}
    raise NotFoundError("Worker not found")


async def working(store: Store) -> dict[str, Any]:
    runtime = JobQueueRuntime(store)
    busy = await runtime.working()
    return {
        "working": _workers(busy),
        "total": len(await runtime.list_workers()),
    }


async def failed_list(store: Store, start: int = 0) -> dict[str, Any]:
    index = FailureIndex(store)
    start = clamp_start(start)
    by_queue = await SummaryAggregator(index).by_queue()
    return {
        "page": _failure_page(await index.all(start, _page_size()), start, await index.count()),
        "queues": [[queue, group.count] for queue, group in by_queue.items()],
    }


async def failed_by_queue(store: Store, queue: str, start: int = 0) -> dict[str, Any]:
    summary = await SummaryAggregator(FailureIndex(store)).by_exception(queue)
    start = clamp_start(start)
    grouped = [f for group in summary.values() for f in group.failures]
    return {
        "queue": queue,
        "exceptions": [[exc, group.count] for exc, group in summary.items()],
        "page": _failure_page(slice_page(grouped, start, _page_size()), start, sum(g.count for g in summary.values())),
    }


async def failed_by_exception(store: Store, queue: str, exception: str, start: int = 0) -> dict[str, Any]:
    summary = await SummaryAggregator(FailureIndex(store)).by_exception(queue)
    start = clamp_start(start)
    group = summary.get(exception)
    failures = group.failures if group else []
    return {
        "queue": queue,
        "exception": exception,
        "exceptions": [[exc, g.count] for exc, g in summary.items()],
        "page": _failure_page(slice_page(failures, start, _page_size()), start, len(failures)),
    }


async def key_browser(store: Store) -> dict[str, Any]:
    adapter = StoreAdapter(store)
    keys = []
    for key in await adapter.keys():
        kind = await adapter.type_of(key)
        keys.append({"key": key, "type": kind.value, "size": await adapter.size_of(key)})
    return {"keys": keys}


async def key_inspector(store: Store, key: str, start: int = 0) -> dict[str, Any]:
    view = await StoreAdapter(store).inspect(key, start, _page_size())
    return view.model_dump(mode="json")


async def stats(store: Store, stats_id: str) -> dict[str, Any]:
    runtime = JobQueueRuntime(store)
    if stats_id == "resque":
        return {"id": stats_id, "stats": (await runtime.info_snapshot()).model_dump()}
    if stats_id == "redis":
        return {"id": stats_id, "stats": await runtime.redis_info()}
    if stats_id == "keys":
        return {"id": stats_id, **await key_browser(store)}
    raise NotFoundError(f"Unknown stats section: {stats_id}")
