"""Reads (and the few admin writes) against the job queue's own keys."""

import json
from typing import Any

from app.core.config import get_settings
from app.models.stats import InfoSnapshot, QueueInfo
from app.models.worker import WorkerInfo
from app.store.client import Store


def _decode(raw: str | None) -> dict[str, Any] | None:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        return {"raw": raw}
    return value if isinstance(value, dict) else {"raw": value}


def group_by_host(workers: list[WorkerInfo]) -> dict[str, list[str]]:
    """host -> worker ids, hosts in first-seen order."""
    hosts: dict[str, list[str]] = {}
    for worker in workers:
        hosts.setdefault(worker.host, []).append(worker.id)
    return hosts


def _to_int(raw: str | None) -> int:
    try:
        return int(raw) if raw is not None else 0
    except ValueError:
        return 0


class JobQueueRuntime:
    def __init__(self, store: Store):
        self.store = store

    # Queues

    async def list_queues(self) -> list[str]:
        """Queue names in the order Redis returns the set; not sorted."""
        return await self.store.smembers("queues")

    async def queue_size(self, name: str) -> int:
        return await self.store.llen(f"queue:{name}")

    async def queue_sizes(self) -> list[QueueInfo]:
        return [QueueInfo(name=q, size=await self.queue_size(q)) for q in await self.list_queues()]

    async def peek(self, name: str, start: int, count: int) -> list[dict[str, Any]]:
        """count pending jobs from start, decoded."""
        if count <= 0:
            return []
        raw = await self.store.lrange(f"queue:{name}", max(0, start), max(0, start) + count - 1)
        return [_decode(r) or {} for r in raw]

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None:
        job = {"class": payload.get("class"), "args": payload.get("args") or []}
        await self.store.sadd("queues", name)
        await self.store.rpush(f"queue:{name}", json.dumps(job))

    async def remove_queue(self, name: str) -> None:
        await self.store.srem("queues", name)
        await self.store.delete(f"queue:{name}")

    # Workers

    async def list_workers(self) -> list[WorkerInfo]:
        ids = await self.store.smembers("workers")
        if not ids:
            return []
        jobs = await self.store.mget([f"worker:{i}" for i in ids])
        started = await self.store.mget([f"worker:{i}:started" for i in ids])
        processed = await self.store.mget([f"stat:processed:{i}" for i in ids])
        failed = await self.store.mget([f"stat:failed:{i}" for i in ids])
        return [
            WorkerInfo(
                **WorkerInfo.parse_id(worker_id),
                job=_decode(jobs[n]),
                started=started[n],
                processed=_to_int(processed[n]),
                failed=_to_int(failed[n]),
            )
            for n, worker_id in enumerate(ids)
        ]

    async def working(self) -> list[WorkerInfo]:
        """Busy workers, longest-running first."""
        busy = [w for w in await self.list_workers() if w.working]
        return sorted(busy, key=lambda w: str((w.job or {}).get("run_at") or ""))

    async def worker_hosts(self) -> dict[str, list[str]]:
        return group_by_host(await self.list_workers())

    # Stats

    async def info_snapshot(self) -> InfoSnapshot:
        queues = await self.list_queues()
        pending = 0
        for q in queues:
            pending += await self.queue_size(q)
        workers = await self.list_workers()
        return InfoSnapshot(
            pending=pending,
            processed=_to_int(await self.store.get("stat:processed")),
            queues=len(queues),
            workers=len(workers),
            working=sum(1 for w in workers if w.working),
            failed=_to_int(await self.store.get("stat:failed")),
            servers=[self.store.redis_id],
            environment=get_settings().env,
        )

    async def redis_info(self) -> dict[str, Any]:
        return await self.store.info()
