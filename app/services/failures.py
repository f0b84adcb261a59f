"""Positional access to the failed list.

Failures are addressed by their position in the list at the time of the call,
not by an id. Anything that appends or removes between a page being viewed
and an action being posted can shift positions, so requeue(3) or remove(3)
may hit a different record than the one on screen. requeue_all() walks
positions 0..count-1 as counted when it starts; records removed meanwhile
end it early, records appended meanwhile are not visited.
"""

import json
import uuid
from datetime import datetime, timezone

from redis.exceptions import ResponseError

from app.core.exceptions import BadRequestError, IndexOutOfRangeError
from app.core.logging import get_logger
from app.models.failure import FailureRecord
from app.services.runtime import JobQueueRuntime
from app.store.client import Store

log = get_logger(__name__)

FAILED_KEY = "failed"
RETRIED_AT_FORMAT = "%Y/%m/%d %H:%M:%S"


class FailureIndex:
    def __init__(self, store: Store, runtime: JobQueueRuntime | None = None):
        self.store = store
        self.runtime = runtime or JobQueueRuntime(store)

    async def count(self) -> int:
        return await self.store.llen(FAILED_KEY)

    async def all(self, start: int = 0, limit: int = 1) -> list[FailureRecord]:
        """limit records from start, oldest first, each tagged with its index."""
        start = max(0, start)
        if limit <= 0:
            return []
        raw = await self.store.lrange(FAILED_KEY, start, start + limit - 1)
        return [FailureRecord.from_raw(r, index=start + n) for n, r in enumerate(raw)]

    async def _raw_at(self, index: int) -> str:
        raw = await self.store.lindex(FAILED_KEY, index) if index >= 0 else None
        if raw is None:
            raise IndexOutOfRangeError(index, await self.count())
        return raw

    async def requeue(self, index: int) -> FailureRecord:
        """Push the failed job back onto its queue and stamp retried_at. The record stays."""
        raw = await self._raw_at(index)
        record = FailureRecord.from_raw(raw, index=index)
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
        if not isinstance(data, dict) or not record.queue:
            raise BadRequestError(f"Failure at index {index} has no queue to requeue onto", details={"index": index})
        retried_at = datetime.now(timezone.utc).strftime(RETRIED_AT_FORMAT)
        data["retried_at"] = retried_at
        try:
            await self.store.lset(FAILED_KEY, index, json.dumps(data))
        except ResponseError as e:
            raise IndexOutOfRangeError(index, await self.count()) from e
        await self.runtime.enqueue(record.queue, record.payload)
        record.retried_at = retried_at
        log.info("failure_requeued", index=index, queue=record.queue, job_class=record.job_class)
        return record

    async def remove(self, index: int) -> None:
        await self._raw_at(index)
        tombstone = f"__delete__:{uuid.uuid4()}"
        try:
            await self.store.lset(FAILED_KEY, index, tombstone)
        except ResponseError as e:
            raise IndexOutOfRangeError(index, await self.count()) from e
        await self.store.lrem(FAILED_KEY, 1, tombstone)

    async def remove_queue(self, queue: str) -> int:
        return await self._remove_where(lambda r: r.queue == queue)

    async def remove_matching(self, queue: str, exception: str) -> int:
        return await self._remove_where(lambda r: r.queue == queue and r.exception == exception)

    async def _remove_where(self, predicate) -> int:
        removed = 0
        for raw in await self.store.lrange(FAILED_KEY, 0, -1):
            if predicate(FailureRecord.from_raw(raw)):
                removed += await self.store.lrem(FAILED_KEY, 1, raw)
        return removed

    async def clear(self) -> None:
        await self.store.delete(FAILED_KEY)

    async def requeue_all(self) -> int:
        total = await self.count()
        done = 0
        for index in range(total):
            try:
                await self.requeue(index)
            except IndexOutOfRangeError:
                log.warning("requeue_all_short", requeued=done, expected=total)
                break
            except BadRequestError:
                log.warning("requeue_skipped", index=index)
                continue
            done += 1
        return done
