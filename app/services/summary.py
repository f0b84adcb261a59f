"""Grouped failure counts, rebuilt from the failed list on every call.

Nothing is cached: an admin view must reflect the requeue/remove that was just
posted. Each call reads the whole failed list once.
"""

from typing import Callable

from app.models.failure import FailureRecord
from app.models.stats import FailureGroup
from app.services.failures import FailureIndex


def group_failures(
    failures: list[FailureRecord],
    key: Callable[[FailureRecord], str],
) -> dict[str, FailureGroup]:
    """Groups in first-seen order; records inside a group keep list order."""
    summary: dict[str, FailureGroup] = {}
    for failure in failures:
        group = summary.setdefault(key(failure), FailureGroup())
        group.count += 1
        group.failures.append(failure)
    return summary


class SummaryAggregator:
    def __init__(self, failures: FailureIndex):
        self.failures = failures

    async def _scan(self) -> list[FailureRecord]:
        return await self.failures.all(0, await self.failures.count())

    async def by_queue(self) -> dict[str, FailureGroup]:
        return group_failures(await self._scan(), lambda f: f.queue)

    async def by_exception(self, queue: str) -> dict[str, FailureGroup]:
        """Failures of one queue grouped by exception; empty for an unknown queue."""
        in_queue = [f for f in await self._scan() if f.queue == queue]
        return group_failures(in_queue, lambda f: f.exception)
