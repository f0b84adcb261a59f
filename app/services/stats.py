"""Flat name=value lines for scrapers (stats.txt).

`name+=value` marks a counter that only grows; it is a label, not an
operation. Fixed metrics come first, then one line per queue in the order
the queue set is listed.
"""

from app.models.stats import InfoSnapshot, QueueInfo
from app.services.runtime import JobQueueRuntime


def format_stats(prefix: str, info: InfoSnapshot, queues: list[QueueInfo]) -> str:
    lines = [
        f"{prefix}.pending={info.pending}",
        f"{prefix}.processed+={info.processed}",
        f"{prefix}.failed+={info.failed}",
        f"{prefix}.workers={info.workers}",
        f"{prefix}.working={info.working}",
    ]
    lines.extend(f"queues.{q.name}={q.size}" for q in queues)
    return "\n".join(lines)


class StatsExporter:
    def __init__(self, runtime: JobQueueRuntime):
        self.runtime = runtime

    async def export_text(self) -> str:
        info = await self.runtime.info_snapshot()
        queues = await self.runtime.queue_sizes()
        return format_stats(self.runtime.store.namespace, info, queues)
