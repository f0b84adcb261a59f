from typing import Any

from pydantic import BaseModel, Field


class WorkerInfo(BaseModel):
    id: str
    host: str
    pid: str = ""
    queues: list[str] = Field(default_factory=list)
    job: dict[str, Any] | None = None
    started: str | None = None
    processed: int = 0
    failed: int = 0

    @property
    def working(self) -> bool:
        return bool(self.job)

    @classmethod
    def parse_id(cls, worker_id: str) -> dict[str, Any]:
        """Split a host:pid:queue1,queue2 id. Hosts never contain ':'."""
        host, _, rest = worker_id.partition(":")
        pid, _, queues = rest.partition(":")
        return {
            "id": worker_id,
            "host": host,
            "pid": pid,
            "queues": [q for q in queues.split(",") if q],
        }
