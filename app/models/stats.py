from pydantic import BaseModel, Field

from app.models.failure import FailureRecord


class QueueInfo(BaseModel):
    name: str
    size: int


class InfoSnapshot(BaseModel):
    pending: int = 0
    processed: int = 0
    queues: int = 0
    workers: int = 0
    working: int = 0
    failed: int = 0
    servers: list[str] = Field(default_factory=list)
    environment: str = "development"


class FailureGroup(BaseModel):
    """Failures sharing one exception or one queue, in failed-list order."""

    count: int = 0
    failures: list[FailureRecord] = Field(default_factory=list)
