from app.models.failure import FailureRecord
from app.models.stats import FailureGroup, InfoSnapshot, QueueInfo
from app.models.worker import WorkerInfo

__all__ = [
    "FailureRecord",
    "FailureGroup",
    "InfoSnapshot",
    "QueueInfo",
    "WorkerInfo",
]
