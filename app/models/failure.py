"""A logged job failure as stored in the failed list."""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

INVALID_RECORD = "InvalidFailureRecord"


class FailureRecord(BaseModel):
    queue: str = ""
    exception: str = ""
    error: str = ""
    backtrace: list[str] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)
    worker: str | None = None
    failed_at: str | None = None
    retried_at: str | None = None
    # Position in the failed list when this record was read; not stable.
    index: int | None = None

    @field_validator("queue", "exception", "error", mode="before")
    @classmethod
    def _null_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("backtrace", mode="before")
    @classmethod
    def _null_backtrace(cls, v: Any) -> Any:
        if v is None:
            return []
        return [v] if isinstance(v, str) else v

    @field_validator("payload", mode="before")
    @classmethod
    def _null_payload(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def job_class(self) -> str | None:
        return self.payload.get("class")

    @property
    def args(self) -> list[Any]:
        args = self.payload.get("args")
        if args is None:
            return []
        return args if isinstance(args, list) else [args]

    @classmethod
    def from_raw(cls, raw: str, index: int | None = None) -> "FailureRecord":
        """Decode a stored entry. Undecodable entries still occupy their position."""
        try:
            record = cls.model_validate_json(raw)
        except ValidationError as e:
            return cls(exception=INVALID_RECORD, error=str(e).splitlines()[0], index=index)
        record.index = index
        return record
