"""Audit trail for administrative actions (queue removal, failure requeue/clear)."""

from typing import Any

from app.core.logging import get_logger

log = get_logger("app.audit")


def log_event(
    action: str,
    target: str,
    target_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Emit one admin_action log line."""
    log.info(
        "admin_action",
        action=action,
        target=target,
        target_id=target_id,
        **(metadata or {}),
    )
