"""Structured logging for change lifecycle events."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a console handler to the package logger (idempotent)."""
    package_logger = logging.getLogger("plan_editor")
    package_logger.setLevel(level.upper())

    # Prevent duplicate handlers when called more than once
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)


class StructuredChangeLogger:
    """Structured logger for staged change transitions."""

    def log_event(
        self,
        event: str,
        *,
        plan_id: str | None,
        change_id: str | None,
        action_count: int | None = None,
        cost_delta: float | None = None,
        reason: str | None = None,
    ) -> None:
        """Log a change lifecycle event with structured data."""
        log_data: dict[str, Any] = {
            "event": event,
            "plan_id": plan_id,
            "change_id": change_id,
        }

        if action_count is not None:
            log_data["action_count"] = action_count
        if cost_delta is not None:
            log_data["cost_delta"] = round(cost_delta, 2)
        if reason:
            log_data["reason"] = reason

        log_msg = f"Change {event}: {change_id or '-'} (plan {plan_id or '-'})"

        if event == "not_found":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})
