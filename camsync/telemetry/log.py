"""Logging and telemetry configuration."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import Settings

logger = logging.getLogger("camsync")

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


def setup_logging(settings: Settings) -> None:
    """Configure structured logging."""
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if settings.log_format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # APScheduler logs every job submission at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def log_timing(operation: str, duration_ms: float, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Log operation timing metrics."""
    extra = {"operation": operation, "duration_ms": round(duration_ms, 2)}
    extra.update(metadata or {})
    logger.info("%s took %.0f ms", operation, duration_ms, extra=extra)


def log_sync_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log sync-related events."""
    logger.info("sync event: %s", event_type, extra={"event": event_type, **details})


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log error with context."""
    extra = {"error_type": type(error).__name__}
    extra.update(context or {})
    logger.error("%s", error, exc_info=error, extra=extra)
