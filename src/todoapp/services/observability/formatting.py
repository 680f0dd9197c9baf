"""JSON rendering of log records."""

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """
    Extract the structured fields a caller attached to a record.

    Args:
        record: Log record

    Returns:
        Fields passed through ``extra=`` plus an ``error`` block when the record
        carries exception info

    Example:
        >>> logger.info("Todo created", extra={"action_type": "todo_created", "todo_id": "abc"})
        >>> # record_fields(record) == {"action_type": "todo_created", "todo_id": "abc"}
    """
    fields = {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}

    if record.exc_info and record.exc_info[1] is not None:
        exc_type, exc, tb = record.exc_info
        fields["error"] = {
            "message": str(exc),
            "type": exc_type.__name__ if exc_type else type(exc).__name__,
            "stack": "".join(traceback.format_exception(exc_type, exc, tb)),
        }

    return fields


def record_timestamp(record: logging.LogRecord) -> str:
    """ISO-8601 UTC timestamp of a record."""
    return datetime.fromtimestamp(record.created, tz=UTC).isoformat()


def to_json(entry: dict[str, Any]) -> str:
    """Serialize a log entry, stringifying values json cannot encode (ObjectId, datetime)."""
    return json.dumps(entry, default=str)


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "@timestamp": record_timestamp(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "environment": self.environment,
            **record_fields(record),
        }
        return to_json(entry)
