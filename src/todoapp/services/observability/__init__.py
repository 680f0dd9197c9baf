"""Structured logging, correlation ids and log shipping."""

from src.todoapp.services.observability.context import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    RequestIdFilter,
    get_request_id,
    request_log_context,
)
from src.todoapp.services.observability.formatting import JsonFormatter, record_fields
from src.todoapp.services.observability.setup import configure_logging, shutdown_logging
from src.todoapp.services.observability.transport import LogstashHttpHandler, QueuedHttpHandler

__all__ = [
    "REQUEST_ID_HEADER",
    "RequestContextMiddleware",
    "RequestIdFilter",
    "get_request_id",
    "request_log_context",
    "JsonFormatter",
    "record_fields",
    "configure_logging",
    "shutdown_logging",
    "LogstashHttpHandler",
    "QueuedHttpHandler",
]
