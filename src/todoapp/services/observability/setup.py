"""Logging configuration for the services."""

import logging
import sys

from src.todoapp.config import Settings, settings
from src.todoapp.services.observability.context import RequestIdFilter
from src.todoapp.services.observability.formatting import JsonFormatter
from src.todoapp.services.observability.transport import LogstashHttpHandler

# Every module logs through logging.getLogger(__name__), so this is the common ancestor.
APP_LOGGER = "src.todoapp"

_installed: list[logging.Handler] = []


def configure_logging(service: str, config: Settings = settings) -> logging.Logger:
    """
    Attach console and (optionally) Logstash handlers to the application logger.

    Safe to call more than once: handlers installed by a previous call are
    closed and replaced.

    Args:
        service: Service name stamped on every record (e.g. "todo-api")
        config: Settings to read log level and collector location from

    Returns:
        The configured application logger
    """
    shutdown_logging()

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(config.log_level.upper())
    app_logger.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(JsonFormatter(service=service, environment=config.environment))
    _installed.append(console)

    if config.logstash_enabled:
        _installed.append(
            LogstashHttpHandler(
                config.logstash_url,
                service=service,
                environment=config.environment,
                timeout=config.logstash_timeout_seconds,
                queue_size=config.log_queue_size,
            )
        )

    request_filter = RequestIdFilter()
    for handler in _installed:
        handler.addFilter(request_filter)
        app_logger.addHandler(handler)

    app_logger.info(
        "Logging configured",
        extra={
            "action_type": "logging_configured",
            "logstash_enabled": config.logstash_enabled,
            "logstash_url": config.logstash_url if config.logstash_enabled else None,
        },
    )
    return app_logger


def shutdown_logging() -> None:
    """Detach and close the handlers installed by ``configure_logging``."""
    app_logger = logging.getLogger(APP_LOGGER)
    while _installed:
        handler = _installed.pop()
        app_logger.removeHandler(handler)
        handler.close()
