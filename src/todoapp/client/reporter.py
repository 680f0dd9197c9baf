"""Forward client errors to the todo service's log ingestion endpoint."""

import logging
import platform
import sys
import threading
from types import TracebackType
from typing import Any

import httpx

from src.todoapp.config import settings
from src.todoapp.services.observability import QueuedHttpHandler
from src.todoapp.services.observability.formatting import record_fields, record_timestamp

logger = logging.getLogger(__name__)

CLIENT_SERVICE = "todo-frontend"
CLIENT_LOGGER = "src.todoapp.client"
LOGS_PATH = "/api/logs"


class ErrorReportHandler(QueuedHttpHandler):
    """
    Ship error-level client records to ``POST /api/logs``.

    Lower levels never leave the process. Delivery happens on the handler's
    background thread; a failed delivery is only debug-logged, so reporting
    can never break or slow down the client.
    """

    thread_name = "error-reporter"

    def __init__(
        self,
        api_url: str = settings.todo_api_url,
        environment: str = settings.environment,
        **kwargs: Any,
    ) -> None:
        super().__init__(f"{api_url.rstrip('/')}{LOGS_PATH}", level=logging.ERROR, **kwargs)
        self.environment = environment
        self._hooks: tuple[Any, Any] | None = None

    def build_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        context = record_fields(record)
        error = context.pop("error", None)

        entry: dict[str, Any] = {
            "@timestamp": record_timestamp(record),
            "level": "error",
            "message": record.getMessage(),
            "service": CLIENT_SERVICE,
            "environment": self.environment,
            "hostname": platform.node(),
            "metadata": {"logger": record.name, "python": platform.python_version()},
        }
        if context:
            entry["context"] = context
        if error:
            entry["error"] = {"message": error["message"], "stack": error["stack"], "name": error["type"]}
        return entry

    def delivery_failed(self, error: httpx.HTTPError) -> None:
        # Debug records are below this handler's level, so this cannot loop back
        logger.debug(f"Failed to send error to backend: {error}")

    def capture_uncaught(self, target: logging.Logger) -> None:
        """
        Log exceptions nobody caught as "Uncaught Error" through ``target``.

        Chains ``sys.excepthook`` and ``threading.excepthook``; the previous
        hooks still run afterwards and are restored when the handler closes.
        """
        previous_hook = sys.excepthook
        previous_thread_hook = threading.excepthook

        def report(
            exc_type: type[BaseException],
            exc_value: BaseException,
            exc_traceback: TracebackType | None,
        ) -> None:
            if not issubclass(exc_type, KeyboardInterrupt):
                target.error("Uncaught Error", exc_info=(exc_type, exc_value, exc_traceback))
            previous_hook(exc_type, exc_value, exc_traceback)

        def report_thread(args: threading.ExceptHookArgs) -> None:
            # threading ignores SystemExit in worker threads
            if not issubclass(args.exc_type, SystemExit):
                target.error(
                    "Uncaught Error",
                    exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
                    extra={"thread_name": args.thread.name if args.thread else None},
                )
            previous_thread_hook(args)

        sys.excepthook = report
        threading.excepthook = report_thread
        self._hooks = (previous_hook, previous_thread_hook)

    def close(self, timeout: float = 5.0) -> None:
        if self._hooks is not None:
            sys.excepthook, threading.excepthook = self._hooks
            self._hooks = None
        super().close(timeout)


def install_error_reporter(
    target: logging.Logger | None = None, **kwargs: Any
) -> ErrorReportHandler:
    """
    Attach an ``ErrorReportHandler`` to the client logger.

    Uncaught exceptions, in the main thread or any other, are logged through
    the same logger so they reach the backend too.

    Args:
        target: Logger to attach to (default: the client package logger)
        **kwargs: Passed to ``ErrorReportHandler``

    Returns:
        The installed handler; call ``close()`` on it at exit to flush pending reports

    Example:
        >>> reporter = install_error_reporter()
        >>> TodoApi(session).list_todos()  # failures now reach the backend
        >>> reporter.close()
    """
    handler = ErrorReportHandler(**kwargs)
    client_logger = target or logging.getLogger(CLIENT_LOGGER)
    client_logger.addHandler(handler)
    handler.capture_uncaught(client_logger)
    return handler
