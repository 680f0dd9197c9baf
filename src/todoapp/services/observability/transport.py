"""Best-effort HTTP log shipping."""

import logging
import queue
import sys
import threading
from typing import Any

import httpx

from src.todoapp.services.observability.formatting import (
    record_fields,
    record_timestamp,
    to_json,
)

_STOP = object()


class QueuedHttpHandler(logging.Handler):
    """
    Logging handler that POSTs records as JSON from a background thread.

    ``emit`` only renders the record and enqueues it, so callers are never
    blocked on the network. The queue is bounded: when it is full the record
    is dropped and counted in ``dropped``. Delivery failures (connection
    errors, timeouts, non-2xx responses) are written to stderr and never
    raised.

    Subclasses decide the payload shape through ``build_entry``.

    Attributes:
        url: Endpoint receiving each entry
        dropped: Number of records discarded because the queue was full
        failed: Number of entries whose delivery failed

    Example:
        >>> handler = LogstashHttpHandler("http://logstash:5044", service="todo-api")
        >>> logging.getLogger("src.todoapp").addHandler(handler)
    """

    thread_name = "http-log-shipper"

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        queue_size: int = 1000,
        level: int = logging.NOTSET,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize handler and start the delivery thread.

        Args:
            url: Endpoint receiving each entry
            timeout: Per-request timeout in seconds
            queue_size: Maximum number of entries waiting for delivery
            level: Minimum record level handled
            http_client: Optional preconfigured client (tests use a mock transport)
        """
        super().__init__(level)
        self.url = url
        self.dropped = 0
        self.failed = 0
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=queue_size)
        self._http_client = http_client or httpx.Client(timeout=httpx.Timeout(timeout))
        self._worker = threading.Thread(target=self._run, name=self.thread_name, daemon=True)
        self._worker.start()

    def build_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        raise NotImplementedError

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = self.build_entry(record)
        except Exception:
            self.handleError(record)
            return

        try:
            self._queue.put_nowait(entry)
        except queue.Full:
            self.dropped += 1

    def send(self, entry: dict[str, Any]) -> None:
        """Deliver one entry; failures are reported locally and swallowed."""
        try:
            response = self._http_client.post(
                self.url,
                content=to_json(entry),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.failed += 1
            self.delivery_failed(e)

    def delivery_failed(self, error: httpx.HTTPError) -> None:
        # Never log through ``logging`` here: this handler may be the one receiving it
        print(f"Failed to ship log entry to {self.url}: {error}", file=sys.stderr)

    def _run(self) -> None:
        while True:
            entry = self._queue.get()
            try:
                if entry is _STOP:
                    return
                self.send(entry)
            finally:
                self._queue.task_done()

    def close(self, timeout: float = 5.0) -> None:
        """
        Stop the delivery thread after it drains pending entries.

        Waits at most ``timeout`` seconds; entries still queued after that are
        abandoned along with the daemon thread.
        """
        if self._worker.is_alive():
            try:
                self._queue.put(_STOP, timeout=timeout)
            except queue.Full:
                pass
            self._worker.join(timeout)
        self._http_client.close()
        super().close()


class LogstashHttpHandler(QueuedHttpHandler):
    """Ship backend records to a Logstash HTTP input."""

    thread_name = "logstash-http"

    def __init__(self, url: str, service: str, environment: str = "development", **kwargs: Any) -> None:
        super().__init__(url, **kwargs)
        self.service = service
        self.environment = environment

    def build_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            "@timestamp": record_timestamp(record),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
            "service": self.service,
            "environment": self.environment,
            "log_source": "backend",
            **record_fields(record),
        }
