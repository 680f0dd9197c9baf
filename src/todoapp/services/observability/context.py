"""Per-request correlation identifiers."""

import logging
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Return the correlation id of the request being handled, if any."""
    return _request_id.get()


def request_log_context(request: Request) -> dict[str, str | None]:
    """
    Common ``extra`` fields for log records emitted while handling a request.

    Args:
        request: Incoming request

    Returns:
        Dictionary with request_id, request_path, method and ip

    Example:
        >>> logger.warning("Access denied", extra={**request_log_context(request), "action_type": "x"})
    """
    return {
        "request_id": getattr(request.state, "request_id", None) or get_request_id(),
        "request_path": request.url.path,
        "method": request.method,
        "ip": request.client.host if request.client else None,
    }


class RequestIdFilter(logging.Filter):
    """Stamp records with the current correlation id unless the caller already did."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Assign a correlation id to every request.

    Reuses an incoming ``X-Request-ID`` header when present so that calls
    between services share one id, otherwise generates a fresh uuid4. The id
    is stored on ``request.state``, in a context variable for log filters, and
    echoed back in the response header.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        token = _request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
