"""Translate exceptions into the standard response envelope."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.todoapp.services.exceptions import TodoAppError
from src.todoapp.services.observability import REQUEST_ID_HEADER, request_log_context

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    """Build ``{"success": false, "message": ...}`` with the given status."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"

    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if first.get("type") == "extra_forbidden":
        return f"Unrecognized field: {location}"
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    if location:
        return f"Invalid value for {location}: {first.get('msg', 'invalid')}"
    return f"Invalid request body: {first.get('msg', 'invalid')}"


async def handle_app_error(request: Request, exc: TodoAppError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.warning(
        f"Request validation failed: {message}",
        extra={**request_log_context(request), "action_type": "request_validation_failed"},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        logger.warning(
            "Route not found",
            extra={**request_log_context(request), "action_type": "route_not_found"},
        )
        return error_response(exc.status_code, "Route not found")

    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        f"Rate limit exceeded: {exc.detail}",
        extra={**request_log_context(request), "action_type": "rate_limit_exceeded"},
    )
    return error_response(status.HTTP_429_TOO_MANY_REQUESTS, "Too many requests")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    context = request_log_context(request)
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={**context, "action_type": "unhandled_error"},
    )
    # Rendered outside the request-id middleware, so the header is set here
    headers = {REQUEST_ID_HEADER: context["request_id"]} if context["request_id"] else None
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", headers=headers)


def install_exception_handlers(app: FastAPI) -> None:
    """
    Register envelope-producing exception handlers on an app.

    Validation failures become 400 (not FastAPI's default 422), application
    errors keep their own status, and anything unexpected becomes a generic
    500 whose details only reach the server-side logs.
    """
    app.add_exception_handler(TodoAppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
    app.add_exception_handler(Exception, handle_unexpected_error)
