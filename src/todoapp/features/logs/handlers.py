"""API handlers for client log ingestion."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request

from src.todoapp.features.logs.schemas import ClientLogEntry
from src.todoapp.services.exceptions import BadRequestError, TodoAppError
from src.todoapp.services.observability import request_log_context
from src.todoapp.services.rate_limiter import public_rate_limit
from src.todoapp.services.responses import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/logs", tags=["logs"])

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@router.post("", response_model=MessageResponse)
@public_rate_limit
async def ingest_log(request: Request, entry: ClientLogEntry) -> MessageResponse:
    """
    Receive a log entry from a client and forward it into the server logs.

    The entry is enriched with receipt metadata and re-emitted at its own
    level (unknown levels fall back to info), which routes it through the
    same handlers as server records, including log shipping.

    Args:
        entry: level and message, plus any client-specific fields

    Raises:
        BadRequestError: 400 if level or message is missing
    """
    log_context = request_log_context(request)

    if not entry.level or not entry.message:
        raise BadRequestError("Invalid log data. Required fields: level, message")

    try:
        client_entry = {
            **entry.model_dump(),
            "received_at": datetime.now(UTC).isoformat(),
            "received_from": log_context["ip"],
            "user_agent": request.headers.get("user-agent"),
        }
        logger.log(
            LEVELS.get(entry.level.lower(), logging.INFO),
            f"[Frontend] {entry.message}",
            extra={
                "request_id": log_context["request_id"],
                "action_type": "frontend_log",
                "log_source": "frontend",
                "client_entry": client_entry,
            },
        )
    except Exception as e:
        logger.error(
            "Error processing frontend log",
            exc_info=True,
            extra={**log_context, "action_type": "frontend_log_processing_error"},
        )
        raise TodoAppError("Internal server error processing log") from e

    return MessageResponse(success=True, message="Log received")


@router.get("/health", response_model=MessageResponse)
async def logs_health() -> MessageResponse:
    """Health check for the log ingestion endpoint."""
    return MessageResponse(success=True, message="Frontend logging endpoint is healthy")
