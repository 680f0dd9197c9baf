"""FastAPI dependencies for bearer authentication delegated to the auth service."""

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.todoapp.services.auth.client import AuthServiceClient
from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.exceptions import AuthenticationError, UpstreamUnavailableError
from src.todoapp.services.observability import request_log_context

# auto_error=False so a missing header yields our 401 envelope instead of FastAPI's
security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

# Global auth service client (initialized in main.py lifespan)
_auth_client: AuthServiceClient | None = None


def set_auth_client(client: AuthServiceClient | None) -> None:
    """
    Set the global auth service client instance.

    Called during todo service startup; tests install a client bound to a
    mock or in-process transport.

    Args:
        client: AuthServiceClient instance, or None to reset
    """
    global _auth_client
    _auth_client = client


def get_auth_client() -> AuthServiceClient:
    """
    Get the global auth service client instance.

    Returns:
        AuthServiceClient instance

    Raises:
        RuntimeError: If the client was not initialized
    """
    if _auth_client is None:
        raise RuntimeError(
            "Auth service client not initialized. "
            "Ensure application startup calls set_auth_client()."
        )
    return _auth_client


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser:
    """
    Authenticate the caller by asking the auth service to validate its token.

    The resolved identity is also stored on ``request.state.user`` for
    request-scoped consumers such as the rate limiter.

    Args:
        request: Incoming request (carries the correlation id)
        credentials: Bearer token from Authorization header

    Returns:
        AuthenticatedUser with user_id, email and full_name

    Raises:
        AuthenticationError: 401 if the token is missing or rejected
        UpstreamUnavailableError: 500 if the auth service cannot answer

    Example:
        @router.get("/todos")
        async def list_todos(current_user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": current_user.user_id}
    """
    log_context = request_log_context(request)

    if credentials is None or not credentials.credentials:
        logger.warning(
            "Access denied: No token provided",
            extra={**log_context, "action_type": "token_validation_failed"},
        )
        raise AuthenticationError("Access denied. No token provided.")

    try:
        user = await get_auth_client().validate_token(
            credentials.credentials, request_id=log_context["request_id"]
        )
    except AuthenticationError:
        logger.warning(
            "Token validation failed",
            extra={**log_context, "action_type": "token_validation_failed"},
        )
        raise
    except UpstreamUnavailableError as e:
        logger.error(
            "Token validation error",
            exc_info=e.__cause__ or e,
            extra={**log_context, "action_type": "token_validation_error"},
        )
        raise

    request.state.user = user
    return user
