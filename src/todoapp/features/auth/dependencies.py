"""Local bearer authentication for the auth service's own protected routes."""

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.todoapp.features.auth.services import get_user_service
from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.exceptions import AuthenticationError
from src.todoapp.services.observability import request_log_context

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


async def get_token_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser:
    """
    Verify the bearer token in-process (the auth service owns the signing key).

    Raises:
        AuthenticationError: 401 if the token is missing, invalid, expired or
            belongs to a user that no longer exists
    """
    log_context = request_log_context(request)

    if credentials is None or not credentials.credentials:
        logger.warning(
            "Access denied: No token provided",
            extra={**log_context, "action_type": "token_validation_failed"},
        )
        raise AuthenticationError("Access denied. No token provided.")

    try:
        claims, user = get_user_service().resolve_token(credentials.credentials)
    except AuthenticationError as e:
        logger.warning(
            f"Access denied: {e.reason}",
            extra={**log_context, "action_type": "token_validation_failed"},
        )
        raise

    current_user = AuthenticatedUser(
        user_id=claims["userId"], email=claims.get("email", user["email"]), full_name=user.get("full_name")
    )
    request.state.user = current_user
    return current_user
