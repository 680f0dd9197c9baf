"""Rate limiting service for API endpoints."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.todoapp.config import settings
from src.todoapp.services.auth.models import AuthenticatedUser

logger = logging.getLogger(__name__)


def get_user_id_or_ip(request: Request) -> str:
    """
    Extract user ID from the authenticated request or fall back to IP address.

    This function is used as the key_func for rate limiting:
    - Authenticated requests: Rate limited per user ID
    - Unauthenticated requests: Rate limited per IP address

    Args:
        request: FastAPI request object

    Returns:
        User ID string or IP address
    """
    # Set by the auth dependency, which runs before the limit check
    user: AuthenticatedUser | None = getattr(request.state, "user", None)

    if user and user.user_id:
        return f"user:{user.user_id}"

    return f"ip:{get_remote_address(request)}"


# Initialize rate limiter with in-memory storage
limiter = Limiter(
    key_func=get_user_id_or_ip,
    default_limits=[],  # No global limits, we'll apply per-endpoint
    storage_uri="memory://",  # In-memory storage for single-instance deployment
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """
    Rate limit tiers for different endpoint categories.

    Authenticated todo endpoints are limited per user; signup, login and log
    ingestion are limited per IP address.
    """

    # Reads (list, get, profile, validate)
    DEFAULT = ["100 per minute", "1000 per hour"]

    # Todo mutations (POST/PUT/DELETE)
    WRITE = ["30 per minute", "200 per hour"]

    # Credential endpoints, guards against password guessing
    AUTH = ["10 per minute", "50 per hour"]

    # Unauthenticated log ingestion from clients
    PUBLIC = ["20 per minute", "100 per hour"]


# Note: These decorators require the endpoint to have a 'request: Request' parameter
default_rate_limit = limiter.limit(";".join(RateLimitTiers.DEFAULT))
write_rate_limit = limiter.limit(";".join(RateLimitTiers.WRITE))
auth_rate_limit = limiter.limit(";".join(RateLimitTiers.AUTH))
public_rate_limit = limiter.limit(";".join(RateLimitTiers.PUBLIC))
