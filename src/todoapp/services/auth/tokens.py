"""Issuing and verifying signed bearer tokens."""

import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt

from src.todoapp.config import settings

logger = logging.getLogger(__name__)


class TokenService:
    """
    Signs and verifies HS256 JWTs carrying the user's identity.

    Tokens embed ``userId`` (also mirrored into ``sub``) and ``email`` and
    expire after a fixed time-to-live. Nothing is persisted: a token is valid
    when its signature and expiry verify. Whether the user still exists is a
    separate check done by the caller.

    Attributes:
        secret: Shared signing secret
        algorithm: JWS algorithm (default: HS256)
        expires_in: Token time-to-live
        leeway: Clock skew tolerance in seconds (default: 0)

    Example:
        >>> tokens = TokenService(secret="s3cret")
        >>> token = tokens.issue_token("65f0c0ffee0000000000abcd", "a@x.com")
        >>> tokens.verify_token(token)["userId"]
        '65f0c0ffee0000000000abcd'
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=24),
        leeway: int = 0,
    ):
        """
        Initialize token service.

        Args:
            secret: Shared signing secret
            algorithm: JWS algorithm
            expires_in: Token time-to-live
            leeway: Clock skew tolerance in seconds
        """
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in
        self.leeway = leeway

    def issue_token(self, user_id: str, email: str) -> str:
        """
        Sign a token for a user.

        Args:
            user_id: User identifier (string form of the ObjectId)
            email: User email

        Returns:
            Compact JWT string
        """
        issued_at = datetime.now(UTC)
        claims = {
            "sub": user_id,
            "userId": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_in).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict[str, Any]:
        """
        Verify a token's signature and expiry and return its claims.

        Args:
            token: JWT string (without "Bearer " prefix)

        Returns:
            Verified claims including userId, email, iat and exp

        Raises:
            JWTError: If the token is malformed, badly signed, expired or lacks
                the identity claims
        """
        claims = jwt.decode(
            token,
            self.secret,
            algorithms=[self.algorithm],
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_iat": True,
                "verify_aud": False,
                "require_exp": True,
                "require_iat": True,
                "leeway": self.leeway,
            },
        )

        if not claims.get("userId"):
            raise JWTError("Token missing 'userId' claim")

        logger.debug(
            "Token verified",
            extra={"user_id": claims.get("userId"), "exp": claims.get("exp")},
        )
        return claims


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    """Token service configured from settings (singleton)."""
    return TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_in=timedelta(hours=settings.jwt_expires_in_hours),
    )
