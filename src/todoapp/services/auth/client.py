"""HTTP client for the auth service's token validation endpoint."""

import logging

import httpx
from pydantic import ValidationError

from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.exceptions import AuthenticationError, UpstreamUnavailableError
from src.todoapp.services.observability import REQUEST_ID_HEADER

logger = logging.getLogger(__name__)

VALIDATE_PATH = "/api/auth/validate"


class AuthServiceClient:
    """
    Delegates token validation to the auth service.

    One awaited POST per call with a bounded timeout and no retries. The
    outcome is one of exactly three things:

    - the auth service confirms the token → ``AuthenticatedUser``
    - the auth service rejects it (401, or ``success: false``) →
      ``AuthenticationError`` ("bad credentials")
    - anything else (timeout, connection refused, 5xx, garbage body) →
      ``UpstreamUnavailableError`` ("retry later")

    Attributes:
        base_url: Auth service root URL
        timeout: Total per-call timeout in seconds
        _http_client: Async HTTP client reused across requests

    Example:
        >>> client = AuthServiceClient("http://auth-service:3001", timeout=5.0)
        >>> user = await client.validate_token(token, request_id="3f2a...")
        >>> await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize auth service client.

        Args:
            base_url: Auth service root URL
            timeout: Per-call timeout in seconds
            http_client: Optional preconfigured client (must carry base_url)
        """
        self.base_url = base_url
        self.timeout = timeout
        self._http_client = http_client or httpx.AsyncClient(
            base_url=base_url, timeout=httpx.Timeout(timeout)
        )

    async def validate_token(self, token: str, request_id: str | None = None) -> AuthenticatedUser:
        """
        Ask the auth service whether a bearer token is valid.

        Args:
            token: Bearer token as received from the caller
            request_id: Correlation id forwarded in X-Request-ID

        Returns:
            Identity of the token's owner

        Raises:
            AuthenticationError: Auth service rejected the token
            UpstreamUnavailableError: Auth service could not give an answer
        """
        headers = {"Authorization": f"Bearer {token}"}
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id

        try:
            response = await self._http_client.post(VALIDATE_PATH, headers=headers, json={})
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError("Authentication service unavailable") from e

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthenticationError("Access denied. Invalid token.")

        if response.status_code != httpx.codes.OK:
            logger.warning(
                f"Auth service answered validation with status {response.status_code}",
                extra={"request_id": request_id, "upstream_status": response.status_code},
            )
            raise UpstreamUnavailableError("Authentication service unavailable")

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Authentication service unavailable") from e

        if not isinstance(body, dict) or not body.get("success"):
            raise AuthenticationError("Access denied. Invalid token.")

        try:
            return AuthenticatedUser.model_validate(body.get("data"))
        except ValidationError as e:
            raise UpstreamUnavailableError("Authentication service unavailable") from e

    async def close(self) -> None:
        """
        Close HTTP client and cleanup resources.

        Should be called during application shutdown.
        """
        await self._http_client.aclose()
        logger.info("Auth service client closed")
