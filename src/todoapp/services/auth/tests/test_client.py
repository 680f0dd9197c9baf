"""Tests for AuthServiceClient."""

import httpx
import pytest

from src.todoapp.services.auth.client import VALIDATE_PATH, AuthServiceClient
from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.exceptions import AuthenticationError, UpstreamUnavailableError

BASE_URL = "http://auth-service"
IDENTITY = {"userId": "65f0c0ffee0000000000abcd", "email": "a@x.com", "fullName": "Alice"}


def _client(handler) -> AuthServiceClient:
    return AuthServiceClient(
        BASE_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL),
    )


@pytest.mark.asyncio
class TestValidateToken:
    """Tests for AuthServiceClient.validate_token."""

    async def test_success_returns_identity(self):
        """Test token, path and correlation id are sent and the identity parsed."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": IDENTITY})

        user = await _client(handler).validate_token("tok", request_id="req-1")

        assert user == AuthenticatedUser(user_id=IDENTITY["userId"], email="a@x.com", full_name="Alice")
        assert seen[0].method == "POST"
        assert seen[0].url.path == VALIDATE_PATH
        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert seen[0].headers["X-Request-ID"] == "req-1"

    async def test_401_is_authentication_error(self):
        client = _client(lambda request: httpx.Response(401, json={"success": False, "message": "Invalid token"}))

        with pytest.raises(AuthenticationError) as exc_info:
            await client.validate_token("tok")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Access denied. Invalid token."

    async def test_success_false_is_authentication_error(self):
        client = _client(lambda request: httpx.Response(200, json={"success": False}))

        with pytest.raises(AuthenticationError):
            await client.validate_token("tok")

    @pytest.mark.parametrize("status_code", [500, 502, 503, 404])
    async def test_other_statuses_are_unavailable(self, status_code: int):
        client = _client(lambda request: httpx.Response(status_code))

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await client.validate_token("tok")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Authentication service unavailable"

    @pytest.mark.parametrize("error", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")])
    async def test_transport_errors_are_unavailable(self, error: httpx.HTTPError):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        with pytest.raises(UpstreamUnavailableError):
            await _client(handler).validate_token("tok")

    async def test_unparseable_body_is_unavailable(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

        with pytest.raises(UpstreamUnavailableError):
            await client.validate_token("tok")

    async def test_incomplete_identity_is_unavailable(self):
        client = _client(lambda request: httpx.Response(200, json={"success": True, "data": {"email": "a@x.com"}}))

        with pytest.raises(UpstreamUnavailableError):
            await client.validate_token("tok")
