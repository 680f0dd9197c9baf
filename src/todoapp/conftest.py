"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from unittest.mock import patch

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from src.todoapp.main import auth_app, todo_app
from src.todoapp.services.auth import AuthServiceClient, set_auth_client
from src.todoapp.services.rate_limiter import limiter

AUTH_BASE_URL = "http://auth-service"


@pytest.fixture(autouse=True)
def mongo() -> Iterator[mongomock.MongoClient]:
    """
    Replace the MongoDB client with an in-memory one for every test.

    Example:
        >>> def test_users_empty(mongo):
        >>>     assert mongo["todo-auth"]["users"].count_documents({}) == 0
    """
    client = mongomock.MongoClient()
    with patch("src.todoapp.services.database.connection.get_mongo_client", return_value=client):
        yield client


@pytest.fixture(autouse=True)
def disable_rate_limits() -> Iterator[None]:
    """Rate limits are exercised by dedicated tests only."""
    limiter.enabled = False
    yield
    limiter.enabled = True
    limiter.reset()


@pytest.fixture
def auth_client() -> TestClient:
    """
    Provide test client for the auth service.

    Example:
        >>> def test_health(auth_client):
        >>>     assert auth_client.get("/health").status_code == 200
    """
    return TestClient(auth_app)


@pytest.fixture
def in_process_auth_service() -> Iterator[AuthServiceClient]:
    """Route the todo service's token validation to the auth app in-process."""
    client = AuthServiceClient(
        AUTH_BASE_URL,
        http_client=httpx.AsyncClient(
            transport=httpx.ASGITransport(app=auth_app), base_url=AUTH_BASE_URL
        ),
    )
    set_auth_client(client)
    yield client
    set_auth_client(None)


@pytest.fixture
def todo_client(in_process_auth_service: AuthServiceClient) -> TestClient:
    """Provide test client for the todo service, wired to the in-process auth service."""
    return TestClient(todo_app)


@pytest.fixture
def signup(auth_client: TestClient) -> Callable[..., str]:
    """
    Register a user through the API and return its token.

    Example:
        >>> token = signup("Alice", "alice@example.com")
    """

    def _signup(full_name: str = "Alice", email: str = "alice@example.com", password: str = "secret1") -> str:
        response = auth_client.post(
            "/api/auth/signup",
            json={"fullName": full_name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.json()
        return response.json()["data"]["token"]

    return _signup


@pytest.fixture
def user_token(signup: Callable[..., str]) -> str:
    return signup()


@pytest.fixture
def auth_headers(user_token: str) -> dict[str, str]:
    """Generate auth headers for the default test user."""
    return {"Authorization": f"Bearer {user_token}"}
