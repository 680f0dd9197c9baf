"""Tests for the application entry points."""

from fastapi.testclient import TestClient

from src.todoapp.main import auth_app, todo_app


def test_health_check(auth_client: TestClient, todo_client: TestClient) -> None:
    """Test both services report healthy."""
    for client in (auth_client, todo_client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


def test_service_banner(auth_client: TestClient, todo_client: TestClient) -> None:
    """Test root endpoint names the service."""
    auth_banner = auth_client.get("/").json()
    todo_banner = todo_client.get("/").json()

    assert auth_banner["success"] is True
    assert auth_banner["service"] == "todo-auth-api"
    assert todo_banner["service"] == "todo-api"
    assert todo_banner["timestamp"]


def test_unknown_route_returns_envelope(todo_client: TestClient) -> None:
    response = todo_client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found"}


def test_request_id_generated_when_absent(todo_client: TestClient) -> None:
    response = todo_client.get("/health")

    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 36


def test_request_id_echoed_when_supplied(auth_client: TestClient) -> None:
    response = auth_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_routers_are_split_between_services() -> None:
    """Test each service only exposes its own feature routes."""
    auth_paths = set(auth_app.openapi()["paths"])
    todo_paths = set(todo_app.openapi()["paths"])

    assert "/api/auth/validate" in auth_paths
    assert "/api/todos" not in auth_paths
    assert {"/api/todos", "/api/todos/{todo_id}", "/api/logs", "/api/logs/health"} <= todo_paths
    assert "/api/auth/login" not in todo_paths


def test_unhandled_error_returns_generic_500(caplog) -> None:
    """Test unexpected exceptions never leak details to the client."""

    @todo_app.get("/boom-test")
    async def boom() -> None:
        raise RuntimeError("database password is hunter2")

    try:
        client = TestClient(todo_app, raise_server_exceptions=False)
        response = client.get("/boom-test", headers={"X-Request-ID": "req-500"})
    finally:
        todo_app.router.routes.pop()

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
    assert "hunter2" not in response.text
    assert response.headers["X-Request-ID"] == "req-500"
    assert any(getattr(r, "action_type", None) == "unhandled_error" for r in caplog.records)
