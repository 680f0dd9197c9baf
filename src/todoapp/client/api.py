"""HTTP clients for the auth and todo services."""

import logging
from typing import Any

import httpx

from src.todoapp.client.session import ClientSession
from src.todoapp.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Raised when a service answers with an error envelope or cannot be reached.

    Attributes:
        status_code: HTTP status, or None when no response was received
        message: Message taken from the error envelope
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class BaseApi:
    """
    Shared request handling for the service clients.

    Every call goes through ``_request``, which attaches the session's token,
    unwraps the ``{success, message, data}`` envelope and turns failures into
    ``ApiError``. Failed calls are logged at error level, so an installed
    ``ErrorReportHandler`` forwards them to the backend.
    """

    def __init__(
        self,
        session: ClientSession,
        base_url: str,
        http_client: httpx.Client | None = None,
        timeout: float = settings.client_timeout_seconds,
    ) -> None:
        """
        Initialize client.

        Args:
            session: Sign-in state shared with the other clients
            base_url: Service root URL
            http_client: Optional preconfigured client (must carry base_url)
            timeout: Per-request timeout in seconds
        """
        self.session = session
        self._http_client = http_client or httpx.Client(
            base_url=base_url, timeout=httpx.Timeout(timeout)
        )

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        logger.info(f"API Request: {method} {path}", extra={"method": method, "url": path})

        try:
            response = self._http_client.request(
                method, path, json=payload, headers=self.session.auth_headers()
            )
        except httpx.HTTPError as e:
            logger.error(
                f"API Error: {method} {path} - no response",
                exc_info=True,
                extra={"method": method, "url": path},
            )
            raise ApiError(None, "Service unreachable. Please try again.") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_success and body.get("success", True):
            logger.info(
                f"API Response: {method} {path} - {response.status_code}",
                extra={"method": method, "url": path, "status": response.status_code},
            )
            return body

        logger.error(
            f"API Error: {method} {path} - {response.status_code}",
            extra={
                "method": method,
                "url": path,
                "status": response.status_code,
                "response": body,
            },
        )
        raise ApiError(response.status_code, body.get("message") or "Request failed")

    def close(self) -> None:
        self._http_client.close()


class AuthApi(BaseApi):
    """Client for the auth service. Signup and login start the session, logout ends it."""

    def __init__(
        self,
        session: ClientSession,
        base_url: str = settings.auth_service_url,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(session, base_url, http_client)

    def _start_session(self, body: dict[str, Any]) -> dict[str, Any]:
        data = body["data"]
        self.session.start(data["token"], data["user"])
        return data

    def signup(self, full_name: str, email: str, password: str) -> dict[str, Any]:
        """
        Register and sign in.

        Returns:
            ``{"user": ..., "token": ...}``

        Raises:
            ApiError: 400 for missing fields or a short password, 409 for a taken email
        """
        body = self._request(
            "POST",
            "/api/auth/signup",
            {"fullName": full_name, "email": email, "password": password},
        )
        data = self._start_session(body)
        logger.info("User signed up successfully", extra={"email": email})
        return data

    def login(self, email: str, password: str) -> dict[str, Any]:
        """
        Sign in with email and password.

        Raises:
            ApiError: 400 for missing fields, 401 for wrong credentials
        """
        body = self._request("POST", "/api/auth/login", {"email": email, "password": password})
        data = self._start_session(body)
        logger.info("User logged in successfully", extra={"email": email})
        return data

    def logout(self) -> None:
        """
        Sign out.

        The session is cleared even when the logout call fails; that failure is
        already logged by ``_request``.
        """
        try:
            if self.session.is_authenticated:
                self._request("POST", "/api/auth/logout")
        except ApiError:
            pass
        finally:
            self.session.clear()
            logger.info("User logged out")

    def get_profile(self) -> dict[str, Any]:
        """
        Refresh the signed-in user from the auth service.

        Raises:
            ApiError: 401 when signed out or the token is no longer valid
                (the session is cleared)
        """
        if not self.session.is_authenticated:
            raise ApiError(401, "No authentication token")

        try:
            body = self._request("GET", "/api/auth/profile")
        except ApiError as e:
            if e.status_code == httpx.codes.UNAUTHORIZED:
                self.session.clear()
                raise ApiError(e.status_code, "Session expired. Please login again.") from e
            raise

        self.session.user = body["data"]
        return body["data"]


class TodoApi(BaseApi):
    """Client for the todo service, authenticated with the session's token."""

    def __init__(
        self,
        session: ClientSession,
        base_url: str = settings.todo_api_url,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(session, base_url, http_client)

    def list_todos(self) -> list[dict[str, Any]]:
        """Caller's todos, newest first."""
        return self._request("GET", "/api/todos").get("data") or []

    def get_todo(self, todo_id: str) -> dict[str, Any]:
        return self._request("GET", f"/api/todos/{todo_id}")["data"]

    def create_todo(self, title: str, description: str = "", completed: bool = False) -> dict[str, Any]:
        """
        Create a todo.

        Raises:
            ApiError: 400 if the title is blank
        """
        payload = {"title": title.strip(), "description": description.strip(), "completed": completed}
        return self._request("POST", "/api/todos", payload)["data"]

    def update_todo(
        self,
        todo_id: str,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> dict[str, Any]:
        """Send only the fields that are given."""
        payload = {
            key: value
            for key, value in {"title": title, "description": description, "completed": completed}.items()
            if value is not None
        }
        return self._request("PUT", f"/api/todos/{todo_id}", payload)["data"]

    def toggle_complete(self, todo: dict[str, Any]) -> dict[str, Any]:
        """Flip the completion flag of a todo as last seen by the client."""
        logger.info(
            "User Action: Toggle Complete",
            extra={"todo_id": todo["id"], "from": todo["completed"], "to": not todo["completed"]},
        )
        return self.update_todo(todo["id"], completed=not todo["completed"])

    def delete_todo(self, todo_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/api/todos/{todo_id}")["data"]
