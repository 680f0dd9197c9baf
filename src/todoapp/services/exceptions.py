"""Application error taxonomy shared by the auth and todo services."""


class TodoAppError(Exception):
    """
    Base exception for all errors surfaced to API clients.

    Each subclass fixes the HTTP status code. ``message`` is the public text
    placed in the response envelope, so it must never contain internals.
    ``reason`` is the detailed cause, for server-side logs only.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, reason: str | None = None) -> None:
        self.message = message or self.default_message
        self.reason = reason or self.message
        super().__init__(self.message)


class BadRequestError(TodoAppError):
    """Raised when client input fails validation."""

    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(TodoAppError):
    """Raised when authentication fails (missing, invalid or expired tokens, bad credentials)."""

    status_code = 401
    default_message = "Access denied. Invalid token."


class NotFoundError(TodoAppError):
    """Raised when an entity is absent or not owned by the caller."""

    status_code = 404
    default_message = "Not found"


class ConflictError(TodoAppError):
    """Raised when a unique field is already taken."""

    status_code = 409
    default_message = "Conflict"


class UpstreamUnavailableError(TodoAppError):
    """Raised when a dependency (auth service, database) cannot be reached."""

    status_code = 500
    default_message = "Service unavailable"
