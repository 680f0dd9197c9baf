"""Sign-in state held by a client."""

from dataclasses import dataclass
from typing import Any


@dataclass
class ClientSession:
    """
    Token and user of the signed-in account.

    Created empty, filled by a successful signup or login and emptied again by
    logout or an expired token. Pass the same instance to ``AuthApi`` and
    ``TodoApi`` so both see the same sign-in state.

    Example:
        >>> session = ClientSession()
        >>> auth = AuthApi(session)
        >>> auth.login("a@x.com", "secret1")
        >>> todos = TodoApi(session).list_todos()
    """

    token: str | None = None
    user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def start(self, token: str, user: dict[str, Any]) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None

    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the current token, empty when signed out."""
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}
