"""Request and response schemas for auth endpoints."""

from datetime import datetime
from typing import Any

from pydantic import Field

from src.todoapp.services.responses import CamelModel, CamelRequest, as_utc


class SignupRequest(CamelRequest):
    """
    Request model for signup.

    Fields are optional at the schema level so that missing ones produce the
    endpoint's own 400 message rather than a generic validation error.
    """

    full_name: str | None = Field(None, description="User's full name")
    email: str | None = Field(None, description="Unique email address")
    password: str | None = Field(None, description="Plain-text password, hashed before storage")


class LoginRequest(CamelRequest):
    """Request model for login."""

    email: str | None = None
    password: str | None = None


class UserResponse(CamelModel):
    """Public user representation. Never carries the password hash."""

    id: str
    full_name: str
    email: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "UserResponse":
        return cls(
            id=str(document["_id"]),
            full_name=document["full_name"],
            email=document["email"],
            created_at=as_utc(document["created_at"]),
            updated_at=as_utc(document["updated_at"]),
        )


class AuthPayload(CamelModel):
    """Signup/login result: the user and a freshly issued token."""

    user: UserResponse
    token: str


class TokenIdentityResponse(CamelModel):
    """Validation result consumed by other services."""

    user_id: str
    email: str
    full_name: str | None = None
