"""Standard response envelopes shared by both services."""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for payloads exposed with camelCase keys (fullName, userId, createdAt)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelRequest(CamelModel):
    """Base for request bodies: camelCase keys, unknown fields rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ApiResponse(BaseModel, Generic[T]):
    """Standard single item response wrapper."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class ListResponse(BaseModel, Generic[T]):
    """Standard list response wrapper."""

    success: bool = True
    count: int
    data: list[T]


class MessageResponse(BaseModel):
    """Envelope without a payload (errors, acknowledgements)."""

    success: bool
    message: str


class ServiceInfoResponse(BaseModel):
    """Root endpoint banner."""

    success: bool = True
    message: str
    service: str
    timestamp: str


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes read back from the database as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)
