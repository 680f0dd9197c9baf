"""Request and response schemas for todo endpoints."""

from datetime import datetime
from typing import Any

from pydantic import Field

from src.todoapp.services.responses import CamelModel, CamelRequest, as_utc

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


class TodoCreateRequest(CamelRequest):
    """Request model for creating a todo. The title is checked by the service."""

    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    completed: bool | None = None


class TodoUpdateRequest(CamelRequest):
    """
    Request model for a partial todo update.

    Only fields present in the body are applied; an explicit ``null`` counts
    as absent.
    """

    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    completed: bool | None = None

    def changes(self) -> dict[str, Any]:
        """Fields the client actually supplied, with nulls dropped."""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class TodoResponse(CamelModel):
    """Todo representation returned to clients."""

    id: str
    title: str
    description: str = ""
    completed: bool = False
    user_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "TodoResponse":
        return cls(
            id=str(document["_id"]),
            title=document["title"],
            description=document.get("description", ""),
            completed=document.get("completed", False),
            user_id=document["user_id"],
            created_at=as_utc(document["created_at"]),
            updated_at=as_utc(document["updated_at"]),
        )
