"""Business logic for todos."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pymongo import ASCENDING, DESCENDING

from src.todoapp.config import settings
from src.todoapp.features.todos.schemas import TodoCreateRequest, TodoUpdateRequest
from src.todoapp.services.database import MongoQueryBuilder, get_query_builder, utc_now
from src.todoapp.services.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

TODOS = "todos"


class TodoUpdateKind(str, Enum):
    """How an update is reported in the logs."""

    COMPLETED = "todo_completed"
    UNCOMPLETED = "todo_uncompleted"
    UPDATED = "todo_updated"


@dataclass(frozen=True)
class TodoUpdateResult:
    """Outcome of an update: the new document and how the completion flag moved."""

    todo: dict[str, Any]
    was_completed: bool
    kind: TodoUpdateKind

    @property
    def completion_changed(self) -> bool:
        return self.kind is not TodoUpdateKind.UPDATED


def classify_update(was_completed: bool, is_completed: bool) -> TodoUpdateKind:
    """
    Classify an update by the completion flag alone.

    Only an actual flip is a completion event. Supplying ``completed`` with
    its current value is an ordinary update.
    """
    if was_completed == is_completed:
        return TodoUpdateKind.UPDATED
    return TodoUpdateKind.COMPLETED if is_completed else TodoUpdateKind.UNCOMPLETED


def not_found(todo_id: str) -> NotFoundError:
    return NotFoundError(f"Todo not found with id: {todo_id}")


class TodoService:
    """
    Service for owner-scoped todo operations.

    Every query carries ``user_id``, so a todo owned by someone else is
    indistinguishable from one that does not exist.
    """

    def __init__(self, db: MongoQueryBuilder) -> None:
        self.db = db

    def ensure_indexes(self) -> None:
        """Index backing the owner listing (idempotent)."""
        self.db.ensure_index(TODOS, [("user_id", ASCENDING), ("created_at", DESCENDING)])

    def list_todos(self, user_id: str) -> list[dict[str, Any]]:
        """Owner's todos, newest first."""
        return self.db.list_records(
            TODOS,
            filters={"user_id": user_id},
            sort=[("created_at", DESCENDING), ("_id", DESCENDING)],
        )

    def get_todo(self, todo_id: str, user_id: str) -> dict[str, Any]:
        """
        Fetch one of the owner's todos.

        Raises:
            NotFoundError: 404 if absent, foreign or the id is malformed
        """
        todo = self.db.get_by_id(TODOS, todo_id, filters={"user_id": user_id})
        if todo is None:
            raise not_found(todo_id)
        return todo

    def create_todo(self, user_id: str, payload: TodoCreateRequest) -> dict[str, Any]:
        """
        Create a todo owned by ``user_id``.

        Raises:
            BadRequestError: 400 if the title is missing or blank
        """
        title = (payload.title or "").strip()
        if not title:
            raise BadRequestError("Title is required", reason="Title is required")

        now = utc_now()
        return self.db.insert_record(
            TODOS,
            {
                "title": title,
                "description": (payload.description or "").strip(),
                "completed": bool(payload.completed),
                "user_id": user_id,
                "created_at": now,
                "updated_at": now,
            },
        )

    def update_todo(self, todo_id: str, user_id: str, payload: TodoUpdateRequest) -> TodoUpdateResult:
        """
        Apply a partial update in one atomic write.

        The previous document comes back from the same write, so the
        completion classification reflects exactly what this update changed.

        Raises:
            NotFoundError: 404 if absent, foreign or the id is malformed
            BadRequestError: 400 if a supplied title is blank (nothing is written)
        """
        changes = payload.changes()

        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                # Existence is reported before input problems
                self.get_todo(todo_id, user_id)
                raise BadRequestError("Title cannot be empty", reason="Title cannot be empty")

        if "description" in changes:
            changes["description"] = changes["description"].strip()

        changes["updated_at"] = utc_now()

        previous = self.db.update_record(
            TODOS, todo_id, changes, filters={"user_id": user_id}, return_previous=True
        )
        if previous is None:
            raise not_found(todo_id)

        updated = {**previous, **changes}
        was_completed = bool(previous.get("completed", False))
        kind = classify_update(was_completed, bool(updated.get("completed", False)))

        return TodoUpdateResult(todo=updated, was_completed=was_completed, kind=kind)

    def delete_todo(self, todo_id: str, user_id: str) -> dict[str, Any]:
        """
        Delete one of the owner's todos.

        Returns:
            The deleted document

        Raises:
            NotFoundError: 404 if absent, foreign or the id is malformed
        """
        todo = self.db.delete_record(TODOS, todo_id, filters={"user_id": user_id})
        if todo is None:
            raise not_found(todo_id)
        return todo


def get_todo_service() -> TodoService:
    """TodoService bound to the todo database."""
    return TodoService(get_query_builder(settings.todo_database))
