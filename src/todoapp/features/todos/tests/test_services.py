"""Tests for TodoService."""

import mongomock
import pytest
from bson import ObjectId

from src.todoapp.features.todos.schemas import TodoCreateRequest, TodoUpdateRequest
from src.todoapp.features.todos.services import (
    TodoService,
    TodoUpdateKind,
    classify_update,
)
from src.todoapp.services.database import MongoQueryBuilder
from src.todoapp.services.exceptions import BadRequestError, NotFoundError

OWNER = "65f0c0ffee0000000000aaaa"
OTHER = "65f0c0ffee0000000000bbbb"


@pytest.fixture
def service(mongo: mongomock.MongoClient) -> TodoService:
    return TodoService(MongoQueryBuilder(mongo["todo-test"]))


@pytest.mark.parametrize(
    ("was_completed", "is_completed", "expected"),
    [
        (False, True, TodoUpdateKind.COMPLETED),
        (True, False, TodoUpdateKind.UNCOMPLETED),
        (False, False, TodoUpdateKind.UPDATED),
        (True, True, TodoUpdateKind.UPDATED),
    ],
)
def test_classify_update(was_completed: bool, is_completed: bool, expected: TodoUpdateKind) -> None:
    assert classify_update(was_completed, is_completed) is expected


def test_update_request_changes_skip_unset_and_null() -> None:
    payload = TodoUpdateRequest.model_validate({"title": "a", "description": None})

    assert payload.changes() == {"title": "a"}


def test_create_stores_owner_and_defaults(service: TodoService) -> None:
    todo = service.create_todo(OWNER, TodoCreateRequest(title=" buy milk "))

    assert todo["user_id"] == OWNER
    assert todo["title"] == "buy milk"
    assert todo["description"] == ""
    assert todo["completed"] is False
    assert todo["created_at"] == todo["updated_at"]
    assert todo["created_at"].microsecond % 1000 == 0


def test_scoped_operations_hide_foreign_todos(service: TodoService) -> None:
    todo = service.create_todo(OWNER, TodoCreateRequest(title="mine"))
    todo_id = str(todo["_id"])

    with pytest.raises(NotFoundError):
        service.get_todo(todo_id, OTHER)
    with pytest.raises(NotFoundError):
        service.update_todo(todo_id, OTHER, TodoUpdateRequest(completed=True))
    with pytest.raises(NotFoundError):
        service.delete_todo(todo_id, OTHER)

    assert service.list_todos(OTHER) == []
    assert service.get_todo(todo_id, OWNER)["completed"] is False


def test_update_never_changes_owner(service: TodoService) -> None:
    todo = service.create_todo(OWNER, TodoCreateRequest(title="mine"))

    result = service.update_todo(str(todo["_id"]), OWNER, TodoUpdateRequest(completed=True))

    assert result.todo["user_id"] == OWNER
    assert result.kind is TodoUpdateKind.COMPLETED
    assert result.completion_changed
    assert result.was_completed is False


def test_update_without_completed_is_plain_update(service: TodoService) -> None:
    todo = service.create_todo(OWNER, TodoCreateRequest(title="mine", completed=True))

    result = service.update_todo(str(todo["_id"]), OWNER, TodoUpdateRequest(description=" more "))

    assert result.kind is TodoUpdateKind.UPDATED
    assert not result.completion_changed
    assert result.todo["description"] == "more"
    assert result.todo["completed"] is True


def test_blank_title_update_is_rejected(service: TodoService) -> None:
    todo = service.create_todo(OWNER, TodoCreateRequest(title="mine"))

    with pytest.raises(BadRequestError, match="Title cannot be empty"):
        service.update_todo(str(todo["_id"]), OWNER, TodoUpdateRequest(title="   "))

    assert service.get_todo(str(todo["_id"]), OWNER)["title"] == "mine"


@pytest.mark.parametrize("todo_id", ["", "123", "zzzzzzzzzzzzzzzzzzzzzzzz"])
def test_malformed_ids_are_not_found(service: TodoService, todo_id: str) -> None:
    with pytest.raises(NotFoundError):
        service.get_todo(todo_id, OWNER)


def test_delete_returns_document(service: TodoService) -> None:
    todo = service.create_todo(OWNER, TodoCreateRequest(title="mine"))

    deleted = service.delete_todo(str(todo["_id"]), OWNER)

    assert deleted["_id"] == todo["_id"]
    assert service.list_todos(OWNER) == []
    with pytest.raises(NotFoundError):
        service.delete_todo(str(ObjectId()), OWNER)
