"""API handlers for todo endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, status

from src.todoapp.features.todos.schemas import TodoCreateRequest, TodoResponse, TodoUpdateRequest
from src.todoapp.features.todos.services import get_todo_service
from src.todoapp.services.auth.dependencies import get_current_user
from src.todoapp.services.auth.models import AuthenticatedUser
from src.todoapp.services.exceptions import (
    BadRequestError,
    NotFoundError,
    TodoAppError,
)
from src.todoapp.services.observability import request_log_context
from src.todoapp.services.rate_limiter import default_rate_limit, write_rate_limit
from src.todoapp.services.responses import ApiResponse, ListResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])


def _log_context(request: Request, current_user: AuthenticatedUser) -> dict:
    return {**request_log_context(request), "user_id": current_user.user_id}


@router.get("", response_model=ListResponse[TodoResponse])
@default_rate_limit
async def list_todos(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ListResponse[TodoResponse]:
    """
    List the caller's todos, newest first.

    Returns:
        count and the todos

    Raises:
        TodoAppError: 500 if the database fails
    """
    log_context = _log_context(request, current_user)

    try:
        todos = get_todo_service().list_todos(current_user.user_id)
    except Exception as e:
        logger.error(
            "Error fetching todos",
            exc_info=True,
            extra={**log_context, "action_type": "todos_fetch_error"},
        )
        raise TodoAppError("Server error") from e

    logger.info(
        "Fetched all todos",
        extra={**log_context, "count": len(todos), "action_type": "todos_fetched"},
    )

    return ListResponse(count=len(todos), data=[TodoResponse.from_document(todo) for todo in todos])


@router.get("/{todo_id}", response_model=ApiResponse[TodoResponse], response_model_exclude_none=True)
@default_rate_limit
async def get_todo(
    request: Request,
    todo_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ApiResponse[TodoResponse]:
    """
    Get one of the caller's todos.

    Raises:
        NotFoundError: 404 if the todo does not exist or belongs to someone else
        TodoAppError: 500 if the database fails
    """
    log_context = {**_log_context(request, current_user), "todo_id": todo_id}

    try:
        todo = get_todo_service().get_todo(todo_id, current_user.user_id)
    except NotFoundError:
        logger.warning(
            f"Todo not found with id: {todo_id}",
            extra={**log_context, "action_type": "todo_not_found"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error fetching todo",
            exc_info=True,
            extra={**log_context, "action_type": "todo_fetch_error"},
        )
        raise TodoAppError("Server error") from e

    logger.info(
        f"Fetched todo with id: {todo_id}",
        extra={**log_context, "action_type": "todo_fetched"},
    )

    return ApiResponse(data=TodoResponse.from_document(todo))


@router.post(
    "",
    response_model=ApiResponse[TodoResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@write_rate_limit
async def create_todo(
    request: Request,
    payload: TodoCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ApiResponse[TodoResponse]:
    """
    Create a todo owned by the caller.

    Args:
        payload: title (required, non-blank), description, completed (default false)

    Raises:
        BadRequestError: 400 if the title is missing or blank
        TodoAppError: 500 if the database fails

    Example Response:
        {
            "success": true,
            "message": "Todo created successfully",
            "data": {"id": "...", "title": "buy milk", "description": "", "completed": false, ...}
        }
    """
    log_context = _log_context(request, current_user)

    try:
        todo = get_todo_service().create_todo(current_user.user_id, payload)
    except BadRequestError as e:
        logger.warning(
            f"Create todo failed: {e.reason}",
            extra={**log_context, "action_type": "todo_creation_failed"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error creating todo",
            exc_info=True,
            extra={**log_context, "action_type": "todo_creation_error"},
        )
        raise TodoAppError("Server error") from e

    logger.info(
        "Todo created successfully",
        extra={
            **log_context,
            "todo_id": str(todo["_id"]),
            "title": todo["title"],
            "action_type": "todo_created",
            "todo_status": "completed" if todo["completed"] else "pending",
        },
    )

    return ApiResponse(message="Todo created successfully", data=TodoResponse.from_document(todo))


@router.put("/{todo_id}", response_model=ApiResponse[TodoResponse], response_model_exclude_none=True)
@write_rate_limit
async def update_todo(
    request: Request,
    todo_id: str,
    payload: TodoUpdateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ApiResponse[TodoResponse]:
    """
    Partially update one of the caller's todos.

    A flip of ``completed`` is logged as ``todo_completed`` or
    ``todo_uncompleted``; every other update as ``todo_updated``.

    Raises:
        NotFoundError: 404 if the todo does not exist or belongs to someone else
        BadRequestError: 400 if a supplied title is blank
        TodoAppError: 500 if the database fails
    """
    log_context = {**_log_context(request, current_user), "todo_id": todo_id}

    try:
        result = get_todo_service().update_todo(todo_id, current_user.user_id, payload)
    except NotFoundError:
        logger.warning(
            f"Update failed: Todo not found with id: {todo_id}",
            extra={**log_context, "action_type": "todo_update_failed"},
        )
        raise
    except BadRequestError as e:
        logger.warning(
            f"Update failed: {e.reason}",
            extra={**log_context, "action_type": "todo_update_failed"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error updating todo",
            exc_info=True,
            extra={**log_context, "action_type": "todo_update_error"},
        )
        raise TodoAppError("Server error") from e

    is_completed = bool(result.todo.get("completed"))
    if result.completion_changed:
        logger.info(
            "Todo marked as complete" if is_completed else "Todo unmarked as complete",
            extra={
                **log_context,
                "action_type": result.kind.value,
                "was_completed": result.was_completed,
                "is_completed": is_completed,
            },
        )
    else:
        logger.info(
            "Todo updated successfully",
            extra={**log_context, "action_type": result.kind.value, "is_completed": is_completed},
        )

    return ApiResponse(message="Todo updated successfully", data=TodoResponse.from_document(result.todo))


@router.delete("/{todo_id}", response_model=ApiResponse[TodoResponse], response_model_exclude_none=True)
@write_rate_limit
async def delete_todo(
    request: Request,
    todo_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ApiResponse[TodoResponse]:
    """
    Delete one of the caller's todos.

    Returns:
        The deleted todo

    Raises:
        NotFoundError: 404 if the todo does not exist or belongs to someone else
        TodoAppError: 500 if the database fails
    """
    log_context = {**_log_context(request, current_user), "todo_id": todo_id}

    try:
        todo = get_todo_service().delete_todo(todo_id, current_user.user_id)
    except NotFoundError:
        logger.warning(
            f"Delete failed: Todo not found with id: {todo_id}",
            extra={**log_context, "action_type": "todo_delete_failed"},
        )
        raise
    except Exception as e:
        logger.error(
            "Error deleting todo",
            exc_info=True,
            extra={**log_context, "action_type": "todo_delete_error"},
        )
        raise TodoAppError("Server error") from e

    logger.info(
        "Todo deleted successfully",
        extra={**log_context, "action_type": "todo_deleted", "todo_title": todo["title"]},
    )

    return ApiResponse(message="Todo deleted successfully", data=TodoResponse.from_document(todo))
