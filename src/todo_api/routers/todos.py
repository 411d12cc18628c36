from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from ..logger import get_logger
from ..repositories import EmptyUpdateError, Repository
from ..schemas import (
    DeleteResult,
    ErrorResponse,
    TodoCreate,
    TodoEnvelope,
    TodoListEnvelope,
    TodoOut,
    TodoUpdate,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

NOT_FOUND = "Todo not found."

_errors = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}
_item_errors = {**_errors, 404: {"model": ErrorResponse, "description": "Todo not found"}}


def _get_repo(request: Request) -> Repository:
    """
    Dependency returning the repository owned by the application.
    """
    return request.app.state.repository


TodoId = Annotated[int, Path(gt=0, description="Positive integer id of the todo item")]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoListEnvelope,
    summary="List Todos",
    description="List every todo, newest first.",
    responses={500: _errors[500]},
)
async def list_todos(repo: Repository = Depends(_get_repo)) -> TodoListEnvelope:
    try:
        items = await repo.list()
    except Exception:
        logger.exception("Failed to list todos")
        raise HTTPException(status_code=500, detail="Unable to load todos right now.")
    return TodoListEnvelope(data=[TodoOut(**it) for it in items])


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses=_errors,
)
async def create_todo(payload: TodoCreate, repo: Repository = Depends(_get_repo)) -> TodoEnvelope:
    try:
        created = await repo.create(payload.title)
    except Exception:
        logger.exception("Failed to create todo")
        raise HTTPException(status_code=500, detail="Unable to create todo right now.")
    return TodoEnvelope(data=TodoOut(**created))


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Update Todo",
    description="Change the title and/or completed flag of a Todo item.",
    responses=_item_errors,
)
async def patch_todo(
    payload: TodoUpdate,
    todo_id: TodoId,
    repo: Repository = Depends(_get_repo),
) -> TodoEnvelope:
    try:
        updated = await repo.update(todo_id, payload.to_changes())
    except EmptyUpdateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except Exception:
        logger.exception("Failed to update todo #%s", todo_id)
        raise HTTPException(status_code=500, detail="Unable to update todo right now.")
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return TodoEnvelope(data=TodoOut(**updated))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=DeleteResult,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses=_item_errors,
)
async def delete_todo(todo_id: TodoId, repo: Repository = Depends(_get_repo)) -> DeleteResult:
    try:
        removed = await repo.delete(todo_id)
    except Exception:
        logger.exception("Failed to delete todo #%s", todo_id)
        raise HTTPException(status_code=500, detail="Unable to delete todo right now.")
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return DeleteResult(success=True)
