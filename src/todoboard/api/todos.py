"""Todo API endpoints."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from todoboard.api.auth import CurrentUser
from todoboard.api.errors import http_error, not_found
from todoboard.api.limiter import get_default_rate_limit, limiter
from todoboard.database import get_db
from todoboard.schemas.todo import TodoCreate, TodoUpdate, TodoResponse
from todoboard.services.exceptions import TodoBoardError
from todoboard.services.todo_service import TodoService

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("", response_model=list[TodoResponse])
async def list_todos(
    user_id: CurrentUser,
    completed: bool | None = None,
    category_id: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """List the current user's todos, newest first."""
    service = TodoService(db, user_id)
    try:
        todos = await service.get_all(completed=completed, category_id=category_id)
    except TodoBoardError as e:
        raise http_error(e) from e
    return [TodoResponse.model_validate(t) for t in todos]


@router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_default_rate_limit)
async def create_todo(
    request: Request,
    data: TodoCreate,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a new todo with its category associations."""
    service = TodoService(db, user_id)
    try:
        todo = await service.create(data)
    except TodoBoardError as e:
        raise http_error(e) from e
    return TodoResponse.model_validate(todo)


@router.get("/{todo_id}", response_model=TodoResponse)
async def get_todo(
    todo_id: str,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Get a single todo by ID."""
    service = TodoService(db, user_id)
    try:
        todo = await service.get_by_id(todo_id)
    except TodoBoardError as e:
        raise http_error(e) from e
    if not todo:
        raise not_found("Todo")
    return TodoResponse.model_validate(todo)


async def _update_todo_impl(
    todo_id: str,
    data: TodoUpdate,
    user_id: str | None,
    db: AsyncSession,
) -> TodoResponse:
    """Shared implementation for PUT and PATCH todo updates."""
    service = TodoService(db, user_id)
    try:
        todo = await service.update(todo_id, data)
    except TodoBoardError as e:
        raise http_error(e) from e
    if not todo:
        raise not_found("Todo")
    return TodoResponse.model_validate(todo)


@router.put("/{todo_id}", response_model=TodoResponse)
@limiter.limit(get_default_rate_limit)
async def update_todo(
    request: Request,
    todo_id: str,
    data: TodoUpdate,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Update a todo. Omitted fields keep their value, as with PATCH."""
    return await _update_todo_impl(todo_id, data, user_id, db)


@router.patch("/{todo_id}", response_model=TodoResponse)
@limiter.limit(get_default_rate_limit)
async def patch_todo(
    request: Request,
    todo_id: str,
    data: TodoUpdate,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Partially update a todo (only specified fields are modified)."""
    return await _update_todo_impl(todo_id, data, user_id, db)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_default_rate_limit)
async def delete_todo(
    request: Request,
    todo_id: str,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Delete a todo and its category associations."""
    service = TodoService(db, user_id)
    try:
        deleted = await service.delete(todo_id)
    except TodoBoardError as e:
        raise http_error(e) from e
    if not deleted:
        raise not_found("Todo")
