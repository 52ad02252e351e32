"""Business logic services for todoboard."""

from todoboard.services.exceptions import (
    NotFoundError,
    StoreWriteError,
    TodoBoardError,
    UnauthenticatedError,
)
from todoboard.services.todo_service import CategoryService, TodoService

__all__ = [
    "TodoService",
    "CategoryService",
    "TodoBoardError",
    "UnauthenticatedError",
    "StoreWriteError",
    "NotFoundError",
]
