"""Pydantic schemas for todoboard API."""

from todoboard.schemas.todo import (
    Location,
    TodoCreate,
    TodoUpdate,
    TodoResponse,
)
from todoboard.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)

__all__ = [
    "Location",
    "TodoCreate",
    "TodoUpdate",
    "TodoResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
]
