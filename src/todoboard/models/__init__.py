"""SQLAlchemy models for todoboard."""

from todoboard.models.base import Base
from todoboard.models.todo import Todo, TodoCategory, Urgency
from todoboard.models.category import Category

__all__ = [
    "Base",
    "Todo",
    "TodoCategory",
    "Urgency",
    "Category",
]
