"""Todo model - the core entity of todoboard."""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todoboard.models.base import Base, UTCDateTime


class Urgency(str, enum.Enum):
    """Ordinal urgency level: low < medium < high < urgent."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return list(Urgency).index(self)


class TodoCategory(Base):
    """Association table for Todo-Category many-to-many relationship."""

    __tablename__ = "todo_categories"

    todo_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("todos.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Index in the todo's category_ids; the first one is its primary category
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    todo: Mapped["Todo"] = relationship(back_populates="category_links")

    def __repr__(self) -> str:
        return f"<TodoCategory(todo_id={self.todo_id!r}, category_id={self.category_id!r})>"


class Todo(Base):
    """Todo item owned by a single user."""

    __tablename__ = "todos"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str | None] = mapped_column(Text)  # Rich HTML body
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    image_url: Mapped[str | None] = mapped_column(String(2048))
    reminder: Mapped[datetime | None] = mapped_column(UTCDateTime())
    # {"address": str, "lat": float, "lng": float}
    location: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    urgency: Mapped[Urgency] = mapped_column(
        Enum(
            Urgency,
            native_enum=False,
            length=10,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=Urgency.LOW,
    )
    creator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    # Join rows are removed by ON DELETE CASCADE, not loaded for deletion
    category_links: Mapped[list[TodoCategory]] = relationship(
        back_populates="todo",
        order_by=TodoCategory.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def category_ids(self) -> list[str]:
        """Ids of the categories this todo is associated with."""
        return [link.category_id for link in self.category_links]

    def mark_complete(self) -> None:
        """Mark the todo as completed."""
        self.completed = True
        self.completed_at = datetime.now(timezone.utc)

    def mark_incomplete(self) -> None:
        """Mark the todo as incomplete."""
        self.completed = False
        self.completed_at = None

    def __repr__(self) -> str:
        status = "done" if self.completed else "pending"
        return f"<Todo(title={self.title!r}, status={status})>"
