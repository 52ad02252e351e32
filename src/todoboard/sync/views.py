"""Client-side view of a todo."""

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    computed_field,
)

from todoboard.models.todo import Urgency
from todoboard.schemas.todo import Location, TodoResponse


def _read_only(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


# Copied on validation and never mutable afterwards; dumps as a plain dict
ReadOnlyMapping = Annotated[
    Mapping[str, Any],
    AfterValidator(_read_only),
    PlainSerializer(lambda value: dict(value), return_type=dict[str, Any]),
]


class TodoView(BaseModel):
    """Immutable todo as held by the sync layer.

    ``category_id`` and ``due_date`` are derived from ``category_ids`` and
    ``reminder`` on every read, so they cannot drift from them. ``extras``
    holds client-only data the server never sees; it survives every
    replacement of the view by a server response.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str | None = None
    completed: bool = False
    completed_at: datetime | None = None
    image_url: str | None = None
    reminder: datetime | None = None
    location: Location | None = None
    urgency: Urgency = Urgency.LOW
    category_ids: tuple[str, ...] = ()
    creator_id: str
    created_at: datetime
    updated_at: datetime
    extras: ReadOnlyMapping = Field(default_factory=lambda: MappingProxyType({}))

    @computed_field
    @property
    def category_id(self) -> str | None:
        return self.category_ids[0] if self.category_ids else None

    @computed_field
    @property
    def due_date(self) -> datetime | None:
        return self.reminder

    @classmethod
    def from_response(
        cls,
        response: TodoResponse,
        extras: Mapping[str, Any] | None = None,
    ) -> "TodoView":
        """Build a view from a server response, carrying over ``extras``."""
        return cls(**response.model_dump(), extras=extras or {})

    def with_changes(self, **changes: Any) -> "TodoView":
        """Return a copy with canonical fields replaced."""
        data = self.model_dump(exclude={"category_id", "due_date"})
        data.update(changes)
        return TodoView(**data)
