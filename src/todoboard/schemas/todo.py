"""Todo schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from todoboard.models.todo import Urgency
from todoboard.schemas.base import BaseSchema


class Location(BaseModel):
    """Geolocation attached to a todo."""

    address: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


def _unique_ids(value: list[str] | None) -> list[str] | None:
    """Collapse duplicate ids, keeping first-occurrence order."""
    if value is None:
        return None
    return list(dict.fromkeys(value))


class TodoCreate(BaseSchema):
    """Schema for creating a todo."""

    title: str = Field(..., min_length=1, max_length=500)
    content: str | None = None
    completed: bool = False
    image_url: str | None = Field(None, max_length=2048)
    reminder: datetime | None = None
    location: Location | None = None
    urgency: Urgency = Urgency.LOW
    category_ids: list[str] = Field(default_factory=list)

    _dedupe_category_ids = field_validator("category_ids")(_unique_ids)


class TodoUpdate(BaseSchema):
    """Schema for updating a todo.

    Only fields that are explicitly set are written; an explicit
    ``category_ids=[]`` clears every association.
    """

    title: str | None = Field(None, min_length=1, max_length=500)
    content: str | None = None
    completed: bool | None = None
    image_url: str | None = Field(None, max_length=2048)
    reminder: datetime | None = None
    location: Location | None = None
    urgency: Urgency | None = None
    category_ids: list[str] | None = None

    _dedupe_category_ids = field_validator("category_ids")(_unique_ids)


class TodoResponse(BaseSchema):
    """Schema for todo responses."""

    id: str
    title: str
    content: str | None
    completed: bool
    completed_at: datetime | None = None
    image_url: str | None = None
    reminder: datetime | None
    location: Location | None
    urgency: Urgency
    category_ids: list[str] = Field(default_factory=list)
    creator_id: str
    created_at: datetime
    updated_at: datetime
