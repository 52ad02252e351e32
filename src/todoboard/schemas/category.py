"""Category schemas."""

from datetime import datetime

from pydantic import Field

from todoboard.schemas.base import BaseSchema


class CategoryCreate(BaseSchema):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$")


class CategoryUpdate(BaseSchema):
    """Schema for updating a category."""

    name: str | None = Field(None, min_length=1, max_length=100)
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class CategoryResponse(BaseSchema):
    """Schema for category responses."""

    id: str
    name: str
    color: str
    user_id: str
    created_at: datetime
