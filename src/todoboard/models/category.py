"""Category model for organizing todos."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from todoboard.models.base import Base, UTCDateTime


# Created for a user that has no categories yet
DEFAULT_CATEGORIES = [
    ("Personal", "#E5DEFF"),
    ("Work", "#FDE1D3"),
    ("Shopping", "#D3E4FD"),
    ("Health", "#FFE5E5"),
]


class Category(Base):
    """User-defined label attachable to any number of todos."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    # Names are not unique, not even per user
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)  # Hex color like #FF0000
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=lambda: datetime.now(timezone.utc),
    )

    @classmethod
    def get_defaults(cls, user_id: str) -> list["Category"]:
        """Get the default categories for seeding a new user."""
        return [
            cls(name=name, color=color, user_id=user_id)
            for name, color in DEFAULT_CATEGORIES
        ]

    def __repr__(self) -> str:
        return f"<Category(name={self.name!r})>"
