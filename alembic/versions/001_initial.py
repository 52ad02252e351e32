"""Initial migration - create all tables.

Revision ID: 001
Revises:
Create Date: 2024-01-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Categories table
    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # Todos table
    op.create_table(
        "todos",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text),
        sa.Column("completed", sa.Boolean, default=False),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("image_url", sa.String(2048)),
        sa.Column("reminder", sa.DateTime(timezone=True)),
        sa.Column("location", sa.JSON),
        sa.Column("urgency", sa.String(10), default="low"),
        sa.Column("creator_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    # Todo-Category association table
    op.create_table(
        "todo_categories",
        sa.Column("todo_id", sa.String(36), sa.ForeignKey("todos.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    # Create indexes for common queries
    op.create_index("ix_categories_user_id", "categories", ["user_id"])
    op.create_index("ix_todos_creator_id", "todos", ["creator_id"])
    op.create_index("ix_todos_created_at", "todos", ["created_at"])
    op.create_index("ix_todo_categories_category_id", "todo_categories", ["category_id"])


def downgrade() -> None:
    op.drop_table("todo_categories")
    op.drop_table("todos")
    op.drop_table("categories")
