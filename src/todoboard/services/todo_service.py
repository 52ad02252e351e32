"""Business logic for todo and category operations."""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from todoboard.models import Category, Todo, TodoCategory
from todoboard.schemas.todo import TodoCreate, TodoUpdate
from todoboard.services.exceptions import StoreWriteError, UnauthenticatedError

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through an update
_NON_NULLABLE_FIELDS = ("title", "completed", "urgency")


class _OwnedService:
    """Common plumbing for services scoped to the current user."""

    def __init__(self, db: AsyncSession, user_id: str | None):
        self.db = db
        self.user_id = user_id

    def _require_user(self) -> str:
        if not self.user_id:
            raise UnauthenticatedError()
        return self.user_id

    async def _flush(self, action: str) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Could not {action}: {exc}") from exc


class TodoService(_OwnedService):
    """Service for todo CRUD operations.

    Keeps the ``todo_categories`` join rows in step with each todo: they
    are written together with the todo and never left half-applied.
    """

    def _owned_query(self):
        return (
            select(Todo)
            .options(selectinload(Todo.category_links))
            .where(Todo.creator_id == self._require_user())
            .execution_options(populate_existing=True)
        )

    async def get_all(
        self,
        *,
        completed: bool | None = None,
        category_id: str | None = None,
    ) -> list[Todo]:
        """Get the current user's todos, newest first."""
        query = self._owned_query()
        if completed is not None:
            query = query.where(Todo.completed == completed)
        if category_id:
            query = query.where(
                Todo.category_links.any(TodoCategory.category_id == category_id)
            )

        result = await self.db.execute(query.order_by(Todo.created_at.desc()))
        return list(result.scalars())

    async def get_by_id(self, todo_id: str) -> Todo | None:
        """Get a single owned todo by ID with its category links."""
        result = await self.db.execute(self._owned_query().where(Todo.id == todo_id))
        return result.scalar_one_or_none()

    async def create(self, data: TodoCreate) -> Todo:
        """Create a todo, then associate its categories.

        Every category must belong to the current user. If one does not,
        or the association insert fails, the todo row is deleted again
        before the error is raised, so no todo is left without the
        categories it was created with.
        """
        user_id = self._require_user()

        todo = Todo(
            title=data.title,
            content=data.content or "",
            image_url=data.image_url,
            reminder=data.reminder,
            location=data.location.model_dump() if data.location else None,
            urgency=data.urgency,
            creator_id=user_id,
            category_links=[],
        )
        if data.completed:
            todo.mark_complete()
        self.db.add(todo)
        await self._flush("create todo")

        if data.category_ids:
            todo_id = todo.id
            try:
                await self._require_owned_categories(data.category_ids)
                await self._insert_links(todo, data.category_ids)
            except StoreWriteError:
                logger.warning(
                    "Associating categories %s with todo %s failed, removing the todo",
                    data.category_ids,
                    todo_id,
                )
                await self._discard(todo, todo_id)
                raise

        logger.debug("Created todo %s with %d categories", todo.id, len(data.category_ids))
        return todo

    async def _require_owned_categories(self, category_ids: list[str]) -> None:
        """Reject ids that are not categories of the current user."""
        if not category_ids:
            return
        result = await self.db.execute(
            select(Category.id).where(
                Category.user_id == self._require_user(),
                Category.id.in_(category_ids),
            )
        )
        owned = set(result.scalars())
        unknown = [category_id for category_id in category_ids if category_id not in owned]
        if unknown:
            raise StoreWriteError(f"Unknown categories: {', '.join(unknown)}")

    async def _insert_links(self, todo: Todo, category_ids: list[str]) -> None:
        try:
            async with self.db.begin_nested():
                todo.category_links = [
                    TodoCategory(category_id=category_id, position=position)
                    for position, category_id in enumerate(category_ids)
                ]
        except SQLAlchemyError as exc:
            raise StoreWriteError(
                f"Could not associate categories with todo: {exc}"
            ) from exc

    async def _discard(self, todo: Todo, todo_id: str) -> None:
        """Compensating delete for a todo whose categories could not be stored."""
        # The savepoint rollback expired the instance; only its id is used
        await self.db.execute(
            delete(Todo)
            .where(Todo.id == todo_id)
            .execution_options(synchronize_session=False)
        )
        self.db.expunge(todo)

    async def update(self, todo_id: str, data: TodoUpdate) -> Todo | None:
        """Update only the fields set on ``data``.

        When ``category_ids`` is given the association set is replaced
        wholesale, in the given order; ids that are not the current user's
        categories are rejected before anything is written. Scalar fields
        and associations are written in one savepoint, so a failure leaves
        the todo exactly as it was.
        """
        todo = await self.get_by_id(todo_id)
        if not todo:
            return None

        update_data = data.model_dump(exclude_unset=True)
        category_ids = update_data.pop("category_ids", None)
        for key in _NON_NULLABLE_FIELDS:
            if key in update_data and update_data[key] is None:
                del update_data[key]
        if category_ids:
            await self._require_owned_categories(category_ids)

        try:
            async with self.db.begin_nested():
                if "completed" in update_data:
                    if update_data.pop("completed"):
                        todo.mark_complete()
                    else:
                        todo.mark_incomplete()

                for key, value in update_data.items():
                    setattr(todo, key, value)

                if category_ids is not None:
                    self._replace_links(todo, category_ids)

                todo.updated_at = datetime.now(timezone.utc)
        except SQLAlchemyError as exc:
            logger.warning("Update of todo %s rolled back: %s", todo_id, exc)
            raise StoreWriteError(f"Could not update todo {todo_id}: {exc}") from exc

        return todo

    @staticmethod
    def _replace_links(todo: Todo, category_ids: list[str]) -> None:
        """Make the todo's links match ``category_ids`` exactly.

        Links that survive are kept and only renumbered, dropped ones are
        deleted as orphans and only the new pairs are inserted.
        """
        existing = {link.category_id: link for link in todo.category_links}
        links = []
        for position, category_id in enumerate(category_ids):
            link = existing.get(category_id) or TodoCategory(category_id=category_id)
            link.position = position
            links.append(link)
        todo.category_links = links

    async def delete(self, todo_id: str) -> bool:
        """Delete a todo together with its category links."""
        todo = await self.get_by_id(todo_id)
        if not todo:
            return False
        await self.db.delete(todo)
        await self._flush(f"delete todo {todo_id}")
        return True


class CategoryService(_OwnedService):
    """Service for category operations."""

    async def get_all(self) -> list[Category]:
        """Get the current user's categories ordered by name."""
        result = await self.db.execute(
            select(Category)
            .where(Category.user_id == self._require_user())
            .order_by(Category.name, Category.created_at)
        )
        return list(result.scalars())

    async def get_by_id(self, category_id: str) -> Category | None:
        """Get an owned category by ID."""
        result = await self.db.execute(
            select(Category).where(
                Category.id == category_id,
                Category.user_id == self._require_user(),
            )
        )
        return result.scalar_one_or_none()

    async def create(self, name: str, color: str) -> Category:
        """Create a new category."""
        category = Category(name=name, color=color, user_id=self._require_user())
        self.db.add(category)
        await self._flush("create category")
        return category

    async def update(self, category_id: str, **kwargs) -> Category | None:
        """Update a category."""
        category = await self.get_by_id(category_id)
        if not category:
            return None
        for key, value in kwargs.items():
            if key in ("name", "color") and value is not None:
                setattr(category, key, value)
        await self._flush(f"update category {category_id}")
        return category

    async def delete(self, category_id: str) -> bool:
        """Delete a category; its todo links go with it (ON DELETE CASCADE)."""
        category = await self.get_by_id(category_id)
        if not category:
            return False
        await self.db.delete(category)
        await self._flush(f"delete category {category_id}")
        return True

    async def seed_defaults(self) -> bool:
        """Create the default categories if the user has none.

        Returns:
            True when defaults were created, False if categories existed.
        """
        existing = await self.get_all()
        if existing:
            return False
        for category in Category.get_defaults(self._require_user()):
            self.db.add(category)
        await self._flush("create default categories")
        logger.info("Created default categories for user %s", self.user_id)
        return True
