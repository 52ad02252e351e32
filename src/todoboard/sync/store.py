"""In-memory todo/category state kept in sync with a backend.

One ``TodoStore`` is created per session and owns its state; nothing is
shared between instances. Every mutation is confirmed by the backend
before it becomes visible, except ``update_todo_categories`` which is
applied optimistically and rolled back on failure.

Two mutations on the same todo are not serialized: whichever backend
response arrives last overwrites the local entry.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from todoboard.models.todo import Urgency
from todoboard.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from todoboard.schemas.todo import Location, TodoCreate, TodoResponse, TodoUpdate
from todoboard.sync.backend import TodoBackend
from todoboard.sync.views import TodoView

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for arguments that were not passed."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Notice:
    """Outcome of a mutation, for toasts or status lines."""

    title: str
    description: str
    level: str = "info"  # "info" or "error"


Notifier = Callable[[Notice], None]


class TodoStore:
    """Session-scoped todo and category state.

    Args:
        backend: Store the mutations are sent to.
        notify: Optional callback receiving a ``Notice`` per outcome.
    """

    def __init__(self, backend: TodoBackend, notify: Notifier | None = None):
        self.backend = backend
        self._notify_callback = notify
        self._todos: list[TodoView] = []
        self._categories: list[CategoryResponse] = []

    # ---------- read-only state ----------

    @property
    def todos(self) -> tuple[TodoView, ...]:
        return tuple(self._todos)

    @property
    def categories(self) -> tuple[CategoryResponse, ...]:
        return tuple(self._categories)

    def get_todo(self, todo_id: str) -> TodoView | None:
        return next((t for t in self._todos if t.id == todo_id), None)

    def get_category(self, category_id: str) -> CategoryResponse | None:
        return next((c for c in self._categories if c.id == category_id), None)

    def annotate(self, todo_id: str, **extras: Any) -> TodoView | None:
        """Attach client-only data to a todo; it is never sent to the backend."""
        current = self.get_todo(todo_id)
        if current is None:
            return None
        view = current.with_changes(extras={**current.extras, **extras})
        self._replace(view)
        return view

    # ---------- helpers ----------

    def _notify(self, title: str, description: str, level: str = "info") -> None:
        log = logger.warning if level == "error" else logger.info
        log("%s: %s", title, description)
        if self._notify_callback is not None:
            self._notify_callback(Notice(title, description, level))

    def _replace(self, view: TodoView) -> None:
        """Swap in ``view`` for the entry with the same id, if still present."""
        for index, current in enumerate(self._todos):
            if current.id == view.id:
                self._todos[index] = view
                return

    def _reconcile(self, response: TodoResponse) -> TodoView:
        """Replace the local entry with the server's copy, keeping extras."""
        current = self.get_todo(response.id)
        view = TodoView.from_response(
            response, extras=current.extras if current is not None else None
        )
        self._replace(view)
        return view

    async def _optimistic(
        self,
        todo_id: str,
        mutate: Callable[[TodoView], TodoView],
        commit: Callable[[TodoView], Awaitable[TodoResponse]],
    ) -> TodoView | None:
        """Apply ``mutate`` locally, then confirm it with ``commit``.

        The entry as it was before the call is restored if ``commit``
        raises or is cancelled; the error is re-raised afterwards.
        """
        snapshot = self.get_todo(todo_id)
        if snapshot is None:
            return None

        speculative = mutate(snapshot)
        self._replace(speculative)
        try:
            response = await commit(speculative)
        except BaseException:
            self._replace(snapshot)
            raise
        return self._reconcile(response)

    # ---------- todos ----------

    async def load(self) -> None:
        """Replace local state with the backend's todos and categories."""
        todos = await self.backend.list_todos()
        categories = await self.backend.list_categories()
        self._todos = [TodoView.from_response(t) for t in todos]
        self._categories = list(categories)

    async def add_todo(
        self,
        title: str,
        category_id: str | None = None,
        content: str | None = None,
        reminder: datetime | None = None,
        location: Location | None = None,
        urgency: Urgency = Urgency.LOW,
    ) -> TodoView:
        """Create a todo and put it at the head of the list once stored."""
        data = TodoCreate(
            title=title,
            content=content,
            reminder=reminder,
            location=location,
            urgency=urgency,
            category_ids=[category_id] if category_id else [],
        )
        try:
            response = await self.backend.create_todo(data)
        except Exception as exc:
            self._notify("Error adding todo", str(exc), "error")
            raise

        view = TodoView.from_response(response)
        self._todos.insert(0, view)
        self._notify("Todo added", f"{view.title!r} has been added.")
        return view

    async def toggle_todo(self, todo_id: str) -> TodoView | None:
        """Flip ``completed``; unknown ids are ignored."""
        current = self.get_todo(todo_id)
        if current is None:
            return None

        try:
            response = await self.backend.update_todo(
                todo_id, TodoUpdate(completed=not current.completed)
            )
        except Exception as exc:
            self._notify("Error updating todo", str(exc), "error")
            raise
        return self._reconcile(response)

    async def update_todo_content(
        self,
        todo_id: str,
        content: str | None,
        reminder: datetime | None = UNSET,
        location: Location | None = UNSET,
        title: str = UNSET,
        urgency: Urgency = UNSET,
    ) -> TodoView | None:
        """Update content and any other passed fields of a todo.

        Arguments left as ``UNSET`` keep their current value; ``None``
        clears reminder and location. Unknown ids are ignored.
        """
        current = self.get_todo(todo_id)
        if current is None:
            return None

        changes: dict[str, Any] = {"content": content}
        for name, value in (
            ("reminder", reminder),
            ("location", location),
            ("title", title),
            ("urgency", urgency),
        ):
            if value is not UNSET:
                changes[name] = value
        merged = current.with_changes(**changes)

        data = TodoUpdate(
            title=merged.title,
            content=merged.content,
            reminder=merged.reminder,
            location=merged.location,
            urgency=merged.urgency,
        )
        try:
            response = await self.backend.update_todo(todo_id, data)
        except Exception as exc:
            self._notify("Error updating todo", str(exc), "error")
            raise

        view = self._reconcile(response)
        self._notify("Todo updated", f"{view.title!r} has been updated.")
        return view

    async def update_todo_categories(
        self, todo_id: str, category_ids: list[str]
    ) -> TodoView | None:
        """Replace a todo's categories, showing the change right away.

        The new set is visible before the backend confirms it and is
        rolled back if the backend call fails. Unknown ids are ignored.
        """
        category_ids = list(dict.fromkeys(category_ids))

        async def commit(view: TodoView) -> TodoResponse:
            return await self.backend.update_todo(
                todo_id, TodoUpdate(category_ids=list(view.category_ids))
            )

        try:
            return await self._optimistic(
                todo_id,
                lambda view: view.with_changes(category_ids=category_ids),
                commit,
            )
        except Exception as exc:
            self._notify("Error updating categories", str(exc), "error")
            raise

    async def delete_todo(self, todo_id: str) -> None:
        """Delete a todo; it stays visible if the backend refuses."""
        try:
            await self.backend.delete_todo(todo_id)
        except Exception as exc:
            self._notify("Error deleting todo", str(exc), "error")
            raise

        self._todos = [t for t in self._todos if t.id != todo_id]
        self._notify("Todo deleted", "The todo has been deleted.")

    # ---------- categories ----------

    async def add_category(self, name: str, color: str) -> CategoryResponse:
        try:
            category = await self.backend.create_category(
                CategoryCreate(name=name, color=color)
            )
        except Exception as exc:
            self._notify("Error adding category", str(exc), "error")
            raise

        self._categories.append(category)
        self._categories.sort(key=lambda c: c.name)
        self._notify("Category added", f"{category.name!r} has been added.")
        return category

    async def update_category(
        self,
        category_id: str,
        name: str = UNSET,
        color: str = UNSET,
    ) -> CategoryResponse:
        changes = {
            key: value
            for key, value in (("name", name), ("color", color))
            if value is not UNSET
        }
        try:
            category = await self.backend.update_category(
                category_id, CategoryUpdate(**changes)
            )
        except Exception as exc:
            self._notify("Error updating category", str(exc), "error")
            raise

        self._categories = [
            category if c.id == category_id else c for c in self._categories
        ]
        self._categories.sort(key=lambda c: c.name)
        return category

    async def delete_category(self, category_id: str) -> None:
        """Delete a category.

        Todos referencing it keep the id in their local ``category_ids``
        until they are reloaded; use ``filters.live_category_ids`` when
        rendering.
        """
        try:
            await self.backend.delete_category(category_id)
        except Exception as exc:
            self._notify("Error deleting category", str(exc), "error")
            raise

        self._categories = [c for c in self._categories if c.id != category_id]
        self._notify("Category deleted", "The category has been deleted.")

    async def setup_default_categories(self) -> tuple[CategoryResponse, ...]:
        """Seed the default categories when the user has none yet.

        Local categories are replaced by the backend's list afterwards.
        """
        try:
            categories = await self.backend.seed_default_categories()
        except Exception as exc:
            self._notify("Error setting up categories", str(exc), "error")
            raise

        self._categories = list(categories)
        return self.categories
