"""Pure filtering and ordering helpers over reconciled todo views."""

from collections.abc import Iterable, Sequence

from todoboard.schemas.category import CategoryResponse
from todoboard.sync.views import TodoView


def search(todos: Iterable[TodoView], query: str) -> list[TodoView]:
    """Todos whose title or content contains ``query`` (case-insensitive)."""
    needle = query.strip().lower()
    if not needle:
        return list(todos)
    return [
        todo
        for todo in todos
        if needle in todo.title.lower() or needle in (todo.content or "").lower()
    ]


def filter_by_completion(
    todos: Iterable[TodoView], completed: bool | None
) -> list[TodoView]:
    """Keep todos with the given completion state; None keeps all."""
    if completed is None:
        return list(todos)
    return [todo for todo in todos if todo.completed is completed]


def filter_by_category(
    todos: Iterable[TodoView], category_id: str | None
) -> list[TodoView]:
    """Keep todos associated with ``category_id``; None keeps all."""
    if category_id is None:
        return list(todos)
    return [todo for todo in todos if category_id in todo.category_ids]


def sort_by_urgency(todos: Iterable[TodoView]) -> list[TodoView]:
    """Most urgent first; ties keep their current (newest-first) order."""
    return sorted(todos, key=lambda todo: todo.urgency.rank, reverse=True)


def live_category_ids(
    todo: TodoView, categories: Sequence[CategoryResponse]
) -> list[str]:
    """The todo's category ids that still name an existing category."""
    known = {category.id for category in categories}
    return [category_id for category_id in todo.category_ids if category_id in known]
