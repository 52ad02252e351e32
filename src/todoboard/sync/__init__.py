"""Client-side synchronization of todos and categories."""

from todoboard.sync.backend import HttpBackend, LocalBackend, TodoBackend
from todoboard.sync.store import UNSET, Notice, TodoStore
from todoboard.sync.views import TodoView

__all__ = [
    "TodoStore",
    "TodoView",
    "Notice",
    "UNSET",
    "TodoBackend",
    "LocalBackend",
    "HttpBackend",
]
