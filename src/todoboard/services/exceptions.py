"""Domain errors raised by the repositories and sync backends."""


class TodoBoardError(Exception):
    """Base class for todoboard errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(TodoBoardError):
    """No current user when an owned resource is read or written."""

    def __init__(self, message: str = "No authenticated user found"):
        super().__init__(message)


class StoreWriteError(TodoBoardError):
    """The store rejected an insert, update or delete."""


class NotFoundError(TodoBoardError):
    """The targeted todo or category does not exist for the current user."""
