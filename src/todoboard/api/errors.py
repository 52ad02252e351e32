"""Translation of domain errors into HTTP errors."""

from fastapi import HTTPException, status

from todoboard.services.exceptions import (
    NotFoundError,
    TodoBoardError,
    UnauthenticatedError,
)


def http_error(exc: TodoBoardError) -> HTTPException:
    """Map a service error onto the matching HTTP status."""
    if isinstance(exc, UnauthenticatedError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "ApiKey"},
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.message,
        )
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=exc.message,
    )


def not_found(what: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{what} not found",
    )
