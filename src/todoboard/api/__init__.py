"""HTTP API for todoboard."""

from todoboard.api.routes import router

__all__ = ["router"]
