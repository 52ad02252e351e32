"""Persistence backends used by the sync layer.

``LocalBackend`` calls the services in-process, ``HttpBackend`` talks to
the REST API. Both return API schemas and raise the domain errors from
``todoboard.services.exceptions``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from todoboard.config import get_settings
from todoboard.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from todoboard.schemas.todo import TodoCreate, TodoResponse, TodoUpdate
from todoboard.services.exceptions import (
    NotFoundError,
    StoreWriteError,
    UnauthenticatedError,
)
from todoboard.services.todo_service import CategoryService, TodoService

logger = logging.getLogger(__name__)


class TodoBackend(Protocol):
    """Operations the sync layer needs from a store."""

    async def list_todos(self) -> list[TodoResponse]: ...

    async def create_todo(self, data: TodoCreate) -> TodoResponse: ...

    async def update_todo(self, todo_id: str, data: TodoUpdate) -> TodoResponse: ...

    async def delete_todo(self, todo_id: str) -> None: ...

    async def list_categories(self) -> list[CategoryResponse]: ...

    async def create_category(self, data: CategoryCreate) -> CategoryResponse: ...

    async def update_category(
        self, category_id: str, data: CategoryUpdate
    ) -> CategoryResponse: ...

    async def delete_category(self, category_id: str) -> None: ...

    async def seed_default_categories(self) -> list[CategoryResponse]: ...


class LocalBackend:
    """Backend running the services against a database session per call."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        user_id: str | None,
    ):
        self.session_maker = session_maker
        self.user_id = user_id

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def list_todos(self) -> list[TodoResponse]:
        async with self._session() as session:
            todos = await TodoService(session, self.user_id).get_all()
            return [TodoResponse.model_validate(t) for t in todos]

    async def create_todo(self, data: TodoCreate) -> TodoResponse:
        async with self._session() as session:
            todo = await TodoService(session, self.user_id).create(data)
            return TodoResponse.model_validate(todo)

    async def update_todo(self, todo_id: str, data: TodoUpdate) -> TodoResponse:
        async with self._session() as session:
            todo = await TodoService(session, self.user_id).update(todo_id, data)
            if not todo:
                raise NotFoundError(f"Todo {todo_id} not found")
            return TodoResponse.model_validate(todo)

    async def delete_todo(self, todo_id: str) -> None:
        async with self._session() as session:
            if not await TodoService(session, self.user_id).delete(todo_id):
                raise NotFoundError(f"Todo {todo_id} not found")

    async def list_categories(self) -> list[CategoryResponse]:
        async with self._session() as session:
            categories = await CategoryService(session, self.user_id).get_all()
            return [CategoryResponse.model_validate(c) for c in categories]

    async def create_category(self, data: CategoryCreate) -> CategoryResponse:
        async with self._session() as session:
            category = await CategoryService(session, self.user_id).create(
                name=data.name, color=data.color
            )
            return CategoryResponse.model_validate(category)

    async def update_category(
        self, category_id: str, data: CategoryUpdate
    ) -> CategoryResponse:
        async with self._session() as session:
            category = await CategoryService(session, self.user_id).update(
                category_id, **data.model_dump(exclude_unset=True)
            )
            if not category:
                raise NotFoundError(f"Category {category_id} not found")
            return CategoryResponse.model_validate(category)

    async def delete_category(self, category_id: str) -> None:
        async with self._session() as session:
            if not await CategoryService(session, self.user_id).delete(category_id):
                raise NotFoundError(f"Category {category_id} not found")

    async def seed_default_categories(self) -> list[CategoryResponse]:
        async with self._session() as session:
            service = CategoryService(session, self.user_id)
            await service.seed_defaults()
            return [CategoryResponse.model_validate(c) for c in await service.get_all()]


class HttpBackend:
    """Backend talking to the todoboard REST API.

    Every failure, including transport errors and timeouts, surfaces as
    one domain error per call; nothing is retried.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_settings(
        cls,
        user_id: str | None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> "HttpBackend":
        """Create a backend with a client configured from settings."""
        settings = get_settings()
        headers = {}
        if user_id:
            headers["X-User-Id"] = user_id
        if api_key or settings.api_key:
            headers["X-API-Key"] = api_key or settings.api_key
        client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers=headers,
            timeout=settings.api_timeout_seconds,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise StoreWriteError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise UnauthenticatedError(_detail(response))
        if response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(_detail(response))
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StoreWriteError(_detail(response)) from exc
        return response

    async def list_todos(self) -> list[TodoResponse]:
        response = await self._request("GET", "/api/todos")
        return [TodoResponse.model_validate(item) for item in response.json()]

    async def create_todo(self, data: TodoCreate) -> TodoResponse:
        response = await self._request(
            "POST", "/api/todos", json=data.model_dump(mode="json")
        )
        return TodoResponse.model_validate(response.json())

    async def update_todo(self, todo_id: str, data: TodoUpdate) -> TodoResponse:
        response = await self._request(
            "PATCH",
            f"/api/todos/{todo_id}",
            json=data.model_dump(mode="json", exclude_unset=True),
        )
        return TodoResponse.model_validate(response.json())

    async def delete_todo(self, todo_id: str) -> None:
        await self._request("DELETE", f"/api/todos/{todo_id}")

    async def list_categories(self) -> list[CategoryResponse]:
        response = await self._request("GET", "/api/categories")
        return [CategoryResponse.model_validate(item) for item in response.json()]

    async def create_category(self, data: CategoryCreate) -> CategoryResponse:
        response = await self._request(
            "POST", "/api/categories", json=data.model_dump(mode="json")
        )
        return CategoryResponse.model_validate(response.json())

    async def update_category(
        self, category_id: str, data: CategoryUpdate
    ) -> CategoryResponse:
        response = await self._request(
            "PUT",
            f"/api/categories/{category_id}",
            json=data.model_dump(mode="json", exclude_unset=True),
        )
        return CategoryResponse.model_validate(response.json())

    async def delete_category(self, category_id: str) -> None:
        await self._request("DELETE", f"/api/categories/{category_id}")

    async def seed_default_categories(self) -> list[CategoryResponse]:
        response = await self._request("POST", "/api/categories/defaults")
        return [CategoryResponse.model_validate(item) for item in response.json()]


def _detail(response: httpx.Response) -> str:
    """Extract FastAPI's ``detail`` message, falling back to the body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    return str(detail) if detail else f"HTTP {response.status_code}: {response.text}"
