"""Pytest configuration and fixtures."""

import os

# Must be set before the settings are first read
os.environ.setdefault("TODOBOARD_RATE_LIMIT_ENABLED", "false")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from todoboard.models import Base
from todoboard.main import create_app
from todoboard.database import configure_sqlite, get_db
from todoboard.sync import HttpBackend, LocalBackend, TodoStore

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
async def test_engine():
    """Create a test database engine."""
    engine = configure_sqlite(
        create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=False,
        )
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def app(session_maker):
    """Application wired to the test database."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
async def client(app):
    """Create a test client acting as USER_ID."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": USER_ID},
    ) as ac:
        yield ac


@pytest.fixture
async def anonymous_client(app):
    """Create a test client without a user."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def local_backend(session_maker):
    """In-process backend acting as USER_ID."""
    return LocalBackend(session_maker, USER_ID)


@pytest.fixture
def notices():
    """Collects the notices emitted by the store."""
    return []


@pytest.fixture
def store(local_backend, notices):
    """Sync store over the in-process backend."""
    return TodoStore(local_backend, notify=notices.append)


@pytest.fixture
def http_store(client, notices):
    """Sync store over the REST API."""
    return TodoStore(HttpBackend(client), notify=notices.append)
