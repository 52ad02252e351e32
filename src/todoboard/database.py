"""Database connection and session management."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from todoboard.config import get_settings


# Lazy initialization of database engine and session maker
# This avoids creating connections at import time, improving testability
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def configure_sqlite(engine: AsyncEngine) -> AsyncEngine:
    """Enable foreign keys and working savepoints on an aiosqlite engine.

    The sqlite driver defers BEGIN until the first DML statement, which
    breaks SAVEPOINT handling; BEGIN is emitted explicitly instead.
    Non-sqlite engines are returned untouched.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def get_engine() -> AsyncEngine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = configure_sqlite(
            create_async_engine(
                settings.database_url,
                echo=settings.debug,
            )
        )
    return _engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get or create the async session maker (lazy initialization)."""
    global _async_session_maker
    if _async_session_maker is None:
        _async_session_maker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Commits when the request handler succeeds and rolls back on any error,
    so a failed todo/category write never leaves partial rows behind.
    """
    async with get_async_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Initialize database tables."""
    from todoboard.models import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    global _engine, _async_session_maker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None


def reset_db_state() -> None:
    """Reset database state for testing.

    This clears the cached engine and session maker, allowing tests
    to configure a fresh database connection.
    """
    global _engine, _async_session_maker
    _engine = None
    _async_session_maker = None
