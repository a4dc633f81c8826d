"""Database connection management.

Provides async database connection using SQLAlchemy. PostgreSQL (asyncpg)
is the managed store in production; SQLite (aiosqlite) is used for local
development and tests.

## Configuration

- DATABASE_URL: Full connection string
- DATABASE_POOL_SIZE: Connection pool size (default: 5, PostgreSQL only)
- DATABASE_MAX_OVERFLOW: Max overflow connections (default: 10, PostgreSQL only)

## Usage

```python
from event_planner.database import get_db, init_db

# Initialize on startup
await init_db()

async with get_db() as session:
    row = await session.get(EventRow, event_id)
```
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from event_planner.config import Settings, get_settings
from event_planner.database.models import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


class DatabaseNotInitializedError(RuntimeError):
    """Raised when the database is used before `init_db()`."""

    def __init__(self) -> None:
        super().__init__("Database not initialized. Call init_db() first.")


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def init_db(settings: Settings | None = None) -> None:
    """Initialize the database connection.

    Creates the async engine and session factory. Should be called
    once on application startup.
    """
    global _engine, _session_factory

    settings = settings or get_settings()

    logger.info("Initializing database connection")

    engine_options: dict[str, Any] = {"echo": settings.database_echo}
    if settings.uses_sqlite:
        # One shared connection so in-memory databases survive across sessions
        engine_options["poolclass"] = StaticPool
    else:
        engine_options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )

    _engine = create_async_engine(settings.database_url, **engine_options)

    if settings.uses_sqlite:
        event.listen(_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("Database connection initialized")


async def close_db() -> None:
    """Close the database connection.

    Should be called on application shutdown.
    """
    global _engine, _session_factory

    if _engine:
        logger.info("Closing database connection")
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def create_tables() -> None:
    """Create all database tables.

    For development/testing only. The managed database owns the schema,
    including row-level security policies and update triggers.
    """
    if _engine is None:
        raise DatabaseNotInitializedError()

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created")


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session.

    Use as an async context manager:
    ```python
    async with get_db() as session:
        # Use session
        await session.commit()
    ```

    The session is automatically closed when the context exits.
    Transactions are not automatically committed - call commit() explicitly.
    """
    if _session_factory is None:
        raise DatabaseNotInitializedError()

    session = _session_factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


