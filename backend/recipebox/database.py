"""
RecipeBox Backend — SQL Engine & Session Management
=====================================================

What:  Async SQLAlchemy engine and session factory for the SQL storage variant.
Why:   Centralizes all SQL connection logic in one place.
How:   build_engine() creates an async engine with connection pooling;
       build_session_factory() hands out one AsyncSession per storage call.
Who:   Used by the backend factory (DATA_BACKEND=sql) and by alembic/env.py.
When:  The engine is created once at app construction and disposed on shutdown.

Architecture Decision:
    The engine is built from a Settings object and handed to the storage
    layer explicitly, never created at import time. Tests build their own
    engine against a throwaway SQLite file.

Connection Pooling Strategy:
    pool_size / max_overflow from settings, pre-ping to catch stale
    connections, recycle hourly. SQLite URLs skip the pool arguments since
    SQLAlchemy picks its own pool for that dialect.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from recipebox.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, used both by Backend.startup()
    (create_all) and by Alembic.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for `settings.database_url`."""
    options: Dict[str, Any] = {
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: rows stay readable after commit, so a storage
    method can commit and then serialize the row it just wrote.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables (development and tests; production runs Alembic)."""
    # Registers the records table on Base.metadata
    from recipebox.models import record  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
