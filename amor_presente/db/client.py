"""
PostgreSQL Async Database Client

Uses SQLAlchemy 2.0 with asyncpg for async database operations.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from amor_presente.config import get_settings
from amor_presente.db.rls import current_scope

logger = structlog.get_logger()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db() -> None:
    """Initialize the database connection pool."""
    global _engine, _session_factory

    settings = get_settings()
    database_url = str(settings.database_url)

    engine_kwargs: dict[str, object] = {
        "echo": settings.log_level == "DEBUG",
    }
    if settings.db_pool_mode == "null":
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = max(1, int(settings.db_pool_size))
        engine_kwargs["max_overflow"] = max(0, int(settings.db_pool_max_overflow))
        engine_kwargs["pool_timeout"] = max(1, int(settings.db_pool_timeout_seconds))
        engine_kwargs["pool_recycle"] = max(60, int(settings.db_pool_recycle_seconds))
        engine_kwargs["pool_pre_ping"] = True

    _engine = create_async_engine(database_url, **engine_kwargs)
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info(
        "Database connection pool initialized",
        url=database_url.split("@")[-1],
        pool_mode=settings.db_pool_mode,
    )


async def close_db() -> None:
    """Close the database connection pool."""
    global _engine, _session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connection pool closed")


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get an async database session bound to the current RLS context.

    Usage:
        async with get_db_session() as session:
            result = await session.execute(...)
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    session = _session_factory()
    try:
        scope = current_scope()
        if scope.user_id:
            await session.execute(
                text("SELECT set_config('app.user_id', :user_id, true)"),
                {"user_id": scope.user_id},
            )
        if scope.is_internal:
            await session.execute(
                text("SELECT set_config('app.is_internal', 'true', true)")
            )
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
