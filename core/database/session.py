"""Legajos - Database Session Management
Supports PostgreSQL (production) and SQLite (development and tests).
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import db_settings

from .models import Base


def get_async_database_url() -> str:
    """Async driver URL derived from DATABASE_URL."""
    return db_settings.async_url


def _get_async_engine_kwargs():
    """Get async engine keyword arguments based on database type."""
    if db_settings.is_sqlite:
        return {"echo": db_settings.echo}
    return {
        "echo": db_settings.echo,
        "pool_pre_ping": True,
        "pool_size": db_settings.pool_size,
        "max_overflow": db_settings.max_overflow,
    }


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE clauses unless foreign keys are switched on."""

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_async_engine(url: str | None = None) -> AsyncEngine:
    """Create async database engine."""
    db_url = url or get_async_database_url()
    engine = create_async_engine(db_url, **_get_async_engine_kwargs())
    if "sqlite" in db_url:
        enable_sqlite_foreign_keys(engine)
    return engine


# Lazy initialization - only create engines when needed
_async_engine = None
_async_session_local = None


def _get_async_engine_instance():
    """Get or create async engine (lazy)."""
    global _async_engine
    if _async_engine is None:
        _async_engine = get_async_engine()
    return _async_engine


def _get_async_session_local():
    """Get or create async session factory (lazy)."""
    global _async_session_local
    if _async_session_local is None:
        _async_session_local = async_sessionmaker(
            _get_async_engine_instance(), class_=AsyncSession, expire_on_commit=False
        )
    return _async_session_local


async def init_db_async():
    """Create missing tables."""
    eng = _get_async_engine_instance()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine():
    global _async_engine, _async_session_local
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_local = None


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Session that commits on success and rolls back on error."""
    AsyncSessionLocal = _get_async_session_local()
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Dependency for FastAPI
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Services commit explicitly; anything left pending when a request fails
    is rolled back here.
    """
    AsyncSessionLocal = _get_async_session_local()
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def test_connection() -> bool:
    """Test database connection."""
    try:
        engine = _get_async_engine_instance()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return False


async def wait_for_database(max_wait: float = 60.0, interval: float = 2.0) -> bool:
    """Wait for database to become available.

    Args:
        max_wait: Maximum time to wait in seconds
        interval: Time between connection attempts

    Returns:
        True if database became available
    """
    start = time.time()

    while time.time() - start < max_wait:
        if await test_connection():
            logger.info("Database connection established")
            return True

        logger.info(f"Waiting for database... ({time.time() - start:.0f}s / {max_wait:.0f}s)")
        await asyncio.sleep(interval)

    logger.error(f"Database not available after {max_wait}s")
    return False
