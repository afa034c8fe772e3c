"""
Database Connection Management

Async SQLAlchemy 2.0 engine and session lifecycle for the records store.
SQLite (aiosqlite) is the default; any async URL SQLAlchemy supports works,
e.g. ``postgresql+asyncpg://`` with the ``postgres`` extra installed.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from superstore.config import get_settings
from superstore.database.models import Base

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _prepare_sqlite_path(url: URL) -> None:
    """Create the directory of a file-backed SQLite database"""
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Initialize the database engine and verify it answers.

    Args:
        url: Async database URL; defaults to ``DATABASE_URL``

    Returns:
        AsyncEngine: The initialized database engine
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    settings = get_settings()
    db_url = make_url(url or settings.database.url)
    _prepare_sqlite_path(db_url)

    _engine = create_async_engine(db_url, echo=settings.database.echo, poolclass=NullPool)
    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database unreachable", error=str(e), backend=db_url.get_backend_name())
        await close_database()
        raise

    logger.info(
        "Database ready",
        url=db_url.render_as_string(hide_password=True),
        backend=db_url.get_backend_name(),
    )
    return _engine


async def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _async_session_factory

    if _engine is None:
        return

    await _engine.dispose()
    _engine = None
    _async_session_factory = None
    logger.info("Database connection closed")


def get_engine() -> AsyncEngine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


async def create_schema(reset: bool = True) -> None:
    """
    Create the records table.

    Args:
        reset: Drop the existing table first, so a re-run starts clean
    """
    async with get_engine().begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Records schema ready", reset=reset)


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Unit-of-work session: commits on success and rolls back on error.

    Example:
        async with get_db() as db:
            await db.execute(insert(Record), rows)
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with _async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error("Rolling back records session", error=str(e), error_type=type(e).__name__)
            await session.rollback()
            raise
