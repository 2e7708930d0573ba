"""
Database session management for async SQLAlchemy.

PostgreSQL when DATABASE_URL is set in the environment. Without it the
server runs on a local SQLite file so a hunt can be set up on a laptop.
"""

import logging
import os
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from treasure.config import Settings, get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def _select_database_url(settings: Settings) -> tuple[str, bool]:
    """
    Pick the database URL.

    Returns:
        Tuple of (url, whether it is the SQLite fallback)
    """
    env_url = os.environ.get("DATABASE_URL")
    if env_url:
        return env_url, False

    if settings.USE_SQLITE_FALLBACK:
        logger.warning(
            f"DATABASE_URL not set, storing assets in SQLite: {settings.SQLITE_FALLBACK_URL}"
        )
        return settings.SQLITE_FALLBACK_URL, True

    return settings.DATABASE_URL, False


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # Needed on every connection for asset_tags cascades
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
        )
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_async_engine(
        url,
        echo=settings.DEBUG,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


_database_url, _using_sqlite_fallback = _select_database_url(settings)
engine = _build_engine(_database_url)

# Shared by request handlers and the storyline resolver
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


def is_using_sqlite_fallback() -> bool:
    """Whether the server is running on the SQLite development database."""
    return _using_sqlite_fallback


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped database session.
    Commits when the endpoint returns, rolls back when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
