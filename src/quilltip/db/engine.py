"""Async engine and sessions for the highlight store.

One engine per process, created lazily from ``DATABASE__URL`` in the
running event loop. Pool sizing comes from ``DATABASE__POOL_SIZE`` and
``DATABASE__MAX_OVERFLOW``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from quilltip.config import get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class _Store:
    engine: AsyncEngine | None = None
    sessions: async_sessionmaker[AsyncSession] | None = None


def is_db_configured() -> bool:
    """True when ``DATABASE__URL`` is set."""
    return bool(get_settings().database.url)


def get_engine() -> AsyncEngine | None:
    """The live engine, or None before ``init_db``."""
    return _Store.engine


async def init_db() -> None:
    """Create the engine and session factory.

    Raises:
        ValueError: If ``DATABASE__URL`` is not set.
    """
    settings = get_settings()
    config = settings.database
    if not config.url:
        msg = "DATABASE__URL is not set (environment or .env)"
        raise ValueError(msg)

    _Store.engine = create_async_engine(
        config.url,
        echo=settings.dev.database_echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_pre_ping=True,
    )
    _Store.sessions = async_sessionmaker(
        _Store.engine, class_=AsyncSession, expire_on_commit=False
    )
    logger.debug("Highlight store engine created (pool_size=%d)", config.pool_size)


async def create_schema() -> None:
    """Create the ``highlight`` and ``highlight_tip`` tables if missing."""
    import quilltip.db.models  # noqa: F401, PLC0415

    if _Store.engine is None:
        await init_db()
    assert _Store.engine is not None  # For type narrowing

    async with _Store.engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Highlight store schema ready")


async def close_db() -> None:
    """Dispose of the engine; the next session starts a new one."""
    if _Store.engine is not None:
        await _Store.engine.dispose()
    _Store.engine = None
    _Store.sessions = None


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session that commits on exit and rolls back on error.

    Errors are logged with their traceback and re-raised.
    """
    if _Store.sessions is None:
        await init_db()
    assert _Store.sessions is not None  # For type narrowing

    async with _Store.sessions() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.exception("Highlight store session failed; rolling back")
            await session.rollback()
            raise
