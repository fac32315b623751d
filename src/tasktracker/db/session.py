"""Database engine and session management utilities."""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import get_settings


@lru_cache()
def get_engine() -> AsyncEngine:
    """Return the process-wide async engine built from the current settings."""
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
    )


@lru_cache()
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an ``AsyncSession`` for request-scoped work."""
    async with get_session_maker()() as session:
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all database tables (primarily for tests and local development)."""
    from .. import models  # noqa: F401  registers table metadata

    target = engine or get_engine()
    async with target.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


async def dispose_engine() -> None:
    """Close pooled connections held by the shared engine."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    get_session_maker.cache_clear()
    get_engine.cache_clear()


__all__ = ["dispose_engine", "get_engine", "get_session", "get_session_maker", "init_db"]
