"""Database session and engine helpers."""

from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from booking_quote.core.config import get_settings
from booking_quote.db.base import Base

_engine_cache: dict[str, AsyncEngine] = {}
_sessionmaker_cache: dict[str, async_sessionmaker[AsyncSession]] = {}


def _resolve_database_url(override: str | None = None) -> str:
    settings = get_settings()
    return override or settings.database_url


def _get_engine(url: str) -> AsyncEngine:
    engine = _engine_cache.get(url)
    if engine is None:
        engine = create_async_engine(url, echo=False, future=True)
        _engine_cache[url] = engine
    return engine


def get_sessionmaker(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return (and cache) an async sessionmaker for the given database URL."""
    url = _resolve_database_url(database_url)
    sessionmaker = _sessionmaker_cache.get(url)
    if sessionmaker is None:
        sessionmaker = async_sessionmaker(
            _get_engine(url), expire_on_commit=False, class_=AsyncSession
        )
        _sessionmaker_cache[url] = sessionmaker
    return sessionmaker


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a read-only session; quoting never commits."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def create_schema(database_url: str | None = None, *, drop: bool = False) -> None:
    """Create (optionally recreating) every mapped table."""
    # Imported for its side effect of registering the mappers.
    import booking_quote.models  # noqa: F401

    engine = _get_engine(_resolve_database_url(database_url))
    async with engine.begin() as connection:
        if drop:
            await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)


async def dispose_engine(database_url: str | None = None) -> None:
    """Dispose the cached engine/sessionmaker for the given database URL."""
    url = _resolve_database_url(database_url)
    engine = _engine_cache.pop(url, None)
    if engine is not None:
        await engine.dispose()
    _sessionmaker_cache.pop(url, None)
