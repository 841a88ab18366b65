"""Async engine and session helpers.

The engine is created lazily from ``database_url`` so importing the
application never opens a connection. Tests replace :func:`get_session`
through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config import get_settings

from ..models_bar import Base
from ..obs import add_query_logger


@lru_cache
def get_engine(url: str | None = None) -> AsyncEngine:
    """Return the shared :class:`AsyncEngine` for ``url`` (default: settings)."""

    engine = create_async_engine(url or get_settings().database_url)
    add_query_logger(engine, "bar")
    return engine


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an ``AsyncSession`` bound to the application database."""

    sessionmaker = make_sessionmaker(get_engine())
    async with sessionmaker() as session:
        yield session


async def init_schema(engine: AsyncEngine) -> None:
    """Create every table that does not exist yet."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = ["get_engine", "get_session", "init_schema", "make_sessionmaker"]
