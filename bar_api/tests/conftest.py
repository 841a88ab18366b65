"""Shared fixtures for service and API tests."""

from __future__ import annotations

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config import get_settings

from bar_api.app.auth import create_access_token
from bar_api.app.db import get_session
from bar_api.app.main import app
from bar_api.app.models_bar import Base
from bar_api.app.repos_sqlalchemy import CatalogRepoSQL

from catalog_samples import CATALOG_TS, sample_catalog



@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def sessionmaker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest.fixture
async def seeded(sessionmaker):
    async with sessionmaker() as session:
        await CatalogRepoSQL(session).save(sample_catalog(), CATALOG_TS)
    return sessionmaker


@pytest.fixture
def settings_env(monkeypatch):
    """Set environment overrides and refresh the cached settings."""

    def _apply(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), value)
        get_settings.cache_clear()

    get_settings.cache_clear()
    yield _apply
    get_settings.cache_clear()


@pytest.fixture
def operator_headers() -> dict:
    token = create_access_token("bartender@example.com", "operator")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(seeded):
    async def _get_session():
        async with seeded() as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.state.redis = fakeredis.aioredis.FakeRedis(decode_responses=True)
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_session, None)
        app.state.print_queue = None
