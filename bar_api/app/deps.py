"""FastAPI dependencies wiring repositories and services per request."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings

from .db import get_session
from .repos_sqlalchemy import CatalogRepoSQL, OrdersRepoSQL, SessionsRepoSQL
from .services import OrderService, OrderSessionManager


def get_catalog_repo(session: AsyncSession = Depends(get_session)) -> CatalogRepoSQL:
    return CatalogRepoSQL(session)


def get_session_manager(
    session: AsyncSession = Depends(get_session),
) -> OrderSessionManager:
    settings = get_settings()
    return OrderSessionManager(
        SessionsRepoSQL(session),
        prefix=settings.session_code_prefix,
        attempts=settings.session_code_attempts,
    )


def get_order_service(session: AsyncSession = Depends(get_session)) -> OrderService:
    return OrderService.from_settings(
        OrdersRepoSQL(session),
        CatalogRepoSQL(session),
        SessionsRepoSQL(session),
        get_settings(),
    )
