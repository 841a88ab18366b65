"""SQLAlchemy implementation of :class:`~bar_api.app.repos.CatalogRepo`."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import as_utc
from ..models_bar import CatalogState
from ..repos.catalog_repo import CatalogRepo
from . import translate_errors

_ROW_ID = 1


class CatalogRepoSQL(CatalogRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def load(self) -> tuple[dict[str, Any], datetime] | None:
        async with translate_errors(self.session):
            result = await self.session.execute(
                select(CatalogState.state, CatalogState.updated_at).where(
                    CatalogState.id == _ROW_ID
                )
            )
            row = result.one_or_none()
        if row is None:
            return None
        return row.state, as_utc(row.updated_at)

    async def save(self, state: dict[str, Any], now: datetime) -> datetime:
        async with translate_errors(self.session):
            row = await self.session.get(CatalogState, _ROW_ID)
            if row is None:
                self.session.add(CatalogState(id=_ROW_ID, state=state, updated_at=now))
            else:
                row.state = state
                row.updated_at = now
            await self.session.commit()
        return now
