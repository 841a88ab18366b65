"""SQLAlchemy implementation of :class:`~bar_api.app.repos.SessionsRepo`.

The single-open-session rule is enforced by the unique ``open_guard`` column,
so a concurrent ``insert`` surfaces as an ``IntegrityError`` which
:func:`translate_errors` turns into a conflict.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import SessionRecord, as_utc
from ..models_bar import Order, OrderSession
from ..pricing import round_money
from ..repos.sessions_repo import SessionsRepo, SessionSummary
from . import translate_errors


def _record(row: OrderSession) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        code=row.code,
        opened_at=as_utc(row.opened_at),
        closed_at=as_utc(row.closed_at),
    )


class SessionsRepoSQL(SessionsRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_active(self) -> SessionRecord | None:
        async with translate_errors(self.session):
            result = await self.session.execute(
                select(OrderSession)
                .where(OrderSession.closed_at.is_(None))
                .order_by(OrderSession.opened_at.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
        return _record(row) if row is not None else None

    async def get(self, session_id: str) -> SessionRecord | None:
        async with translate_errors(self.session):
            row = await self.session.get(OrderSession, session_id)
        return _record(row) if row is not None else None

    async def insert(self, code: str, now: datetime) -> SessionRecord:
        row = OrderSession(
            id=str(uuid.uuid4()), code=code, opened_at=now, open_guard=True
        )
        async with translate_errors(self.session, "session already open"):
            self.session.add(row)
            await self.session.commit()
        return SessionRecord(id=row.id, code=code, opened_at=as_utc(now))

    async def close(self, session_id: str, now: datetime) -> SessionRecord | None:
        async with translate_errors(self.session):
            result = await self.session.execute(
                update(OrderSession)
                .where(
                    OrderSession.id == session_id,
                    OrderSession.closed_at.is_(None),
                )
                .values(closed_at=now, open_guard=None)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        if result.rowcount == 0:
            return None
        self.session.expire_all()
        return await self.get(session_id)

    async def list_recent(self, limit: int = 30) -> list[SessionSummary]:
        async with translate_errors(self.session):
            result = await self.session.execute(
                select(OrderSession)
                .order_by(OrderSession.opened_at.desc())
                .limit(limit)
            )
            rows = list(result.scalars())
            totals: dict[str, tuple[int, float]] = {}
            if rows:
                agg = await self.session.execute(
                    select(
                        Order.session_id,
                        func.count(Order.id),
                        func.coalesce(func.sum(Order.subtotal), 0),
                    )
                    .where(Order.session_id.in_([row.id for row in rows]))
                    .group_by(Order.session_id)
                )
                for session_id, count, subtotal in agg:
                    totals[session_id] = (int(count), float(subtotal or 0))
        summaries = []
        for row in rows:
            count, subtotal = totals.get(row.id, (0, 0.0))
            summaries.append(
                SessionSummary(
                    session=_record(row),
                    orders_count=count,
                    subtotal=round_money(subtotal),
                )
            )
        return summaries
