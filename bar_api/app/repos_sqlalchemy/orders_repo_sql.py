"""SQLAlchemy implementation of :class:`~bar_api.app.repos.OrdersRepo`.

Lines are stored with the drink name and unit price snapshotted, so later
catalog edits never rewrite an existing order.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..domain import (
    OrderLineRecord,
    OrderRecord,
    OrderSource,
    OrderStatus,
    as_utc,
)
from ..models_bar import Order, OrderItem
from ..repos.orders_repo import OrdersRepo
from . import translate_errors


def _line(row: OrderItem) -> OrderLineRecord:
    return OrderLineRecord(
        drink_id=row.drink_id,
        drink_name=row.drink_name,
        qty=int(row.qty),
        unit_price=float(row.unit_price),
        line_total=float(row.line_total),
        note=row.note,
    )


def _record(row: Order, with_lines: bool = True) -> OrderRecord:
    lines = tuple(_line(item) for item in row.items) if with_lines else ()
    return OrderRecord(
        id=row.id,
        code=row.code,
        status=OrderStatus(row.status),
        source=OrderSource(row.source),
        subtotal=float(row.subtotal),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        table_code=row.table_code,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        note=row.note,
        session_id=row.session_id,
        lines=lines,
    )


class OrdersRepoSQL(OrdersRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def insert_order(
        self,
        *,
        code: str,
        source: OrderSource,
        table_code: str | None,
        subtotal: float,
        customer_name: str | None,
        customer_phone: str | None,
        note: str | None,
        session_id: str | None,
        now: datetime,
    ) -> OrderRecord:
        order_id = str(uuid.uuid4())
        row = Order(
            id=order_id,
            code=code,
            status=OrderStatus.PENDING.value,
            source=source.value,
            table_code=table_code,
            subtotal=subtotal,
            customer_name=customer_name,
            customer_phone=customer_phone,
            note=note,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )
        async with translate_errors(self.session, "order code already in use"):
            self.session.add(row)
            await self.session.commit()
        return OrderRecord(
            id=order_id,
            code=code,
            status=OrderStatus.PENDING,
            source=source,
            subtotal=subtotal,
            created_at=as_utc(now),
            updated_at=as_utc(now),
            table_code=table_code,
            customer_name=customer_name,
            customer_phone=customer_phone,
            note=note,
            session_id=session_id,
        )

    async def insert_lines(
        self, order_id: str, lines: Sequence[OrderLineRecord]
    ) -> None:
        async with translate_errors(self.session, "order lines rejected"):
            for position, line in enumerate(lines):
                self.session.add(
                    OrderItem(
                        id=str(uuid.uuid4()),
                        order_id=order_id,
                        position=position,
                        drink_id=line.drink_id,
                        drink_name=line.drink_name,
                        unit_price=line.unit_price,
                        qty=line.qty,
                        line_total=line.line_total,
                        note=line.note,
                    )
                )
            await self.session.commit()

    async def delete_order(self, order_id: str) -> None:
        async with translate_errors(self.session):
            await self.session.execute(
                delete(OrderItem).where(OrderItem.order_id == order_id)
            )
            await self.session.execute(delete(Order).where(Order.id == order_id))
            await self.session.commit()

    async def get(self, order_id: str) -> OrderRecord | None:
        async with translate_errors(self.session):
            result = await self.session.execute(
                select(Order)
                .options(selectinload(Order.items))
                .where(Order.id == order_id)
                .execution_options(populate_existing=True)
            )
            row = result.scalar_one_or_none()
        return _record(row) if row is not None else None

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        now: datetime,
        expected: OrderStatus | None = None,
    ) -> OrderRecord | None:
        stmt = update(Order).where(Order.id == order_id)
        if expected is not None:
            stmt = stmt.where(Order.status == expected.value)
        async with translate_errors(self.session):
            result = await self.session.execute(
                stmt.values(status=status.value, updated_at=now).execution_options(
                    synchronize_session=False
                )
            )
            await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.get(order_id)

    async def latest_update(self, status: OrderStatus | None = None) -> datetime | None:
        stmt = select(Order.updated_at).order_by(Order.updated_at.desc()).limit(1)
        if status is not None:
            stmt = stmt.where(Order.status == status.value)
        async with translate_errors(self.session):
            result = await self.session.execute(stmt)
            value = result.scalar_one_or_none()
        return as_utc(value)

    async def list_orders(
        self, status: OrderStatus | None = None, limit: int = 200
    ) -> list[OrderRecord]:
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        if status is not None:
            stmt = stmt.where(Order.status == status.value)
        async with translate_errors(self.session):
            result = await self.session.execute(stmt)
            rows = list(result.scalars())
        return [_record(row) for row in rows]

    async def list_for_session(self, session_id: str) -> list[OrderRecord]:
        async with translate_errors(self.session):
            result = await self.session.execute(
                select(Order)
                .where(Order.session_id == session_id)
                .order_by(Order.created_at.desc())
                .execution_options(populate_existing=True)
            )
            rows = list(result.scalars())
        return [_record(row, with_lines=False) for row in rows]
