"""Plain records exchanged between repositories, services and renderers.

Repositories return these instead of ORM objects so that services and the
ticket builder never touch a live database session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .order_source import OrderSource
from .order_status import OrderStatus


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes; they were written in UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionRecord:
    """A fulfilment session; open while ``closed_at`` is ``None``."""

    id: str
    code: str
    opened_at: datetime
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "opened_at": self.opened_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "is_open": self.is_open,
        }


@dataclass(frozen=True)
class OrderLineRecord:
    """One priced line of an order, frozen at creation time."""

    drink_id: str
    drink_name: str
    qty: int
    unit_price: float
    line_total: float
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "drink_id": self.drink_id,
            "drink_name": self.drink_name,
            "qty": self.qty,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
            "note": self.note,
        }


@dataclass(frozen=True)
class OrderRecord:
    """An order header together with its lines."""

    id: str
    code: str
    status: OrderStatus
    source: OrderSource
    subtotal: float
    created_at: datetime
    updated_at: datetime
    table_code: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    note: str | None = None
    session_id: str | None = None
    lines: tuple[OrderLineRecord, ...] = field(default_factory=tuple)

    @property
    def total_items(self) -> int:
        return sum(line.qty for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "status": self.status.value,
            "source": self.source.value,
            "table_code": self.table_code
            if self.source is OrderSource.VERIFIED_TABLE
            else None,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "note": self.note,
            "session_id": self.session_id,
            "subtotal": self.subtotal,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "items": [line.to_dict() for line in self.lines],
        }
