"""Database models for the bar ordering schema.

These models are kept isolated from any application wiring so that they can
be used in tests or scripts independently.
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from .domain import OrderSource, OrderStatus, utcnow

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class CatalogState(Base):
    """Single-row catalog document with its last-update watermark."""

    __tablename__ = "catalog_state"

    id = Column(Integer, primary_key=True, default=1)
    state = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class OrderSession(Base):
    """Fulfilment session opened and closed by an operator.

    ``open_guard`` is ``True`` while the session is open and ``NULL`` once it
    is closed. Its unique constraint lets the database hold at most one open
    session, whatever the number of concurrent writers.
    """

    __tablename__ = "order_sessions"
    __table_args__ = (
        CheckConstraint(
            "(closed_at IS NULL AND open_guard IS NOT NULL)"
            " OR (closed_at IS NOT NULL AND open_guard IS NULL)",
            name="ck_order_sessions_open_guard",
        ),
        Index("ix_order_sessions_opened_at", "opened_at"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    code = Column(String(40), nullable=False, unique=True)
    opened_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    open_guard = Column(Boolean, nullable=True, unique=True, default=True)


class Order(Base):
    """Customer order with a locked subtotal."""

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')",
            name="ck_orders_status",
        ),
        CheckConstraint(
            "source IN ('verified_table', 'counter')", name="ck_orders_source"
        ),
        Index("ix_orders_status_created_at", "status", "created_at"),
        Index("ix_orders_session_id", "session_id"),
        Index("ix_orders_updated_at", "updated_at"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    code = Column(String(40), nullable=False, unique=True)
    customer_name = Column(String(80), nullable=True)
    customer_phone = Column(String(30), nullable=True)
    note = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    source = Column(String(20), nullable=False, default=OrderSource.COUNTER.value)
    table_code = Column(String(20), nullable=True)
    subtotal = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    session_id = Column(
        String(36), ForeignKey("order_sessions.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    items = relationship(
        "OrderItem",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class OrderItem(Base):
    """Order line with the drink name and price snapshotted at creation."""

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_order_items_qty"),
        Index("ix_order_items_order_id", "order_id"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)
    drink_id = Column(String, nullable=False)
    drink_name = Column(String, nullable=False)
    unit_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    qty = Column(Integer, nullable=False)
    line_total = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    note = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
