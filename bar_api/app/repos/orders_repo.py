"""Repository interface for order operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from ..domain import OrderLineRecord, OrderRecord, OrderSource, OrderStatus


class OrdersRepo(ABC):
    """Contract for order persistence and manipulation.

    ``insert_order`` raises :class:`~bar_api.app.errors.ConflictError` when
    ``code`` is already taken so callers can retry with a fresh code.
    """

    @abstractmethod
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
        """Persist an order header in ``pending`` status."""
        raise NotImplementedError

    @abstractmethod
    async def insert_lines(
        self, order_id: str, lines: Sequence[OrderLineRecord]
    ) -> None:
        """Persist the lines of an existing order, all or nothing."""
        raise NotImplementedError

    @abstractmethod
    async def delete_order(self, order_id: str) -> None:
        """Remove an order header and any lines attached to it."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, order_id: str) -> OrderRecord | None:
        """Return an order with its lines, or ``None``."""
        raise NotImplementedError

    @abstractmethod
    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        now: datetime,
        expected: OrderStatus | None = None,
    ) -> OrderRecord | None:
        """Set ``status`` and ``updated_at``.

        With ``expected`` the row is only written while it still holds that
        status. Returns ``None`` when nothing was written.
        """
        raise NotImplementedError

    @abstractmethod
    async def latest_update(self, status: OrderStatus | None = None) -> datetime | None:
        """Return the newest ``updated_at`` among matching orders."""
        raise NotImplementedError

    @abstractmethod
    async def list_orders(
        self, status: OrderStatus | None = None, limit: int = 200
    ) -> list[OrderRecord]:
        """Return matching orders, newest first, with their lines."""
        raise NotImplementedError

    @abstractmethod
    async def list_for_session(self, session_id: str) -> list[OrderRecord]:
        """Return the orders of one session, newest first, without lines."""
        raise NotImplementedError
