"""Order creation, status changes and listing.

Orders are priced against the catalog as it stands at creation time and the
resulting unit prices are copied into the order lines; nothing recomputes
them later. Creation is two writes, header then lines, and a failure on the
second undoes the first.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping

from ..catalog import CatalogSnapshot
from ..domain import (
    OrderLineRecord,
    OrderRecord,
    OrderSource,
    OrderStatus,
    can_transition,
    parse_status,
    utcnow,
)
from ..errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    SessionClosedError,
    ValidationError,
)
from ..pricing import public_price, round_money
from ..repos import CatalogRepo, OrdersRepo, SessionsRepo
from ..routes_metrics import (
    code_conflicts_total,
    orders_created_total,
    table_signature_rejections_total,
)
from ..table_auth import normalize_table_code, resolve_order_origin
from .cart import (
    CUSTOMER_NAME_MAX,
    CUSTOMER_PHONE_MAX,
    ORDER_NOTE_MAX,
    CartLine,
    merge_cart,
    parse_cart,
    sanitize_text,
)
from .catalog_service import load_snapshot
from .codes import make_order_code
from .watermark import has_changes, parse_since

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrdersPage:
    orders: list[OrderRecord]
    updated_at: datetime | None


def price_lines(
    lines: list[CartLine], snapshot: CatalogSnapshot
) -> list[OrderLineRecord]:
    """Lock the current public price of each drink into order lines.

    Raises :class:`ValidationError` if a drink is not on the public menu.
    """

    priced = []
    for line in lines:
        drink = snapshot.public_drinks.get(line.drink_id)
        if drink is None:
            raise ValidationError(
                "drink is not available on the public menu",
                {"drink_id": line.drink_id},
            )
        unit_price = round_money(
            public_price(drink, snapshot.ingredients, snapshot.settings)
        )
        priced.append(
            OrderLineRecord(
                drink_id=drink.id,
                drink_name=drink.name,
                qty=line.qty,
                unit_price=unit_price,
                line_total=round_money(unit_price * line.qty),
                note=line.note,
            )
        )
    return priced


class OrderService:
    def __init__(
        self,
        orders: OrdersRepo,
        catalog: CatalogRepo,
        sessions: SessionsRepo,
        *,
        signing_secret: str | None = None,
        prefix: str = "DRK",
        attempts: int = 3,
        require_session_for_table_orders: bool = True,
        list_limit: int = 200,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[str, datetime], str] = make_order_code,
    ) -> None:
        self.orders = orders
        self.catalog = catalog
        self.sessions = sessions
        self.signing_secret = signing_secret
        self.prefix = prefix
        self.attempts = attempts
        self.require_session_for_table_orders = require_session_for_table_orders
        self.list_limit = list_limit
        self.clock = clock
        self.code_factory = code_factory

    @classmethod
    def from_settings(
        cls,
        orders: OrdersRepo,
        catalog: CatalogRepo,
        sessions: SessionsRepo,
        settings: Any,
    ) -> "OrderService":
        return cls(
            orders,
            catalog,
            sessions,
            signing_secret=settings.table_qr_signing_secret,
            prefix=settings.order_code_prefix,
            attempts=settings.order_code_attempts,
            require_session_for_table_orders=settings.require_session_for_table_orders,
            list_limit=settings.orders_list_limit,
        )

    async def create_order(self, payload: Mapping[str, Any]) -> OrderRecord:
        """Validate, price and persist an order.

        ``payload`` carries ``items`` (``drink_id``, ``qty``, ``note``),
        optional ``customer_name``, ``customer_phone`` and ``note``, and an
        optional ``table_code``/``table_token`` pair. Returns the stored
        order with its lines.
        """

        lines = merge_cart(parse_cart(payload.get("items")))
        snapshot = await load_snapshot(self.catalog)
        priced = price_lines(lines, snapshot)
        subtotal = round_money(sum(line.line_total for line in priced))
        if subtotal <= 0:
            raise ValidationError("order total must be greater than zero")

        origin = resolve_order_origin(
            payload.get("table_code"), payload.get("table_token"), self.signing_secret
        )
        if (
            origin.source is OrderSource.COUNTER
            and normalize_table_code(payload.get("table_code")) is not None
        ):
            table_signature_rejections_total.inc()

        active = await self.sessions.get_active()
        if (
            active is None
            and origin.source is OrderSource.VERIFIED_TABLE
            and self.require_session_for_table_orders
        ):
            raise SessionClosedError("the bar is not taking table orders right now")

        header = await self._insert_header(
            source=origin.source,
            table_code=origin.table_code,
            subtotal=subtotal,
            customer_name=sanitize_text(payload.get("customer_name"), CUSTOMER_NAME_MAX),
            customer_phone=sanitize_text(payload.get("customer_phone"), CUSTOMER_PHONE_MAX),
            note=sanitize_text(payload.get("note"), ORDER_NOTE_MAX),
            session_id=active.id if active else None,
        )

        try:
            await self.orders.insert_lines(header.id, priced)
        except Exception:
            logger.warning("order lines failed, removing header code=%s", header.code)
            await self.orders.delete_order(header.id)
            raise

        orders_created_total.labels(source=origin.source.value).inc()
        logger.info(
            "order created code=%s source=%s lines=%d subtotal=%.2f",
            header.code,
            origin.source.value,
            len(priced),
            subtotal,
        )
        return dataclasses.replace(header, lines=tuple(priced))

    async def _insert_header(self, **fields: Any) -> OrderRecord:
        for attempt in range(1, self.attempts + 1):
            now = self.clock()
            code = self.code_factory(self.prefix, now)
            try:
                return await self.orders.insert_order(code=code, now=now, **fields)
            except ConflictError:
                code_conflicts_total.labels(kind="order").inc()
                logger.info(
                    "order code conflict attempt=%d/%d code=%s",
                    attempt,
                    self.attempts,
                    code,
                )
        logger.error("order code allocation failed after %d attempts", self.attempts)
        raise ConflictError(
            "could not allocate an order code", {"attempts": self.attempts}
        )

    async def get(self, order_id: str) -> OrderRecord:
        order = await self.orders.get(order_id)
        if order is None:
            raise NotFoundError("order not found", {"id": order_id})
        return order

    async def update_status(self, order_id: str, status: Any) -> OrderRecord:
        """Move an order to ``status``.

        Unknown status values are rejected before the order is read, so a bad
        request never mutates anything.
        """

        target = parse_status(status)
        if target is None:
            raise ValidationError(
                "unknown status",
                {"allowed": [s.value for s in OrderStatus]},
            )
        current = await self.get(order_id)
        if not can_transition(current.status, target):
            raise InvalidTransitionError(
                "status change not allowed",
                {"from": current.status.value, "to": target.value},
            )
        updated = await self.orders.update_status(
            order_id, target, self.clock(), expected=current.status
        )
        if updated is None:
            # Another operator moved or removed the order after it was read.
            latest = await self.orders.get(order_id)
            if latest is None:
                raise NotFoundError("order not found", {"id": order_id})
            raise InvalidTransitionError(
                "order status changed concurrently",
                {"from": latest.status.value, "to": target.value},
            )
        logger.info(
            "order status code=%s %s->%s",
            updated.code,
            current.status.value,
            target.value,
        )
        return updated

    async def list_orders(
        self, status: str | None = None, since: str | None = None
    ) -> OrdersPage | None:
        """Return the newest orders, or ``None`` if nothing changed since ``since``."""

        status_filter = parse_status(status) if status else None
        latest = await self.orders.latest_update(status_filter)
        if not has_changes(latest, parse_since(since)):
            return None
        records = await self.orders.list_orders(status_filter, self.list_limit)
        return OrdersPage(orders=records, updated_at=latest)

    async def session_orders(self, session_id: str) -> list[OrderRecord]:
        session = await self.sessions.get(session_id)
        if session is None:
            raise NotFoundError("session not found", {"id": session_id})
        return await self.orders.list_for_session(session_id)
