"""Compose ESC/POS order tickets.

:func:`build_ticket` is pure: it turns an :class:`~bar_api.app.domain.OrderRecord`
into the exact byte stream sent to the printer, with no I/O. Text is laid out
for the paper's column count and transliterated to Latin-1 before encoding.
"""

from __future__ import annotations

import logging
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..domain import OrderRecord, OrderSource
from .text import center_line, format_money, left_right_line, to_latin1_safe, wrap_text

logger = logging.getLogger(__name__)

PAPER_WIDTHS: dict[str, int] = {
    "58mm": 32,
    "80mm": 48,
}

INIT = "\x1b@"
BOLD_ON = "\x1bE\x01"
BOLD_OFF = "\x1bE\x00"
ALIGN_CENTER = "\x1ba\x01"
ALIGN_LEFT = "\x1ba\x00"
FULL_CUT = "\x1dVA\x10"
NL = "\n"


def paper_width(paper: str) -> int:
    """Return the column count for ``paper``; raises ``KeyError`` if unknown."""

    return PAPER_WIDTHS[paper]


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown ticket timezone %s, using UTC", name)
        return timezone.utc


def build_ticket(
    order: OrderRecord,
    paper: str = "58mm",
    tz: str = "UTC",
    currency_symbol: str = "$",
) -> bytes:
    """Return the ESC/POS bytes for ``order``.

    Parameters
    ----------
    order:
        The order with its lines.
    paper:
        ``58mm`` (32 columns) or ``80mm`` (48 columns).
    tz:
        Zone name used for the timestamp line.
    currency_symbol:
        Prefix for money amounts.
    """

    width = paper_width(paper)

    def money(value: float) -> str:
        return to_latin1_safe(format_money(value, currency_symbol))

    if order.source is OrderSource.VERIFIED_TABLE and order.table_code:
        source_text = f"Table {order.table_code}"
    else:
        source_text = "Counter"
    customer = order.customer_name or "Customer not provided"
    if order.customer_phone:
        customer += f" - {order.customer_phone}"
    created_at = order.created_at.astimezone(_zone(tz)).strftime("%d/%m/%Y %H:%M:%S")

    out: list[str] = [INIT, BOLD_ON, ALIGN_CENTER]
    out.append(to_latin1_safe(center_line("ORDER", width)) + NL)
    out.append(to_latin1_safe(center_line(order.code, width)) + NL)
    out.extend([BOLD_OFF, ALIGN_LEFT])
    out.append("=" * width + NL)
    out.append(created_at + NL)
    out.append(to_latin1_safe(source_text) + NL)
    for line in wrap_text(to_latin1_safe(customer), width):
        out.append(line + NL)
    out.append("-" * width + NL)

    for item in order.lines:
        for line in wrap_text(to_latin1_safe(item.drink_name), width):
            out.append(line + NL)
        qty_price = f"  {item.qty} x {money(item.unit_price)}"
        out.append(left_right_line(qty_price, money(item.line_total), width) + NL)
        if item.note:
            for line in wrap_text(f"note: {to_latin1_safe(item.note)}", width - 2):
                out.append(f"  {line}" + NL)
        out.append(NL)

    out.append("-" * width + NL)
    out.append(left_right_line("ITEMS", str(order.total_items), width) + NL)
    if order.note:
        for line in wrap_text(f"Order note: {to_latin1_safe(order.note)}", width):
            out.append(line + NL)
        out.append(NL)
    out.append("=" * width + NL)
    out.append(BOLD_ON)
    out.append(left_right_line("TOTAL", money(order.subtotal), width) + NL)
    out.append(BOLD_OFF)
    out.append(NL + NL)
    out.append(FULL_CUT)
    return "".join(out).encode("latin-1")
