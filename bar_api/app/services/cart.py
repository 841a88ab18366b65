"""Parsing and normalisation of incoming carts.

Everything here runs before persistence is touched. Raw request values are
checked explicitly so the pricing functions only ever see validated numbers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..errors import ValidationError

MAX_CART_LINES = 50
MIN_QTY = 1
MAX_QTY = 30

LINE_NOTE_MAX = 50
CUSTOMER_NAME_MAX = 80
CUSTOMER_PHONE_MAX = 30
ORDER_NOTE_MAX = 400


@dataclass(frozen=True)
class CartLine:
    drink_id: str
    qty: int
    note: str | None = None


def sanitize_text(value: Any, max_len: int) -> str | None:
    """Trim ``value`` and cut it to ``max_len``; blanks and non-strings give ``None``."""

    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return trimmed[:max_len]


def parse_quantity(value: Any) -> int | None:
    """Return ``value`` as an int if it is integral, else ``None``.

    Booleans and numeric strings are rejected; ``2.0`` is accepted.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def parse_cart(raw_items: Any) -> list[CartLine]:
    """Validate raw cart entries and return them as :class:`CartLine` objects."""

    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("order is empty")
    if len(raw_items) > MAX_CART_LINES:
        raise ValidationError(
            "too many lines in order", {"max_lines": MAX_CART_LINES}
        )

    lines: list[CartLine] = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, Mapping):
            raise ValidationError("invalid order line", {"index": index})
        drink_id = raw.get("drink_id")
        drink_id = drink_id.strip() if isinstance(drink_id, str) else ""
        if not drink_id:
            raise ValidationError(
                "order line is missing drink_id", {"index": index}
            )
        qty = parse_quantity(raw.get("qty"))
        if qty is None or not MIN_QTY <= qty <= MAX_QTY:
            raise ValidationError(
                "invalid quantity",
                {"index": index, "min": MIN_QTY, "max": MAX_QTY},
            )
        lines.append(
            CartLine(
                drink_id=drink_id,
                qty=qty,
                note=sanitize_text(raw.get("note"), LINE_NOTE_MAX),
            )
        )
    return lines


def merge_cart(lines: Iterable[CartLine]) -> list[CartLine]:
    """Merge lines sharing drink and note, keeping first-seen order."""

    merged: dict[tuple[str, str | None], CartLine] = {}
    for line in lines:
        key = (line.drink_id, line.note)
        previous = merged.get(key)
        qty = line.qty + (previous.qty if previous else 0)
        merged[key] = CartLine(drink_id=line.drink_id, qty=qty, note=line.note)
    return list(merged.values())
