"""Order status enumeration and allowed transitions."""

from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Enumerate the lifecycle states for an order."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Operators may step an order back from in_progress to pending as a
# correction; completed is terminal.
TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.IN_PROGRESS],
    OrderStatus.IN_PROGRESS: [OrderStatus.PENDING, OrderStatus.COMPLETED],
    OrderStatus.COMPLETED: [],
}


def can_transition(src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if an order can move from ``src`` to ``dst``.

    Re-applying the current status is always allowed.
    """

    return src == dst or dst in TRANSITIONS.get(src, [])


def parse_status(value: object) -> OrderStatus | None:
    """Return the :class:`OrderStatus` named by ``value`` or ``None``."""

    if not isinstance(value, str):
        return None
    try:
        return OrderStatus(value)
    except ValueError:
        return None
