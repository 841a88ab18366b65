"""Domain models and helpers."""

from .order_source import OrderSource
from .order_status import TRANSITIONS, OrderStatus, can_transition, parse_status
from .records import OrderLineRecord, OrderRecord, SessionRecord, as_utc, utcnow

__all__ = [
    "OrderLineRecord",
    "OrderRecord",
    "OrderSource",
    "OrderStatus",
    "SessionRecord",
    "TRANSITIONS",
    "as_utc",
    "can_transition",
    "parse_status",
    "utcnow",
]
