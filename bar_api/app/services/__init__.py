"""Application services sitting between routes and repositories."""

from .cart import CartLine, merge_cart, parse_cart, sanitize_text
from .catalog_service import load_snapshot, pricing_report, public_menu, replace_catalog
from .codes import make_order_code, make_session_code
from .order_service import OrderService, OrdersPage, price_lines
from .session_manager import OrderSessionManager
from .watermark import has_changes, parse_since

__all__ = [
    "CartLine",
    "OrderService",
    "OrderSessionManager",
    "OrdersPage",
    "has_changes",
    "load_snapshot",
    "make_order_code",
    "make_session_code",
    "merge_cart",
    "parse_cart",
    "parse_since",
    "price_lines",
    "pricing_report",
    "public_menu",
    "replace_catalog",
    "sanitize_text",
]
