"""Abstract persistence contracts consumed by the service layer."""

from .catalog_repo import CatalogRepo
from .orders_repo import OrdersRepo
from .sessions_repo import SessionsRepo, SessionSummary

__all__ = ["CatalogRepo", "OrdersRepo", "SessionSummary", "SessionsRepo"]
