"""Repository interface for the catalog document."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any


class CatalogRepo(ABC):
    """Contract for reading and replacing the catalog document."""

    @abstractmethod
    async def load(self) -> tuple[dict[str, Any], datetime] | None:
        """Return the raw document and its watermark, or ``None`` if unset."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, state: dict[str, Any], now: datetime) -> datetime:
        """Replace the document and return the new watermark."""
        raise NotImplementedError
