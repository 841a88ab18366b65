"""Repository interface for fulfilment sessions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ..domain import SessionRecord


@dataclass(frozen=True)
class SessionSummary:
    """A session with the count and value of the orders taken during it."""

    session: SessionRecord
    orders_count: int
    subtotal: float

    def to_dict(self) -> dict:
        data = self.session.to_dict()
        data.update({"orders_count": self.orders_count, "subtotal": self.subtotal})
        return data


class SessionsRepo(ABC):
    """Contract for session persistence.

    The backing store must reject a second open session; ``insert`` raises
    :class:`~bar_api.app.errors.ConflictError` in that case and when ``code``
    is already taken.
    """

    @abstractmethod
    async def get_active(self) -> SessionRecord | None:
        """Return the open session, if any."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, session_id: str) -> SessionRecord | None:
        """Return one session by id."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, code: str, now: datetime) -> SessionRecord:
        """Persist a new open session."""
        raise NotImplementedError

    @abstractmethod
    async def close(self, session_id: str, now: datetime) -> SessionRecord | None:
        """Stamp ``closed_at`` on an open session; ``None`` if already closed."""
        raise NotImplementedError

    @abstractmethod
    async def list_recent(self, limit: int = 30) -> list[SessionSummary]:
        """Return the most recently opened sessions with order totals."""
        raise NotImplementedError
