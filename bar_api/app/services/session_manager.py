"""Fulfilment session lifecycle.

At most one session may be open at a time. The database enforces that rule;
this manager only tolerates races against it. ``open`` inserts
optimistically and, when the insert conflicts, looks for a session opened by
a concurrent caller before trying again with a fresh code.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..domain import SessionRecord, utcnow
from ..errors import ConflictError
from ..repos import SessionsRepo, SessionSummary
from ..routes_metrics import code_conflicts_total
from .codes import make_session_code

logger = logging.getLogger(__name__)


class OrderSessionManager:
    def __init__(
        self,
        repo: SessionsRepo,
        *,
        prefix: str = "BAR",
        attempts: int = 5,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[str, datetime], str] = make_session_code,
    ) -> None:
        self.repo = repo
        self.prefix = prefix
        self.attempts = attempts
        self.clock = clock
        self.code_factory = code_factory

    async def get_active(self) -> SessionRecord | None:
        return await self.repo.get_active()

    async def open(self) -> SessionRecord:
        """Return the open session, opening one if none exists.

        Raises :class:`~bar_api.app.errors.ConflictError` only when every
        attempt conflicted and no open session can be found afterwards.
        """

        current = await self.repo.get_active()
        if current is not None:
            return current

        last_error: ConflictError | None = None
        for attempt in range(1, self.attempts + 1):
            now = self.clock()
            code = self.code_factory(self.prefix, now)
            try:
                session = await self.repo.insert(code, now)
            except ConflictError as exc:
                last_error = exc
                code_conflicts_total.labels(kind="session").inc()
                logger.info(
                    "session insert conflict attempt=%d/%d code=%s",
                    attempt,
                    self.attempts,
                    code,
                )
                winner = await self.repo.get_active()
                if winner is not None:
                    logger.info("session already opened concurrently code=%s", winner.code)
                    return winner
                continue
            logger.info("session opened code=%s id=%s", session.code, session.id)
            return session

        winner = await self.repo.get_active()
        if winner is not None:
            return winner
        logger.error("session open failed after %d attempts", self.attempts)
        raise ConflictError(
            "could not open a session",
            {"attempts": self.attempts, "reason": last_error.message if last_error else None},
        )

    async def close(self) -> SessionRecord | None:
        """Close the open session; returns ``None`` when nothing was open."""

        current = await self.repo.get_active()
        if current is None:
            return None
        closed = await self.repo.close(current.id, self.clock())
        if closed is None:
            # closed concurrently by another operator
            return await self.repo.get(current.id)
        logger.info("session closed code=%s id=%s", closed.code, closed.id)
        return closed

    async def history(self, limit: int = 30) -> list[SessionSummary]:
        return await self.repo.list_recent(limit)
