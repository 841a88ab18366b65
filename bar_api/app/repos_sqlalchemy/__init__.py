"""SQLAlchemy-backed repository implementations.

Besides the repositories themselves this module exposes
:func:`translate_errors`, which maps driver failures onto the application's
error taxonomy: uniqueness violations become
:class:`~bar_api.app.errors.ConflictError`, every other database failure
becomes :class:`~bar_api.app.errors.UpstreamUnavailableError`. The session is
rolled back in both cases so it can be reused for a retry.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ConflictError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def translate_errors(
    session: AsyncSession, conflict_message: str = "duplicate value"
) -> AsyncIterator[None]:
    """Run a unit of database work, translating driver errors."""

    try:
        yield
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError(conflict_message) from exc
    except (DBAPIError, OSError) as exc:
        await session.rollback()
        logger.error("database failure: %s", exc.__class__.__name__)
        raise UpstreamUnavailableError("database unavailable") from exc


from .catalog_repo_sql import CatalogRepoSQL  # noqa: E402
from .orders_repo_sql import OrdersRepoSQL  # noqa: E402
from .sessions_repo_sql import SessionsRepoSQL  # noqa: E402

__all__ = ["CatalogRepoSQL", "OrdersRepoSQL", "SessionsRepoSQL", "translate_errors"]
