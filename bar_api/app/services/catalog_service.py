"""Catalog loading, replacement and priced views."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from ..catalog import CatalogSnapshot, parse_catalog
from ..domain import utcnow
from ..errors import UpstreamUnavailableError, ValidationError
from ..pricing import drink_candidates, round_money, select_price
from ..repos import CatalogRepo

logger = logging.getLogger(__name__)


async def load_snapshot(repo: CatalogRepo) -> CatalogSnapshot:
    """Return the stored catalog.

    A missing or malformed stored document means the environment is not set
    up, so both surface as :class:`UpstreamUnavailableError`.
    """

    stored = await repo.load()
    if stored is None:
        raise UpstreamUnavailableError("catalog is not configured")
    state, updated_at = stored
    try:
        return parse_catalog(state, updated_at)
    except ValidationError as exc:
        logger.error("stored catalog is invalid: %s", exc.message)
        raise UpstreamUnavailableError("stored catalog is invalid", exc.details) from exc


async def replace_catalog(
    repo: CatalogRepo,
    state: Any,
    clock: Callable[[], datetime] = utcnow,
) -> CatalogSnapshot:
    """Validate and store a new catalog document, bumping the watermark.

    The document is stored as submitted so fields this service ignores
    survive a round trip through the admin screens.
    """

    snapshot = parse_catalog(state)
    updated_at = await repo.save(dict(state), clock())
    logger.info(
        "catalog replaced ingredients=%d drinks=%d",
        len(snapshot.document.ingredients),
        len(snapshot.document.drinks),
    )
    return CatalogSnapshot(document=snapshot.document, updated_at=updated_at)


def public_menu(snapshot: CatalogSnapshot) -> list[dict[str, Any]]:
    """Visible drinks with the price a new order would lock in."""

    menu = []
    for drink in snapshot.public_drinks.values():
        candidates = drink_candidates(drink, snapshot.ingredients, snapshot.settings)
        menu.append(
            {
                "id": drink.id,
                "name": drink.name,
                "price": round_money(select_price(drink, candidates)),
            }
        )
    return menu


def pricing_report(snapshot: CatalogSnapshot) -> list[dict[str, Any]]:
    """Cost, every price candidate and the selected price for each drink."""

    report = []
    for drink in snapshot.document.drinks:
        candidates = drink_candidates(drink, snapshot.ingredients, snapshot.settings)
        entry = {
            "id": drink.id,
            "name": drink.name,
            "visible": drink.visible,
            "price_mode": drink.price_mode.value,
            "selected_price": round_money(select_price(drink, candidates)),
        }
        entry.update(candidates.to_dict())
        report.append(entry)
    return report
