"""Sale price candidates, psychological rounding and price selection.

The selected public price of a drink becomes the locked unit price of an
order line, so the arithmetic here is plain IEEE-754 floats applied in a fixed
order; currency rounding happens once, in :func:`round_money`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

from ..catalog.schema import Drink, DrinkPriceMode, PricingSettings, RoundingMode
from .costs import recipe_cost

ROUNDING_TOLERANCE = 1e-9

_TARGET_FRACTIONS = {
    RoundingMode.END_X5: 0.5,
    RoundingMode.END_X9: 0.9,
}


def apply_rounding(price: float, mode: RoundingMode) -> float:
    """Force the fractional part of ``price`` to the target of ``mode``.

    ``end_x0`` rounds up to the next integer unless ``price`` is already
    integral; ``end_x5``/``end_x9`` move to the nearest ``i + f`` at or above
    ``price``. Non-finite input yields 0.
    """

    if not math.isfinite(price):
        return 0.0
    if mode is RoundingMode.NONE:
        return price

    integer = math.floor(price)
    if mode is RoundingMode.END_X0:
        return price if price - integer == 0 else float(integer + 1)

    target = _TARGET_FRACTIONS[mode]
    candidate = integer + target
    if price <= candidate + ROUNDING_TOLERANCE:
        return candidate
    return integer + 1 + target


def round_money(value: float) -> float:
    """Round to cents, halves away from zero for positive amounts."""

    if not math.isfinite(value):
        return 0.0
    return math.floor(value * 100 + 0.5) / 100


@dataclass(frozen=True)
class PriceCandidates:
    """Every price the policy can offer for one drink."""

    cost: float
    markup_price: float
    margin_price: float
    manual_price: float

    def to_dict(self) -> dict:
        return {
            "cost": self.cost,
            "markup_price": self.markup_price,
            "margin_price": self.margin_price,
            "manual_price": self.manual_price,
        }


def price_candidates(
    cost: float, settings: PricingSettings, manual_price: float | None = None
) -> PriceCandidates:
    """Compute rounded markup/margin prices and the raw manual price."""

    markup = apply_rounding(cost * settings.markup, settings.rounding_mode)
    margin = (
        apply_rounding(cost / settings.target_cost_ratio, settings.rounding_mode)
        if settings.target_cost_ratio > 0
        else 0.0
    )
    manual = max(0.0, manual_price or 0.0)
    return PriceCandidates(
        cost=cost, markup_price=markup, margin_price=margin, manual_price=manual
    )


def select_price(drink: Drink, candidates: PriceCandidates) -> float:
    """Pick the candidate matching the drink's public price mode."""

    if drink.price_mode is DrinkPriceMode.MANUAL:
        return candidates.manual_price
    if drink.price_mode is DrinkPriceMode.TARGET_MARGIN:
        return candidates.margin_price
    return candidates.markup_price


def drink_candidates(
    drink: Drink, ingredients: Mapping[str, object], settings: PricingSettings
) -> PriceCandidates:
    cost = recipe_cost(drink.items, ingredients, settings)
    return price_candidates(cost, settings, drink.manual_price)


def public_price(
    drink: Drink, ingredients: Mapping[str, object], settings: PricingSettings
) -> float:
    """Return the drink's selected public price before currency rounding."""

    return select_price(drink, drink_candidates(drink, ingredients, settings))
