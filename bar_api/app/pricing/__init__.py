"""Cost and price computation for drinks."""

from .costs import (
    cost_per_unit,
    cost_per_volume,
    effective_yield,
    item_cost,
    recipe_cost,
    to_volume,
)
from .policy import (
    PriceCandidates,
    apply_rounding,
    drink_candidates,
    price_candidates,
    public_price,
    round_money,
    select_price,
)

__all__ = [
    "PriceCandidates",
    "apply_rounding",
    "cost_per_unit",
    "cost_per_volume",
    "drink_candidates",
    "effective_yield",
    "item_cost",
    "price_candidates",
    "public_price",
    "recipe_cost",
    "round_money",
    "select_price",
    "to_volume",
]
