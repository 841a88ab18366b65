"""Ingredient and recipe cost computation.

All helpers are pure and operate on validated catalog models. Missing or
degenerate data resolves to a zero cost instead of raising so that a single
bad catalog entry never blocks pricing of the rest of the menu.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from ..catalog.schema import (
    ContainerPricedIngredient,
    PricingSettings,
    RecipeItem,
    RecipeUnit,
    UnitPricedIngredient,
    VolumePricedIngredient,
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def effective_yield(ingredient: ContainerPricedIngredient) -> float:
    """Return the usable volume of one container after loss."""

    yield_volume = (
        ingredient.yield_volume
        if ingredient.yield_volume is not None
        else ingredient.container_volume
    )
    loss_pct = _clamp(ingredient.loss_pct, 0.0, 100.0)
    return yield_volume * (1 - loss_pct / 100)


def cost_per_volume(ingredient) -> float | None:
    """Return the cost of one volume unit of ``ingredient``.

    ``None`` signals a discrete-unit ingredient that has no volume cost; use
    :func:`cost_per_unit` for those.
    """

    if isinstance(ingredient, VolumePricedIngredient):
        value = ingredient.cost_per_volume
        return value if value > 0 else 0.0
    if isinstance(ingredient, ContainerPricedIngredient):
        price = ingredient.container_price
        usable = effective_yield(ingredient)
        # Checked before dividing so an empty or free container costs nothing.
        if price <= 0 or usable <= 0:
            return 0.0
        return price / usable
    return None


def cost_per_unit(ingredient) -> float:
    """Return the discrete cost of ``ingredient`` (0 unless unit-priced)."""

    if isinstance(ingredient, UnitPricedIngredient):
        return ingredient.cost_per_unit
    return 0.0


def to_volume(item: RecipeItem, settings: PricingSettings) -> float:
    """Convert a non-discrete recipe quantity to base volume units."""

    if item.unit is RecipeUnit.DASH:
        return item.qty * settings.volume_per_dash
    if item.unit is RecipeUnit.DROP:
        return item.qty * settings.volume_per_drop
    return item.qty


def item_cost(item: RecipeItem, ingredient, settings: PricingSettings) -> float:
    """Return the cost contributed by one recipe line."""

    if ingredient is None:
        return 0.0
    if item.unit is RecipeUnit.DISCRETE:
        return item.qty * cost_per_unit(ingredient)
    per_volume = cost_per_volume(ingredient)
    if per_volume is None:
        return 0.0
    return to_volume(item, settings) * per_volume


def recipe_cost(
    items: Iterable[RecipeItem],
    ingredients: Mapping[str, object],
    settings: PricingSettings,
) -> float:
    """Sum the cost of every recipe line.

    Lines pointing at an ingredient missing from ``ingredients`` add nothing.
    """

    total = 0.0
    for item in items:
        total += item_cost(item, ingredients.get(item.ingredient_id), settings)
    return total
