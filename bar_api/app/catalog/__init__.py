"""Catalog document schema and parsing."""

from .schema import (
    CatalogDocument,
    CatalogSnapshot,
    ContainerPricedIngredient,
    Drink,
    DrinkPriceMode,
    Ingredient,
    PricingSettings,
    RecipeItem,
    RecipeUnit,
    RoundingMode,
    UnitPricedIngredient,
    VolumePricedIngredient,
    parse_catalog,
)

__all__ = [
    "CatalogDocument",
    "CatalogSnapshot",
    "ContainerPricedIngredient",
    "Drink",
    "DrinkPriceMode",
    "Ingredient",
    "PricingSettings",
    "RecipeItem",
    "RecipeUnit",
    "RoundingMode",
    "UnitPricedIngredient",
    "VolumePricedIngredient",
    "parse_catalog",
]
