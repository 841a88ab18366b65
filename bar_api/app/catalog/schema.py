"""Validated shape of the operator-managed catalog document.

The catalog is stored as one JSON document holding ingredients, drinks and
pricing settings. Everything that reaches :mod:`bar_api.app.pricing` passes
through :func:`parse_catalog` first, so the pricing functions only ever see
finite numbers of the right type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

# Strict numbers: numeric strings, NaN and infinities are rejected.
Amount = Annotated[float, Field(strict=True, allow_inf_nan=False)]
Quantity = Annotated[float, Field(strict=True, allow_inf_nan=False, ge=0)]


class RecipeUnit(str, Enum):
    VOLUME = "volume"
    DISCRETE = "discrete"
    DASH = "dash"
    DROP = "drop"


class DrinkPriceMode(str, Enum):
    MARKUP = "markup"
    TARGET_MARGIN = "target_margin"
    MANUAL = "manual"


class RoundingMode(str, Enum):
    """Psychological rounding targets for the fractional part of a price."""

    NONE = "none"
    END_X0 = "end_x0"
    END_X5 = "end_x5"
    END_X9 = "end_x9"


class _CatalogModel(BaseModel):
    # Fields that belong to another pricing model are ignored, not rejected.
    model_config = ConfigDict(extra="ignore", frozen=True)


class VolumePricedIngredient(_CatalogModel):
    id: str
    name: str | None = None
    pricing_model: Literal["by_volume"]
    cost_per_volume: Amount = 0.0


class ContainerPricedIngredient(_CatalogModel):
    id: str
    name: str | None = None
    pricing_model: Literal["by_container"]
    container_price: Amount = 0.0
    container_volume: Amount = 0.0
    yield_volume: Amount | None = None
    loss_pct: Amount = 0.0


class UnitPricedIngredient(_CatalogModel):
    id: str
    name: str | None = None
    pricing_model: Literal["by_unit"]
    cost_per_unit: Amount = 0.0


Ingredient = Annotated[
    Union[VolumePricedIngredient, ContainerPricedIngredient, UnitPricedIngredient],
    Field(discriminator="pricing_model"),
]


class RecipeItem(_CatalogModel):
    ingredient_id: str
    qty: Quantity
    unit: RecipeUnit = RecipeUnit.VOLUME


class Drink(_CatalogModel):
    id: str
    name: str
    items: list[RecipeItem] = Field(default_factory=list)
    price_mode: DrinkPriceMode = DrinkPriceMode.MARKUP
    manual_price: Amount | None = None
    visible: bool = False


class PricingSettings(_CatalogModel):
    markup: Annotated[float, Field(strict=True, allow_inf_nan=False, ge=0)] = 4.0
    target_cost_ratio: Annotated[
        float, Field(strict=True, allow_inf_nan=False, ge=0, le=1)
    ] = 0.2
    volume_per_dash: Quantity = 0.9
    volume_per_drop: Quantity = 0.05
    rounding_mode: RoundingMode = RoundingMode.END_X9


class CatalogDocument(_CatalogModel):
    ingredients: list[Ingredient] = Field(default_factory=list)
    drinks: list[Drink] = Field(default_factory=list)
    settings: PricingSettings = Field(default_factory=PricingSettings)


@dataclass(frozen=True)
class CatalogSnapshot:
    """A parsed catalog plus the watermark it was read at."""

    document: CatalogDocument
    updated_at: datetime | None = None
    ingredients: Mapping[str, Any] = field(init=False)
    public_drinks: Mapping[str, Drink] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "ingredients", {ing.id: ing for ing in self.document.ingredients}
        )
        object.__setattr__(
            self,
            "public_drinks",
            {drink.id: drink for drink in self.document.drinks if drink.visible},
        )

    @property
    def settings(self) -> PricingSettings:
        return self.document.settings


def _error_details(exc: PydanticValidationError) -> dict[str, Any]:
    return {
        "errors": [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
    }


def parse_catalog(
    state: Mapping[str, Any] | None, updated_at: datetime | None = None
) -> CatalogSnapshot:
    """Validate a raw catalog document and return a :class:`CatalogSnapshot`.

    Raises :class:`~bar_api.app.errors.ValidationError` listing every
    offending field when the document does not match the schema.
    """

    if not isinstance(state, Mapping):
        raise ValidationError("catalog document must be an object")
    try:
        document = CatalogDocument.model_validate(dict(state))
    except PydanticValidationError as exc:
        raise ValidationError("invalid catalog document", _error_details(exc)) from exc
    return CatalogSnapshot(document=document, updated_at=updated_at)
