from datetime import datetime, timezone

import pytest

from bar_api.app.catalog import (
    ContainerPricedIngredient,
    RoundingMode,
    UnitPricedIngredient,
    parse_catalog,
)
from bar_api.app.errors import ValidationError

from catalog_samples import sample_catalog


def test_parse_sample_catalog():
    ts = datetime(2026, 1, 1, tzinfo=timezone.utc)
    snapshot = parse_catalog(sample_catalog(), ts)
    assert snapshot.updated_at == ts
    assert isinstance(snapshot.ingredients["syrup"], ContainerPricedIngredient)
    assert isinstance(snapshot.ingredients["lime"], UnitPricedIngredient)
    assert "staff-special" not in snapshot.public_drinks
    assert set(snapshot.public_drinks) == {"mojito", "daiquiri", "house-shot", "water"}


def test_partial_settings_merge_over_defaults():
    snapshot = parse_catalog({"settings": {"markup": 3}})
    assert snapshot.settings.markup == 3
    assert snapshot.settings.target_cost_ratio == 0.2
    assert snapshot.settings.volume_per_dash == 0.9
    assert snapshot.settings.rounding_mode is RoundingMode.END_X9


def test_fields_of_other_pricing_models_are_ignored():
    snapshot = parse_catalog(
        {
            "ingredients": [
                {
                    "id": "soda",
                    "pricing_model": "by_unit",
                    "cost_per_unit": 1.25,
                    "container_price": 99,
                    "supplier": "ACME",
                }
            ]
        }
    )
    soda = snapshot.ingredients["soda"]
    assert soda.cost_per_unit == 1.25
    assert not hasattr(soda, "container_price")


def test_drink_defaults():
    snapshot = parse_catalog({"drinks": [{"id": "x", "name": "X"}]})
    drink = snapshot.document.drinks[0]
    assert drink.visible is False
    assert drink.price_mode.value == "markup"
    assert snapshot.public_drinks == {}


@pytest.mark.parametrize(
    "doc",
    [
        {"ingredients": [{"id": "a", "pricing_model": "by_volume", "cost_per_volume": "1.5"}]},
        {"ingredients": [{"id": "a", "pricing_model": "by_weight"}]},
        {"drinks": [{"id": "d", "name": "D", "items": [{"ingredient_id": "a", "qty": -1}]}]},
        {"drinks": [{"id": "d", "name": "D", "items": [{"ingredient_id": "a", "qty": 1, "unit": "oz"}]}]},
        {"settings": {"target_cost_ratio": 1.5}},
        {"settings": {"rounding_mode": "end_x7"}},
    ],
)
def test_invalid_documents_raise_validation_error(doc):
    with pytest.raises(ValidationError) as info:
        parse_catalog(doc)
    assert info.value.details["errors"]


def test_non_mapping_document_rejected():
    with pytest.raises(ValidationError):
        parse_catalog(["not", "a", "catalog"])
