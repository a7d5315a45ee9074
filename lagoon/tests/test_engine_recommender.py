"""Tests for dosing recommendations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from lagoon.app_api.factories import DEFAULT_PRODUCTS, default_targets
from lagoon.core.domain.enums import (
    ProductKind,
    ReasonCode,
    RecommendedAction,
    WaterParameter,
)
from lagoon.core.domain.models import EstimatedWaterState, ProductDefinition
from lagoon.core.engine.recommender import assess, evaluate, recommend, select_product

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _state(chlorine: float, ph: float) -> EstimatedWaterState:
    return EstimatedWaterState(free_chlorine_ppm=chlorine, ph=ph, as_of=NOW)


def _chlorine_product(product_id: str = "chlorine", effect: float = 5.0) -> ProductDefinition:
    return ProductDefinition(
        product_id=product_id,
        kind=ProductKind.CHLORINE,
        unit="g",
        effect_per_unit_m3=effect,
        concentration=1.0,
    )


def test_in_range_values_produce_no_recommendations() -> None:
    recs, statuses = evaluate(_state(1.0, 7.2), default_targets(), DEFAULT_PRODUCTS, 50.0)

    assert recs == []
    assert [s.reason_code for s in statuses] == [ReasonCode.IN_RANGE, ReasonCode.IN_RANGE]
    assert all(s.action == RecommendedAction.NONE for s in statuses)


def test_range_bounds_are_inclusive() -> None:
    targets = default_targets()

    assert recommend(_state(0.5, 7.0), targets, DEFAULT_PRODUCTS, 50.0) == []
    assert recommend(_state(1.5, 7.4), targets, DEFAULT_PRODUCTS, 50.0) == []


def test_low_chlorine_recommends_single_chlorine_dose() -> None:
    products = {"chlorine": _chlorine_product()}

    recs = recommend(_state(0.3, 7.2), default_targets(), products, 50.0)

    assert len(recs) == 1
    rec = recs[0]
    assert rec.parameter == WaterParameter.FREE_CHLORINE
    assert rec.product_id == "chlorine"
    assert rec.reason_code == ReasonCode.TOO_LOW
    assert rec.target_value == pytest.approx(1.0)
    # 0.7 ppm gap at 0.1 ppm per unit in 50 m3.
    assert rec.amount == pytest.approx(7.0)
    assert rec.unit == "g"
    assert "below 0.5 ppm" in rec.explanation


def test_ph_corrections_pick_direction_specific_products() -> None:
    high = recommend(_state(1.0, 7.8), default_targets(), DEFAULT_PRODUCTS, 50.0)
    low = recommend(_state(1.0, 6.8), default_targets(), DEFAULT_PRODUCTS, 50.0)

    assert [r.product_id for r in high] == ["ph_minus"]
    assert high[0].reason_code == ReasonCode.TOO_HIGH
    assert high[0].amount == pytest.approx(3000.0)
    assert [r.product_id for r in low] == ["ph_plus"]
    assert low[0].reason_code == ReasonCode.TOO_LOW
    assert low[0].amount == pytest.approx(1666.7)


def test_chlorine_precedes_ph() -> None:
    recs = recommend(_state(0.2, 7.9), default_targets(), DEFAULT_PRODUCTS, 50.0)

    assert [r.parameter for r in recs] == [WaterParameter.FREE_CHLORINE, WaterParameter.PH]


def test_high_chlorine_allows_natural_decay() -> None:
    recs, statuses = evaluate(_state(2.5, 7.2), default_targets(), DEFAULT_PRODUCTS, 50.0)

    assert recs == []
    assert statuses[0].parameter == WaterParameter.FREE_CHLORINE
    assert statuses[0].reason_code == ReasonCode.TOO_HIGH
    assert statuses[0].action == RecommendedAction.NONE
    assert "natural decay" in statuses[0].explanation


def test_missing_product_is_reported_not_raised() -> None:
    statuses = assess(_state(0.2, 7.9), default_targets(), {}, 50.0)

    assert [s.reason_code for s in statuses] == [ReasonCode.NO_PRODUCT, ReasonCode.NO_PRODUCT]
    assert recommend(_state(0.2, 7.9), default_targets(), {}, 50.0) == []


def test_dose_rounding_to_zero_is_suppressed() -> None:
    products = {"chlorine": _chlorine_product(effect=1_000_000.0)}

    recs, statuses = evaluate(_state(0.49, 7.2), default_targets(), products, 50.0)

    assert recs == []
    assert statuses[0].reason_code == ReasonCode.NEGLIGIBLE_DOSE


def test_smallest_product_id_wins() -> None:
    products = {
        "zz_chlorine": _chlorine_product("zz_chlorine", effect=5.0),
        "aa_chlorine": _chlorine_product("aa_chlorine", effect=10.0),
    }

    assert select_product(products, ProductKind.CHLORINE).product_id == "aa_chlorine"
    assert select_product(products, ProductKind.PH_PLUS) is None
    recs = recommend(_state(0.3, 7.2), default_targets(), products, 50.0)
    assert recs[0].product_id == "aa_chlorine"
    assert recs[0].amount == pytest.approx(3.5)


def test_products_without_effect_are_not_selected() -> None:
    products = {"chlorine": _chlorine_product(effect=0.0)}

    statuses = assess(_state(0.3, 7.2), default_targets(), products, 50.0)

    assert statuses[0].reason_code == ReasonCode.NO_PRODUCT


def test_emitted_amounts_are_positive() -> None:
    for chlorine in (0.0, 0.1, 0.3, 0.49):
        for ph in (6.0, 6.9, 7.5, 8.4):
            for rec in recommend(_state(chlorine, ph), default_targets(), DEFAULT_PRODUCTS, 30.0):
                assert rec.amount > 0
