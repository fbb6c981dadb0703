from types import SimpleNamespace

import pytest

from rugtrack.services.pricing import (
    MATERIAL_RATES, cleaning_cost, order_totals, parse_measurement, rate_for
)


@pytest.mark.parametrize("material,rate", [
    ("Wool", 20), ("Silk", 50), ("Synthetic", 15),
    ("Cotton", 20), ("Blend", 15), ("Unknown", 20),
])
def test_cleaning_cost_uses_material_rate(material, rate):
    assert cleaning_cost("2.5", "3", material) == round(2.5 * 3 * rate, 2)


def test_unrecognised_material_falls_back_to_default_rate():
    assert rate_for("Jute") == 20
    assert rate_for(None) == 20
    assert cleaning_cost("2", "2", "Jute") == 80.0


def test_cleaning_cost_rounds_to_cents():
    assert cleaning_cost("1.333", "1.111", "Silk") == round(1.333 * 1.111 * 50, 2)


@pytest.mark.parametrize("length,width", [
    ("", "3"), ("abc", "3"), ("2", None), ("0", "3"), ("-2", "3"), ("2", "-0.5"),
])
def test_unpriced_when_dimensions_unusable(length, width):
    assert cleaning_cost(length, width, "Wool") == 0


def test_measurement_parses_leading_number():
    assert parse_measurement("3.5m") == 3.5
    assert parse_measurement(" 2 ") == 2.0
    assert parse_measurement(".5") == 0.5
    assert parse_measurement("m3") is None
    assert parse_measurement(None) is None


def test_material_rates_table():
    assert MATERIAL_RATES == {
        "Wool": 20.0, "Silk": 50.0, "Synthetic": 15.0,
        "Cotton": 20.0, "Blend": 15.0, "Unknown": 20.0,
    }


def test_order_totals_sum_cleaning_and_repair():
    items = [
        SimpleNamespace(cleaning_cost=120.0, repair_cost=None),
        SimpleNamespace(cleaning_cost=45.5, repair_cost=80.0),
        SimpleNamespace(cleaning_cost=0, repair_cost=None),
    ]
    totals = order_totals(items)
    assert totals.cleaning_total == 165.5
    assert totals.repair_total == 80.0
    assert totals.grand_total == 245.5

    # Derived on read: a second pass gives the same answer and mutates nothing
    assert order_totals(items) == totals
    assert items[0].repair_cost is None


def test_order_totals_empty():
    assert order_totals([]).grand_total == 0
