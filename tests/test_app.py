# tests/test_app.py
import math

import pytest

from hybrid_cost_app import (
    MODE_RATE,
    MODE_SPEND,
    build_energy_input,
    coerce_non_negative,
    derive_dashboard,
    format_money,
    price_help,
)
from hybrid_cost_calc import DecisionKind, RateInput, SpendDistanceInput


@pytest.mark.parametrize("raw,expected", [
    ("2.5", 2.5),
    (3, 3.0),
    ("", 0.0),
    ("abc", 0.0),
    (None, 0.0),
    (-4.0, 0.0),
    (math.nan, 0.0),
    (math.inf, 0.0),
])
def test_coerce_non_negative(raw, expected):
    assert coerce_non_negative(raw) == expected


def test_build_energy_input_modes():
    spend = build_energy_input(MODE_SPEND, 29.0, 50.0, 2.1, 99.0)
    assert spend == SpendDistanceInput(spend=29.0, distance=50.0, unit_price=2.1)

    rate = build_energy_input(MODE_RATE, 29.0, 50.0, 2.1, -1.0)
    assert rate == RateInput(unit_price=2.1, rate_per_100=0.0)


def test_format_money():
    assert format_money(1350.4) == "¥1,350"


def test_derive_dashboard_defaults():
    results = derive_dashboard(MODE_SPEND, 29.0, 50.0, 2.1, 27.62, 100.0, 200.0, 7.0, 7.0)
    assert results['costs'].electric_cost_per_km == pytest.approx(0.58)
    assert results['decision'].kind is DecisionKind.FUEL
    assert len(results['cost_sweep']) == 46
    assert len(results['critical_sweep']) == 36
    assert len(results['scenarios']) == 5
    assert len(results['ratio_sweep']) == 46
    assert results['matrix'].shape == (9, 11)
    assert results['warnings'] == []


def test_price_help_follows_mode():
    assert "consumption estimate" in price_help(MODE_SPEND, "electric")
    assert "consumption estimate" in price_help(MODE_SPEND, "fuel")
    assert "consumption" not in price_help(MODE_RATE, "electric")
    assert "consumption" not in price_help(MODE_RATE, "fuel")
