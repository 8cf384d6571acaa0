# tests/test_sweeps.py
import pytest

from hybrid_cost_calc import (
    ANNUAL_DISTANCE_KM,
    RateInput,
    compute_costs,
    cost_sweep_frame,
    iter_cost_ratio,
    iter_cost_vs_electric_price,
    iter_critical_vs_fuel_price,
    iter_scenario_bars,
    scenario_frame,
    sweep_frame,
    sweep_values,
)


def test_sweep_values_keep_endpoint():
    values = list(sweep_values(0.0, 1.0, 0.1))
    assert len(values) == 11
    assert values[0] == 0.0
    assert values[-1] == 1.0


def test_cost_sweep_has_46_points(default_costs):
    points = list(iter_cost_vs_electric_price(default_costs))
    assert len(points) == 46
    assert points[0].price == pytest.approx(0.5)
    assert points[-1].price == pytest.approx(5.0)
    assert points[1].price - points[0].price == pytest.approx(0.1)


def test_cost_sweep_values(example_costs):
    for point in iter_cost_vs_electric_price(example_costs):
        assert point.electric_cost_per_km == pytest.approx(point.price * 27.62 / 100)
        assert point.fuel_cost_per_km == example_costs.fuel_cost_per_km


def test_sweeps_are_restartable(default_costs):
    assert list(iter_cost_vs_electric_price(default_costs)) == \
        list(iter_cost_vs_electric_price(default_costs))
    assert list(iter_cost_ratio(default_costs)) == list(iter_cost_ratio(default_costs))


def test_critical_sweep_range(example_costs):
    points = list(iter_critical_vs_fuel_price(example_costs))
    assert len(points) == 36
    assert points[0].parameter == pytest.approx(5.0)
    assert points[-1].parameter == pytest.approx(12.0)


def test_critical_sweep_is_a_curve(example_costs):
    points = list(iter_critical_vs_fuel_price(example_costs))
    for point in points:
        expected = (point.parameter * 7.0 / 100) * 100 / 27.62
        assert point.value == pytest.approx(expected)
    assert points[-1].value > points[0].value

    # at today's fuel price the sweep meets the headline critical price
    at_current = [p for p in points if p.parameter == pytest.approx(7.0)]
    assert len(at_current) == 1
    assert at_current[0].value == pytest.approx(example_costs.critical_electric_price)


def test_critical_sweep_zero_electric_rate():
    costs = compute_costs(RateInput(2.1, 0.0), RateInput(7.0, 7.0))
    assert all(p.value == 0.0 for p in iter_critical_vs_fuel_price(costs))


def test_scenario_bars(example_costs):
    bars = list(iter_scenario_bars(example_costs))
    assert [b.label for b in bars] == [
        'Current prices', 'Electricity +50%', 'Electricity +100%', 'Fuel +30%', 'Fuel +50%'
    ]
    current = bars[0]
    assert current.annual_electric == pytest.approx(0.58002 * ANNUAL_DISTANCE_KM)
    assert current.annual_fuel == pytest.approx(0.49 * ANNUAL_DISTANCE_KM)
    assert bars[2].annual_electric == pytest.approx(2 * current.annual_electric)
    assert bars[2].annual_fuel == pytest.approx(current.annual_fuel)
    assert bars[4].annual_fuel == pytest.approx(1.5 * current.annual_fuel)


def test_cost_ratio(example_costs):
    points = list(iter_cost_ratio(example_costs))
    assert len(points) == 46
    for point in points:
        expected = (point.parameter * 27.62 / 100) / 0.49
        assert point.value == pytest.approx(expected)


def test_cost_ratio_zero_fuel_cost():
    costs = compute_costs(RateInput(2.1, 27.62), RateInput(7.0, 0.0))
    assert all(p.value == 0.0 for p in iter_cost_ratio(costs))


def test_frames(example_costs):
    cost_df = cost_sweep_frame(list(iter_cost_vs_electric_price(example_costs)))
    assert list(cost_df.columns) == [
        'Electricity price', 'Charging cost (/km)', 'Refuelling cost (/km)'
    ]
    assert len(cost_df) == 46

    ratio_df = sweep_frame(list(iter_cost_ratio(example_costs)), 'Electricity price', 'Cost ratio')
    merged = cost_df.merge(ratio_df, on='Electricity price')
    assert len(merged) == 46

    bars_df = scenario_frame(list(iter_scenario_bars(example_costs)))
    assert bars_df.shape == (5, 3)
