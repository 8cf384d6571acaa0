# tests/test_decision.py
import pytest

from hybrid_cost_calc import (
    ANNUAL_DISTANCE_KM,
    CostResult,
    DecisionKind,
    classify_decision,
    diff_tone,
)


def _costs(diff, critical=1.8):
    return CostResult(
        electric_cost_per_km=0.5 + diff,
        fuel_cost_per_km=0.5,
        diff=diff,
        critical_electric_price=critical,
    )


@pytest.mark.parametrize("diff,kind", [
    (0.0101, DecisionKind.FUEL),
    (0.0099, DecisionKind.EQUAL),
    (0.0, DecisionKind.EQUAL),
    (-0.0099, DecisionKind.EQUAL),
    (-0.0101, DecisionKind.ELECTRIC),
    (0.5, DecisionKind.FUEL),
    (-0.5, DecisionKind.ELECTRIC),
])
def test_decision_partition(diff, kind):
    assert classify_decision(_costs(diff)).kind is kind


@pytest.mark.parametrize("diff", [0.09, -0.09, 0.004])
def test_savings_use_absolute_difference(diff):
    decision = classify_decision(_costs(diff))
    assert decision.saving_per_km == pytest.approx(abs(diff))
    assert decision.annual_saving == pytest.approx(abs(diff) * ANNUAL_DISTANCE_KM)


def test_guidance_mentions_critical_price():
    fuel = classify_decision(_costs(0.09, critical=1.7741))
    electric = classify_decision(_costs(-0.09, critical=2.35))
    equal = classify_decision(_costs(0.0, critical=2.1))

    assert "1.77" in fuel.guidance and "drop" in fuel.guidance
    assert "2.35" in electric.guidance and "rise" in electric.guidance
    assert "2.10" in equal.guidance
    assert fuel.critical_electric_price == 1.7741


def test_severity_maps_to_message_boxes():
    assert classify_decision(_costs(0.09)).severity == 'warning'
    assert classify_decision(_costs(-0.09)).severity == 'success'
    assert classify_decision(_costs(0.0)).severity == 'info'


def test_custom_annual_distance():
    decision = classify_decision(_costs(0.1), annual_distance_km=10000)
    assert decision.annual_saving == pytest.approx(1000.0)


@pytest.mark.parametrize("diff,tone", [
    (0.03, 'warning'),
    (-0.03, 'saving'),
    (0.015, 'neutral'),
    (-0.015, 'neutral'),
])
def test_diff_tone(diff, tone):
    assert diff_tone(diff) == tone
