import matplotlib

matplotlib.use("Agg")

import pytest

from hybrid_cost_calc import RateInput, SpendDistanceInput, compute_costs


@pytest.fixture
def default_costs():
    # 29 spent over 50 km at 2.1/kWh vs. 100 spent over 200 km at 7.0/L
    return compute_costs(
        SpendDistanceInput(spend=29.0, distance=50.0, unit_price=2.1),
        SpendDistanceInput(spend=100.0, distance=200.0, unit_price=7.0),
    )


@pytest.fixture
def example_costs():
    return compute_costs(RateInput(2.1, 27.62), RateInput(7.0, 7.0))
