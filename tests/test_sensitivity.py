# tests/test_sensitivity.py
import pytest

from hybrid_cost_calc import (
    CellClass,
    RateInput,
    build_sensitivity_matrix,
    compute_costs,
    compute_sensitivity_cell,
    format_offset,
    sensitivity_frame,
)


def test_matrix_shape(example_costs):
    matrix = build_sensitivity_matrix(example_costs)
    assert matrix.shape == (9, 11)
    assert len(matrix.rows) == 9
    assert all(len(row) == 11 for row in matrix.rows)
    assert len(list(matrix.iter_cells())) == 99
    assert matrix.shape == (len(matrix.rows), len(matrix.rows[0]))
    assert matrix.shape == sensitivity_frame(matrix).shape


def test_exactly_one_current_cell(example_costs):
    matrix = build_sensitivity_matrix(example_costs)
    current = [cell for cell in matrix.iter_cells() if cell.is_current]
    assert len(current) == 1
    assert current[0].electric_offset == 0
    assert current[0].fuel_offset == 0
    assert matrix.cell(0, 0) is current[0]


def test_current_cell_matches_cost_result(example_costs):
    cell = build_sensitivity_matrix(example_costs).cell(0, 0)
    assert cell.diff == abs(example_costs.diff)
    assert cell.electric_cost_per_km == example_costs.electric_cost_per_km
    assert cell.fuel_cost_per_km == example_costs.fuel_cost_per_km
    # the star marker does not change the underlying classification
    assert cell.classification is CellClass.FUEL_BETTER


def test_cell_classification(example_costs):
    matrix = build_sensitivity_matrix(example_costs)
    cheap_power = matrix.cell(-0.40, 0.50)
    assert cheap_power.classification is CellClass.ELECTRIC_BETTER
    assert cheap_power.electric_cost_per_km == pytest.approx(0.58002 * 0.6)
    assert cheap_power.fuel_cost_per_km == pytest.approx(0.49 * 1.5)

    dear_power = matrix.cell(0.60, -0.30)
    assert dear_power.classification is CellClass.FUEL_BETTER


def test_diff_percent_threshold():
    # 0.5% apart counts as even, 2% apart does not
    assert compute_sensitivity_cell(1.0, 0.995, 0, 0).classification is CellClass.EQUAL
    near = compute_sensitivity_cell(1.0, 0.98, 0, 0)
    assert near.classification is CellClass.FUEL_BETTER
    assert near.diff_percent == pytest.approx(2.0)


def test_zero_costs_are_equal():
    costs = compute_costs(RateInput(0.0, 0.0), RateInput(0.0, 0.0))
    matrix = build_sensitivity_matrix(costs)
    for cell in matrix.iter_cells():
        assert cell.diff_percent == 0.0
        assert cell.classification is CellClass.EQUAL


@pytest.mark.parametrize("offset,label", [
    (0, "Current"),
    (0.10, "+10%"),
    (0.60, "+60%"),
    (-0.40, "-40%"),
    (-0.30, "-30%"),
])
def test_format_offset(offset, label):
    assert format_offset(offset) == label


def test_sensitivity_frame(example_costs):
    matrix = build_sensitivity_matrix(example_costs)
    df = sensitivity_frame(matrix)
    assert df.shape == (9, 11)
    assert df.columns[0].startswith("-40%")
    assert df.index[0].startswith("-30%")

    current_row = matrix.fuel_offsets.index(0)
    current_col = matrix.electric_offsets.index(0)
    assert df.iloc[current_row, current_col].startswith("★ Current")
    assert sum("★" in value for value in df.to_numpy().ravel()) == 1
