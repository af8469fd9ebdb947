import numpy as np
import pytest

from spelunkgen.level import MajorityRule, NeighborhoodToScalar, ThresholdRule, reshape, sensor_vector
from spelunkgen.level.reshape import round_decision, sensor_windows
from spelunkgen.level.tile import AIR, WALL
from spelunkgen.level.utils import grid_from_rows


class CountingDecision:
    def __init__(self, value=0.0):
        self.value = value
        self.calls = 0

    def __call__(self, inputs):
        self.calls += 1
        return self.value


def test_sensor_vector_order_is_dx_outer_dy_inner():
    grid = grid_from_rows(["111", "110", "111"])
    vector = sensor_vector(grid, 1, 1, 1)
    assert len(vector) == 9
    # east neighbor: dx=+1, dy=0 -> index (1 + 1) * 3 + (0 + 1)
    assert [i for i, v in enumerate(vector) if v == AIR] == [7]


def test_sensor_vector_reads_out_of_bounds_as_wall():
    grid = np.zeros((3, 3), dtype=np.int8)
    vector = sensor_vector(grid, 0, 0, 1)
    assert [i for i, v in enumerate(vector) if v == WALL] == [0, 1, 2, 3, 6]


def test_sensor_windows_match_single_vectors(noisy_grid):
    windows = sensor_windows(noisy_grid, 2)
    h, w = noisy_grid.shape
    assert windows.shape == (h, w, 25)
    for y in range(h):
        for x in range(w):
            assert np.array_equal(windows[y, x], sensor_vector(noisy_grid, x, y, 2))


def test_reshape_reads_previous_generation_only(noisy_grid):
    north_index = 1 * 3 + 0  # dx=0, dy=-1 with radius 1

    def copy_north(inputs):
        return inputs[north_index]

    result = reshape(noisy_grid, copy_north, 1)
    expected = np.vstack([np.ones((1, noisy_grid.shape[1]), dtype=np.int8), noisy_grid[:-1]])
    assert np.array_equal(result.grid, expected)
    assert result.in_range


def test_reshape_is_deterministic(noisy_grid):
    rule = MajorityRule()
    first = reshape(noisy_grid, rule, 2).grid
    second = reshape(noisy_grid, rule, 2).grid
    assert np.array_equal(first, second)
    # input grid untouched
    assert first is not noisy_grid


def test_decision_called_once_per_tile(noisy_grid):
    decide = CountingDecision(0.2)
    result = reshape(noisy_grid, decide, 2)
    assert decide.calls == noisy_grid.size
    assert not result.grid.any()


@pytest.mark.parametrize("value,state,in_range", [
    (0.0, AIR, True),
    (0.49, AIR, True),
    (0.5, WALL, True),
    (1.0, WALL, True),
    (1.7, WALL, False),
    (-0.3, AIR, False),
])
def test_rounding_and_range_flag(value, state, in_range):
    grid = np.zeros((4, 4), dtype=np.int8)
    result = reshape(grid, CountingDecision(value), 1)
    assert (result.grid == state).all()
    assert result.in_range is in_range


def test_round_decision_handles_non_finite_values():
    assert round_decision(float("nan")) == AIR
    assert round_decision(float("inf")) == WALL
    assert round_decision(float("-inf")) == AIR


def test_rules_satisfy_the_capability():
    assert isinstance(MajorityRule(), NeighborhoodToScalar)
    assert isinstance(lambda inputs: 0.0, NeighborhoodToScalar)


def test_threshold_rule():
    rule = ThresholdRule(0.6)
    assert rule(np.array([1, 1, 1, 0, 0])) == 0.0
    assert rule(np.array([1, 1, 1, 1, 0])) == 1.0
    assert MajorityRule()(np.array([1, 1, 0])) == 1.0


def test_majority_fills_isolated_air():
    grid = grid_from_rows(["11111", "11111", "11011", "11111", "11111"])
    assert (reshape(grid, MajorityRule(), 1).grid == WALL).all()
