import os
import random
import sys

import numpy as np
import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from spelunkgen.level import LevelConfig  # noqa: E402
from spelunkgen.level.utils import grid_from_rows  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def hollow_3x3():
    """3x3 walls with a single open center tile."""
    return grid_from_rows(["111", "101", "111"])


@pytest.fixture
def noisy_grid():
    """Deterministic 17x13 noise grid (row count != column count on purpose)."""
    state = np.random.default_rng(99)
    return (state.random((13, 17)) < 0.45).astype(np.int8)


@pytest.fixture
def small_config():
    return LevelConfig(width=30, height=24, fill_percentage=45, seed=7)


def brute_force_count(grid, x0, y0, x1, y1):
    total = 0
    for y in range(y0, y1 + 1):
        for x in range(x0, x1 + 1):
            total += int(grid[y][x])
    return total
