"""
Cellular reshaping step.

Each pass reads a tile's Moore neighborhood from the previous generation,
hands it to a decision function and writes the rounded answer into a fresh
grid (an all-at-once cellular automaton update, never in place).

Decision functions are anything matching NeighborhoodToScalar: a callable
taking the flat sensor vector and returning one number. Evolved networks,
hand-written rules and test doubles all plug in the same way.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from spelunkgen.config import get_logger
from spelunkgen.level.tile import AIR, WALL
from spelunkgen.level.utils import pad_with_walls

logger = get_logger(__name__)


@runtime_checkable
class NeighborhoodToScalar(Protocol):
    def __call__(self, inputs: np.ndarray) -> float:
        ...


@dataclass
class ReshapeResult:
    grid: np.ndarray
    in_range: bool  # every raw decision stayed within [0, 1]


def sensor_vector(grid: np.ndarray, x: int, y: int, radius: int) -> np.ndarray:
    """
    Moore neighborhood of (x, y) as a flat float vector of length (2r+1)^2.

    Offsets are enumerated dx outer, dy inner; cells outside the grid read
    as WALL.
    """
    grid = np.asarray(grid)
    height, width = grid.shape
    values = []
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height:
                values.append(grid[ny, nx])
            else:
                values.append(WALL)
    return np.array(values, dtype=np.float64)


def sensor_windows(grid: np.ndarray, radius: int) -> np.ndarray:
    """
    Sensor vectors of every tile at once.

    Returns an array of shape (height, width, (2r+1)^2) whose [y, x] entry
    equals sensor_vector(grid, x, y, radius).
    """
    side = 2 * radius + 1
    padded = pad_with_walls(np.asarray(grid), radius)
    windows = sliding_window_view(padded, (side, side))  # [y, x, dy, dx]
    # dx outer, dy inner
    windows = windows.transpose(0, 1, 3, 2)
    height, width = windows.shape[:2]
    return windows.reshape(height, width, side * side).astype(np.float64)


def round_decision(value: float) -> int:
    """Round to the nearest integer (halves go up) and clip to a cell state."""
    if not np.isfinite(value):
        return WALL if value > 0 else AIR
    rounded = int(np.floor(value + 0.5))
    return WALL if rounded >= WALL else AIR


def reshape(grid: np.ndarray, decide: NeighborhoodToScalar, radius: int) -> ReshapeResult:
    """
    Run one reshape pass over the whole grid in raster order.

    Out-of-range decisions are still rounded and written (clipped to a valid
    state); they only clear the `in_range` flag.
    """
    grid = np.asarray(grid)
    height, width = grid.shape
    windows = sensor_windows(grid, radius)
    scratch = np.empty_like(grid)
    in_range = True
    for y in range(height):
        for x in range(width):
            value = float(decide(windows[y, x]))
            if not 0.0 <= value <= 1.0:
                in_range = False
            scratch[y, x] = round_decision(value)
    if not in_range:
        logger.debug("Decision function produced values outside [0, 1]")
    return ReshapeResult(grid=scratch, in_range=in_range)


# ============================================================================
# BUILT-IN DECISION FUNCTIONS
# ============================================================================

class ThresholdRule:
    """Become a wall when the wall fraction of the neighborhood exceeds a threshold."""

    def __init__(self, threshold: float = 0.5):
        self.threshold = threshold

    def __call__(self, inputs: np.ndarray) -> float:
        return 1.0 if float(np.mean(inputs)) > self.threshold else 0.0

    def __repr__(self):
        return f"{type(self).__name__}(threshold={self.threshold})"


class MajorityRule(ThresholdRule):
    """Classic cave smoothing: walls win where walls are the majority."""

    def __init__(self):
        super().__init__(0.5)
