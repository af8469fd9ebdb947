"""
Utility functions for level generation (NumPy-backed grids).

Grids are 2D NumPy int8 arrays indexed [y][x] with row 0 at the top of the
level. Positions are passed around as (x, y) tuples.
"""

import math
from typing import Iterator, Tuple

import numpy as np

from spelunkgen.level.tile import AIR, WALL

Position = Tuple[int, int]


# ============================================================================
# DIRECTION DEFINITIONS
# ============================================================================

# y grows downward: north is one row up
DIRECTIONS_4 = [
    ('north', 0, -1), ('south', 0, 1),
    ('west', -1, 0), ('east', 1, 0)
]


# ============================================================================
# GRID OPERATIONS
# ============================================================================

def create_grid(width: int, height: int, state: int = AIR) -> np.ndarray:
    """
    Create a grid (height x width) filled with a single cell state.

    Args:
        width: Grid width in tiles
        height: Grid height in tiles
        state: Initial state of every cell

    Returns:
        2D int8 array [y][x]
    """
    return np.full((height, width), state, dtype=np.int8)


def grid_from_rows(rows) -> np.ndarray:
    """Build a grid from strings or nested sequences of 0/1 (one entry per row)."""
    return np.array([[int(c) for c in row] for row in rows], dtype=np.int8)


def valid_pos(x: int, y: int, width: int, height: int) -> bool:
    """Check if position is within grid bounds."""
    return 0 <= x < width and 0 <= y < height


def neighbors_4(x: int, y: int, width: int, height: int) -> Iterator[Tuple[int, int, str]]:
    """Yield cardinal neighbors (nx, ny, direction) within bounds."""
    for direction, dx, dy in DIRECTIONS_4:
        nx, ny = x + dx, y + dy
        if valid_pos(nx, ny, width, height):
            yield (nx, ny, direction)


def pad_with_walls(grid: np.ndarray, radius: int) -> np.ndarray:
    """Surround the grid with `radius` rings of wall cells."""
    return np.pad(grid, radius, mode='constant', constant_values=WALL)


def clamp_pos(pos: Position, width: int, height: int) -> Position:
    """Clamp a position into the grid."""
    return (min(max(pos[0], 0), width - 1), min(max(pos[1], 0), height - 1))


# ============================================================================
# DISTANCE CALCULATIONS
# ============================================================================

def manhattan(pos1: Position, pos2: Position) -> int:
    """Manhattan (L1) distance between two positions."""
    return abs(pos1[0] - pos2[0]) + abs(pos1[1] - pos2[1])


def chebyshev(pos1: Position, pos2: Position) -> int:
    """Chebyshev (L-infinity) distance between two positions."""
    return max(abs(pos1[0] - pos2[0]), abs(pos1[1] - pos2[1]))


def euclidean(pos1: Position, pos2: Position) -> float:
    """Euclidean (L2) distance between two positions."""
    dx = pos1[0] - pos2[0]
    dy = pos1[1] - pos2[1]
    return math.sqrt(dx * dx + dy * dy)


def euclidean_squared(pos1: Position, pos2: Position) -> float:
    """Squared Euclidean distance (faster, for comparisons)."""
    dx = pos1[0] - pos2[0]
    dy = pos1[1] - pos2[1]
    return dx * dx + dy * dy
