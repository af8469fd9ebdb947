"""
Neighbor-bitmask tile classifier.

Every tile gets a 4-bit code from its cardinal neighbors (out of bounds
counts as wall):

    bit 0 = north is wall, bit 1 = south, bit 2 = west, bit 3 = east

The code, together with the tile's own state, selects a structural
category. Several codes map to no category at all (wall codes 5, 6, 9, 10
and air codes 1, 2, 4, 5, 6, 8, 9, 10), so the counters do NOT add up to the
number of tiles in the grid.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from spelunkgen.level.tile import WALL, TileCategory
from spelunkgen.level.utils import pad_with_walls

NORTH_BIT = 1
SOUTH_BIT = 2
WEST_BIT = 4
EAST_BIT = 8

WALL_CODES: Dict[int, TileCategory] = {
    0: TileCategory.LONER,
    1: TileCategory.END, 2: TileCategory.END, 4: TileCategory.END, 8: TileCategory.END,
    3: TileCategory.PLATFORM,
    12: TileCategory.SPIRE,
    15: TileCategory.SOLID,
}

AIR_CODES: Dict[int, TileCategory] = {
    0: TileCategory.EMPTY,
    3: TileCategory.PIT,
    12: TileCategory.TUNNEL,
    7: TileCategory.NOOK, 11: TileCategory.NOOK, 13: TileCategory.NOOK, 14: TileCategory.NOOK,
    15: TileCategory.HOLE,
}

# wall-orientation counters, only fed by wall tiles
HORIZONTAL_CODES = frozenset((3, 13, 14))
VERTICAL_CODES = frozenset((12, 7, 11))


@dataclass
class ClassificationCounts:
    categories: Dict[TileCategory, int] = field(
        default_factory=lambda: {category: 0 for category in TileCategory}
    )
    horizontal: int = 0
    vertical: int = 0

    def __getitem__(self, category: TileCategory) -> int:
        return self.categories[category]

    @property
    def classified(self) -> int:
        return sum(self.categories.values())

    def as_dict(self) -> Dict[str, int]:
        out = {category.value: count for category, count in self.categories.items()}
        out['horizontal'] = self.horizontal
        out['vertical'] = self.vertical
        return out


def neighbor_code(grid: np.ndarray, x: int, y: int) -> int:
    """4-bit neighborhood code of a single tile."""
    height, width = grid.shape

    def blocked(nx, ny):
        return not (0 <= nx < width and 0 <= ny < height) or grid[ny, nx] == WALL

    code = 0
    if blocked(x, y - 1):
        code |= NORTH_BIT
    if blocked(x, y + 1):
        code |= SOUTH_BIT
    if blocked(x - 1, y):
        code |= WEST_BIT
    if blocked(x + 1, y):
        code |= EAST_BIT
    return code


def neighbor_codes(grid: np.ndarray) -> np.ndarray:
    """Neighborhood codes of the whole grid at once ([y][x])."""
    padded = pad_with_walls(np.asarray(grid), 1) == WALL
    north = padded[:-2, 1:-1]
    south = padded[2:, 1:-1]
    west = padded[1:-1, :-2]
    east = padded[1:-1, 2:]
    return (north * NORTH_BIT + south * SOUTH_BIT
            + west * WEST_BIT + east * EAST_BIT).astype(np.int8)


def classify_tile(state: int, code: int) -> Tuple[Optional[TileCategory], bool, bool]:
    """
    Categorize one tile.

    Returns:
        (category or None, counts as horizontal wall, counts as vertical wall)
    """
    if state == WALL:
        return WALL_CODES.get(code), code in HORIZONTAL_CODES, code in VERTICAL_CODES
    return AIR_CODES.get(code), False, False


class TileClassifier:
    """Single full-grid pass producing ClassificationCounts."""

    def classify(self, grid: np.ndarray) -> ClassificationCounts:
        grid = np.asarray(grid)
        codes = neighbor_codes(grid)
        walls = grid == WALL
        counts = ClassificationCounts()

        wall_hist = np.bincount(codes[walls].astype(np.int64), minlength=16)
        air_hist = np.bincount(codes[~walls].astype(np.int64), minlength=16)

        for code, category in WALL_CODES.items():
            counts.categories[category] += int(wall_hist[code])
        for code, category in AIR_CODES.items():
            counts.categories[category] += int(air_hist[code])
        counts.horizontal = int(sum(wall_hist[c] for c in HORIZONTAL_CODES))
        counts.vertical = int(sum(wall_hist[c] for c in VERTICAL_CODES))
        return counts
