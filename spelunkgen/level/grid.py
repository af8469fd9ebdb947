"""
Grid buffer: the mutable tile array a level is built on.

The buffer owns the active grid and a version counter. Every wholesale
replacement and every carved cell bumps the version, which is what derived
caches (summed-area table, classification counts) key their memoization on.
"""

import numpy as np

from spelunkgen.config import get_logger
from spelunkgen.level.tile import AIR, WALL
from spelunkgen.level.utils import create_grid, valid_pos

logger = get_logger(__name__)


class GridBuffer:
    """Fixed-size W x H grid of AIR/WALL cells; out-of-bounds reads are WALL."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            logger.error(f"Invalid grid size: {width}x{height}")
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells = create_grid(width, height, AIR)
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the active grid ([y][x])."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def copy(self) -> np.ndarray:
        return self._cells.copy()

    def randomize(self, fill_probability: float, rng) -> None:
        """
        Refill every cell: WALL with probability `fill_probability`, else AIR.

        Draws are made column by column (x outer, y inner) so a seeded rng
        reproduces the same level regardless of how the grid is stored.
        """
        new_grid = create_grid(self.width, self.height, AIR)
        for x in range(self.width):
            for y in range(self.height):
                if rng.random() > fill_probability:
                    new_grid[y, x] = AIR
                else:
                    new_grid[y, x] = WALL
        self.replace(new_grid)
        logger.debug(f"Randomized {self.width}x{self.height} grid (p={fill_probability:.2f})")

    def replace(self, new_grid) -> None:
        """Swap in a whole new grid and invalidate everything derived from the old one."""
        new_cells = np.array(new_grid, dtype=np.int8, copy=True)
        if new_cells.shape != (self.height, self.width):
            raise ValueError(
                f"Grid shape {new_cells.shape} does not match {(self.height, self.width)}"
            )
        self._cells = new_cells
        self._version += 1

    def get(self, x: int, y: int) -> int:
        if not valid_pos(x, y, self.width, self.height):
            return WALL
        return int(self._cells[y, x])

    def set_open(self, x: int, y: int) -> bool:
        """Carve a single cell. Returns True if the cell changed."""
        if not valid_pos(x, y, self.width, self.height):
            return False
        if self._cells[y, x] == AIR:
            return False
        self._cells[y, x] = AIR
        self._version += 1
        return True

    def set_wall(self, x: int, y: int) -> bool:
        """Fill a single cell. Returns True if the cell changed."""
        if not valid_pos(x, y, self.width, self.height):
            return False
        if self._cells[y, x] == WALL:
            return False
        self._cells[y, x] = WALL
        self._version += 1
        return True

    def fill_fraction(self) -> float:
        """Fraction of cells that are WALL (direct count, no cache)."""
        return float(np.count_nonzero(self._cells == WALL)) / self._cells.size

    def __repr__(self):
        return f"GridBuffer({self.width}x{self.height}, version={self._version})"
