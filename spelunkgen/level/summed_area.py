"""
Summed-area table (integral image) over a level grid.

One O(W*H) build pass, then the number of walls inside any axis-aligned
rectangle is four lookups away. All density statistics handed to scoring
code (fill fraction, per-row/column fill, band densities, edge symmetry)
are answered from the table.
"""

from typing import Dict, List

import numpy as np

from spelunkgen.level.tile import WALL


class SummedAreaTable:
    """
    table[y][x] holds the wall count of the rectangle (0, 0)..(x, y) inclusive:

        t[x,y] = g[x,y] + t[x-1,y] + t[x,y-1] - t[x-1,y-1]
    """

    def __init__(self, grid: np.ndarray):
        self.height, self.width = grid.shape
        walls = (np.asarray(grid) == WALL).astype(np.int64)
        self.table = walls.cumsum(axis=0).cumsum(axis=1)

    def at(self, x: int, y: int) -> int:
        """Table value at (x, y); zero for coordinates left of or above the grid."""
        if x < 0 or y < 0:
            return 0
        x = min(x, self.width - 1)
        y = min(y, self.height - 1)
        return int(self.table[y, x])

    @property
    def total(self) -> int:
        return int(self.table[-1, -1])

    def region_count(self, x0: int, y0: int, x1: int, y1: int) -> int:
        """Number of walls in the inclusive rectangle (x0, y0)..(x1, y1)."""
        x0, x1 = max(min(x0, x1), 0), min(max(x0, x1), self.width - 1)
        y0, y1 = max(min(y0, y1), 0), min(max(y0, y1), self.height - 1)
        if x0 > x1 or y0 > y1:
            return 0
        return (self.at(x1, y1) - self.at(x0 - 1, y1)
                - self.at(x1, y0 - 1) + self.at(x0 - 1, y0 - 1))

    def region_density(self, x0: int, y0: int, x1: int, y1: int) -> float:
        """Fraction of walls in the inclusive rectangle."""
        x0, x1 = max(min(x0, x1), 0), min(max(x0, x1), self.width - 1)
        y0, y1 = max(min(y0, y1), 0), min(max(y0, y1), self.height - 1)
        if x0 > x1 or y0 > y1:
            return 0.0
        area = (x1 - x0 + 1) * (y1 - y0 + 1)
        return self.region_count(x0, y0, x1, y1) / area

    # ------------------------------------------------------------------
    # Derived statistics
    # ------------------------------------------------------------------

    def fill_fraction(self) -> float:
        return self.total / (self.width * self.height)

    def row_fractions(self) -> List[float]:
        last = self.width - 1
        return [self.region_count(0, y, last, y) / self.width for y in range(self.height)]

    def column_fractions(self) -> List[float]:
        last = self.height - 1
        return [self.region_count(x, 0, x, last) / self.height for x in range(self.width)]

    def band_densities(self, band: int, axis: str = 'rows') -> List[float]:
        """
        Density of every `band`-thick strip, sliding one row (or column) at a time.

        A band wider than the grid collapses to a single strip covering it all.
        """
        if axis == 'rows':
            span, other = self.height, self.width
        elif axis == 'columns':
            span, other = self.width, self.height
        else:
            raise ValueError("axis must be 'rows' or 'columns'")
        band = min(band, span)
        densities = []
        for start in range(span - band + 1):
            end = start + band - 1
            if axis == 'rows':
                count = self.region_count(0, start, other - 1, end)
            else:
                count = self.region_count(start, 0, end, other - 1)
            densities.append(count / (band * other))
        return densities

    def edge_symmetry(self, depth: int) -> Dict[str, float]:
        """
        Wall densities of opposite edge strips `depth` tiles thick.

        The *_difference entries are the absolute density gaps between the
        opposing strips; 0.0 means perfectly balanced edges.
        """
        w, h = self.width, self.height
        dy = min(depth, h)
        dx = min(depth, w)
        top = self.region_density(0, 0, w - 1, dy - 1)
        bottom = self.region_density(0, h - dy, w - 1, h - 1)
        left = self.region_density(0, 0, dx - 1, h - 1)
        right = self.region_density(w - dx, 0, w - 1, h - 1)
        return {
            'top': top,
            'bottom': bottom,
            'left': left,
            'right': right,
            'vertical_difference': abs(top - bottom),
            'horizontal_difference': abs(left - right),
        }
