import numpy as np
import pytest

from spelunkgen.level import CarveCosts, GridBuffer, PathCarver
from spelunkgen.level.carver import open_pocket
from spelunkgen.level.tile import AIR, WALL
from spelunkgen.level.utils import manhattan


def _buffer(grid):
    h, w = grid.shape
    buf = GridBuffer(w, h)
    buf.replace(grid)
    return buf


def _is_connected_path(path):
    return all(manhattan(a, b) == 1 for a, b in zip(path, path[1:]))


@pytest.mark.parametrize("start,end", [
    ((2, 5), (12, 5)),
    ((12, 5), (2, 5)),
    ((7, 1), (7, 10)),
    ((7, 10), (7, 1)),
])
def test_straight_line_on_open_grid(start, end):
    buf = _buffer(np.zeros((12, 15), dtype=np.int8))
    result = PathCarver().carve(buf, start, end)
    assert result.reached
    assert result.path[0] == start
    assert result.path[-1] == end
    assert len(result.path) == manhattan(start, end) + 1
    xs = {p[0] for p in result.path}
    ys = {p[1] for p in result.path}
    assert len(xs) == 1 or len(ys) == 1
    assert result.carved == 0


def test_every_carved_cell_is_open():
    buf = _buffer(np.ones((10, 10), dtype=np.int8))
    result = PathCarver().carve(buf, (1, 1), (8, 8))
    assert result.reached
    assert _is_connected_path(result.path)
    for x, y in result.path:
        assert buf.get(x, y) == AIR
    assert result.carved == len(result.path)


def test_prefers_open_shaft_over_digging_down():
    grid = np.ones((6, 7), dtype=np.int8)
    grid[0, :] = AIR  # open ceiling corridor
    grid[:, 5] = AIR  # open shaft on the right
    buf = _buffer(grid)
    result = PathCarver().carve(buf, (1, 0), (1, 5))
    assert result.reached
    assert (5, 3) in result.path
    assert (1, 2) not in result.path
    # only the bottom corridor had to be dug out
    assert result.carved == 4


def test_step_costs_are_directional():
    carver = PathCarver(CarveCosts(open_tile=1, wall_down=500, wall_up=50, wall_side=200))
    grid = np.array([[WALL, WALL, WALL],
                     [WALL, AIR, WALL],
                     [WALL, WALL, AIR]], dtype=np.int8)
    assert carver.step_cost(grid, 1, 1, 1, 2) == 501  # down into wall
    assert carver.step_cost(grid, 1, 1, 1, 0) == 51  # up into wall
    assert carver.step_cost(grid, 1, 1, 0, 1) == 201  # sideways into wall
    assert carver.step_cost(grid, 2, 1, 2, 2) == 2  # down into air


def test_unreachable_end_falls_back_to_last_expanded_node():
    buf = _buffer(np.zeros((3, 3), dtype=np.int8))
    result = PathCarver().carve(buf, (0, 0), (10, 10))
    assert not result.reached
    assert result.path[0] == (0, 0)
    assert result.tail != (10, 10)
    assert result.expanded == 9
    assert _is_connected_path(result.path)


def test_search_does_not_touch_the_grid():
    grid = np.ones((5, 5), dtype=np.int8)
    PathCarver().search(grid, (0, 0), (4, 4))
    assert grid.sum() == 25


def test_start_equal_to_end():
    buf = _buffer(np.ones((4, 4), dtype=np.int8))
    result = PathCarver().carve(buf, (2, 2), (2, 2))
    assert result.reached
    assert result.path == [(2, 2)]
    assert buf.get(2, 2) == AIR


def test_pocket_on_the_border_stays_in_bounds():
    buf = _buffer(np.ones((4, 5), dtype=np.int8))
    changed = open_pocket(buf, (0, 3), floor=True)
    assert changed == 2
    assert buf.get(0, 3) == AIR
    assert buf.get(1, 3) == AIR


def test_pocket_places_floor_under_start():
    buf = _buffer(np.zeros((4, 5), dtype=np.int8))
    open_pocket(buf, (4, 1), floor=True)
    assert buf.get(4, 2) == WALL
    assert buf.get(3, 1) == AIR


def test_first_discovery_is_never_reopened():
    grid = np.zeros((3, 3), dtype=np.int8)
    grid[1, 1] = WALL
    result = PathCarver().search(grid, (1, 0), (1, 1))
    # the detour rising into (1, 1) from below is cheaper, but the
    # direct dig found the end first and keeps it
    assert result.reached
    assert result.path == [(1, 0), (1, 1)]
    assert result.cost == 501
