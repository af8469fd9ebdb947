"""
Path carving: best-first search from start to end, then open every tile on
the way.

Moving onto a tile costs 1 plus a penalty. Open tiles carry a small uniform
penalty; walls are cheap to tunnel upward, pricier sideways and very
expensive downward, so carved routes prefer dropping through existing open
space over digging down through rock.

The search is A*-shaped but deliberately best-effort:
- the euclidean heuristic is not scaled to the penalties
- a node keeps the cost it was first discovered with, it is never reopened
  when a cheaper way to it turns up later
- if the frontier runs dry before the end is reached, the last expanded
  node becomes the tail and the result is flagged with reached=False
"""

import heapq
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from spelunkgen.config import get_logger
from spelunkgen.level.config import CarveCosts
from spelunkgen.level.grid import GridBuffer
from spelunkgen.level.tile import AIR, WALL
from spelunkgen.level.utils import Position, clamp_pos, euclidean, neighbors_4, valid_pos

logger = get_logger(__name__)


class NodeState(Enum):
    OPEN = 'open'  # discovered and waiting in the frontier
    CLOSED = 'closed'  # expanded, never looked at again


@dataclass(eq=False)
class PathNode:
    x: int
    y: int
    g: float  # accumulated cost from the start
    f: float  # g + heuristic
    previous: Optional['PathNode'] = None
    state: NodeState = NodeState.OPEN

    @property
    def pos(self) -> Position:
        return (self.x, self.y)


@dataclass
class CarveResult:
    path: List[Position] = field(default_factory=list)  # start ... tail
    cost: float = 0.0
    reached: bool = False
    expanded: int = 0
    carved: int = 0  # cells that actually flipped from wall to air

    @property
    def tail(self) -> Optional[Position]:
        return self.path[-1] if self.path else None

    def __len__(self):
        return len(self.path)


class PathCarver:
    def __init__(self, costs: Optional[CarveCosts] = None):
        self.costs = costs or CarveCosts()

    def step_cost(self, grid: np.ndarray, x: int, y: int, nx: int, ny: int) -> float:
        """Cost of moving from (x, y) onto the neighboring tile (nx, ny)."""
        if grid[ny, nx] == AIR:
            return 1.0 + self.costs.open_tile
        dy = ny - y
        if dy > 0:
            return 1.0 + self.costs.wall_down
        if dy < 0:
            return 1.0 + self.costs.wall_up
        return 1.0 + self.costs.wall_side

    def search(self, grid: np.ndarray, start: Position, end: Position) -> CarveResult:
        """Run the best-first search without touching the grid."""
        grid = np.asarray(grid)
        height, width = grid.shape
        start = clamp_pos(start, width, height)

        # arena of search nodes indexed by y * width + x
        arena: List[Optional[PathNode]] = [None] * (width * height)
        counter = itertools.count()
        frontier = []

        first = PathNode(start[0], start[1], 0.0, euclidean(start, end))
        arena[start[1] * width + start[0]] = first
        heapq.heappush(frontier, (first.f, next(counter), first))

        tail = None
        last_popped = None
        expanded = 0

        while frontier:
            _, _, node = heapq.heappop(frontier)
            if node.state is NodeState.CLOSED:
                continue
            node.state = NodeState.CLOSED
            last_popped = node
            expanded += 1

            if (node.x, node.y) == end:
                tail = node
                break

            for nx, ny, _ in neighbors_4(node.x, node.y, width, height):
                idx = ny * width + nx
                if arena[idx] is not None:
                    # first discovery wins: open or closed, leave it alone
                    continue
                g = node.g + self.step_cost(grid, node.x, node.y, nx, ny)
                child = PathNode(nx, ny, g, g + euclidean((nx, ny), end), previous=node)
                arena[idx] = child
                heapq.heappush(frontier, (child.f, next(counter), child))

        reached = tail is not None
        if not reached:
            tail = last_popped
            logger.warning(
                f"Frontier exhausted before reaching {end}; "
                f"falling back to last expanded node {tail.pos}"
            )

        path = []
        node = tail
        while node is not None:
            path.append(node.pos)
            node = node.previous
        path.reverse()

        return CarveResult(path=path, cost=tail.g, reached=reached, expanded=expanded)

    def carve(self, buffer: GridBuffer, start: Position, end: Position) -> CarveResult:
        """Search on the buffer's current grid and open every tile along the route."""
        result = self.search(buffer.cells, start, end)
        for x, y in result.path:
            if buffer.set_open(x, y):
                result.carved += 1
        logger.debug(
            f"Carved route {start} -> {end}: {len(result.path)} tiles, "
            f"{result.carved} opened, cost={result.cost:.0f}, expanded={result.expanded}"
        )
        return result


def open_pocket(buffer: GridBuffer, pos: Position, floor: bool = False) -> int:
    """
    Clear the tile at `pos` and its west/east neighbors; optionally put solid
    ground underneath.

    Every write is bounds-checked, so endpoints on the level border are safe.
    Returns the number of cells changed.
    """
    x, y = pos
    changed = 0
    for nx in (x - 1, x, x + 1):
        if valid_pos(nx, y, buffer.width, buffer.height) and buffer.set_open(nx, y):
            changed += 1
    if floor and valid_pos(x, y + 1, buffer.width, buffer.height):
        if buffer.get(x, y + 1) != WALL and buffer.set_wall(x, y + 1):
            changed += 1
    return changed
