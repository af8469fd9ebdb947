"""
Room partitioning and room adjacency graph.

Rooms are coarse clusters of open space used to reason about navigability:
1. Seed room centers on a regular lattice (independent of grid contents)
2. Assign every AIR tile to its nearest room center (Euclidean)
3. Drop rooms with too few tiles, move the survivors to their centroid
4. Repeat 2-3 a fixed number of times (no convergence test)
5. Link nearby rooms with directed edges

The link rule is asymmetric (a room may only link to rooms at most
`max_rise` rows above it), so the graph is directed and a->b does not
imply b->a. Route selection walks outgoing edges only.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from spelunkgen.config import get_logger
from spelunkgen.level.config import LevelConfig
from spelunkgen.level.tile import AIR
from spelunkgen.level.utils import chebyshev, manhattan

logger = get_logger(__name__)


@dataclass
class Room:
    """A point-like room: a center plus the accumulators used to recenter it."""
    id: int
    center: Tuple[int, int]
    sum_x: int = 0
    sum_y: int = 0
    tile_count: int = 0
    adjacent: Set[int] = field(default_factory=set)

    def add_tile(self, x: int, y: int):
        self.sum_x += x
        self.sum_y += y
        self.tile_count += 1

    def reset(self):
        self.sum_x = 0
        self.sum_y = 0
        self.tile_count = 0

    def centroid(self) -> Tuple[int, int]:
        return (self.sum_x // self.tile_count, self.sum_y // self.tile_count)


@dataclass(frozen=True)
class RoomEdge:
    source: int
    target: int
    manhattan: int
    chebyshev: int


class RoomGraph:
    """
    Directed graph of rooms.

    Adjacency lists are keyed by room id; edges keep the distances they were
    created with so scoring code can inspect them.
    """

    def __init__(self):
        self.rooms: Dict[int, Room] = {}
        self.edges: Dict[int, List[RoomEdge]] = {}

    def add_room(self, room: Room):
        self.rooms[room.id] = room
        self.edges.setdefault(room.id, [])

    def add_edge(self, a: int, b: int, manhattan_dist: int, chebyshev_dist: int):
        """Add directed edge a -> b (duplicates ignored)."""
        if any(e.target == b for e in self.edges[a]):
            return
        self.edges[a].append(RoomEdge(a, b, manhattan_dist, chebyshev_dist))
        self.rooms[a].adjacent.add(b)

    def get_neighbors(self, room_id: int) -> List[int]:
        """Outgoing neighbors of a room, in insertion order."""
        return [e.target for e in self.edges.get(room_id, [])]

    def has_edge(self, a: int, b: int) -> bool:
        return any(e.target == b for e in self.edges.get(a, []))

    @property
    def edge_count(self) -> int:
        return sum(len(out) for out in self.edges.values())

    def __len__(self):
        return len(self.rooms)

    def __iter__(self):
        return iter(self.rooms.values())


class RoomPartitioner:
    """Lattice-seeded, fixed-iteration nearest-center partition of open space."""

    def __init__(self, config: LevelConfig):
        self.config = config
        self.rooms: List[Room] = []

    # ========================================================================
    # PHASE 1: SEEDING
    # ========================================================================

    def seed_rooms(self, width: int, height: int) -> List[Room]:
        """Place one room every (stride_x, stride_y) tiles, starting at the offset."""
        c = self.config
        rooms = []
        for y in range(c.room_offset, height, c.room_stride_y):
            for x in range(c.room_offset, width, c.room_stride_x):
                rooms.append(Room(id=len(rooms), center=(x, y)))
        self.rooms = rooms
        return rooms

    # ========================================================================
    # PHASE 2: ASSIGNMENT / RECENTERING
    # ========================================================================

    def assign(self, grid: np.ndarray) -> np.ndarray:
        """
        Assign every AIR tile to its nearest room and accumulate positions.

        Ties go to the room scanned first. Returns a [y][x] array of room ids
        (-1 for walls, or everywhere when there are no rooms).
        """
        grid = np.asarray(grid)
        labels = np.full(grid.shape, -1, dtype=np.int64)
        if not self.rooms:
            return labels

        ys, xs = np.nonzero(grid == AIR)
        if len(xs) == 0:
            return labels

        centers = np.array([room.center for room in self.rooms], dtype=np.int64)
        dx = xs[:, None] - centers[None, :, 0]
        dy = ys[:, None] - centers[None, :, 1]
        # argmin returns the first minimum, which keeps scan order on ties
        nearest = np.argmin(dx * dx + dy * dy, axis=1)

        for x, y, idx in zip(xs.tolist(), ys.tolist(), nearest.tolist()):
            room = self.rooms[idx]
            room.add_tile(x, y)
            labels[y, x] = room.id
        return labels

    def recenter(self) -> List[Room]:
        """Keep rooms above the tile threshold, moved to their centroid."""
        survivors = []
        for room in self.rooms:
            if room.tile_count > self.config.min_room_tiles:
                room.center = room.centroid()
                room.reset()
                survivors.append(room)
        dropped = len(self.rooms) - len(survivors)
        self.rooms = survivors
        logger.debug(f"Recentered rooms: {len(survivors)} kept, {dropped} dropped")
        return survivors

    def partition(self, grid: np.ndarray, iterations: Optional[int] = None) -> List[Room]:
        """Seed, then run the assign/recenter cycle a fixed number of times."""
        grid = np.asarray(grid)
        height, width = grid.shape
        self.seed_rooms(width, height)
        iterations = self.config.room_iterations if iterations is None else iterations
        for _ in range(iterations):
            self.assign(grid)
            self.recenter()
        return self.rooms

    # ========================================================================
    # PHASE 3: ADJACENCY
    # ========================================================================

    def build_graph(self, rooms: Optional[List[Room]] = None) -> RoomGraph:
        """
        Link every ordered pair of distinct rooms that are close enough.

        a -> b when b sits no more than `max_rise` rows above a and the
        manhattan distance between centers is below `adjacency_distance`.
        """
        rooms = self.rooms if rooms is None else rooms
        graph = RoomGraph()
        for room in rooms:
            room.adjacent = set()
            graph.add_room(room)

        for a in rooms:
            for b in rooms:
                if a is b:
                    continue
                dist = manhattan(a.center, b.center)
                cheb = chebyshev(a.center, b.center)
                rise = a.center[1] - b.center[1]
                if rise <= self.config.max_rise and dist < self.config.adjacency_distance:
                    graph.add_edge(a.id, b.id, dist, cheb)

        logger.debug(f"Room graph: {len(graph)} rooms, {graph.edge_count} directed edges")
        return graph
