"""Start/end selection over the directed room graph."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from spelunkgen.config import get_logger
from spelunkgen.level.rooms import Room, RoomGraph
from spelunkgen.level.utils import Position, clamp_pos

logger = get_logger(__name__)


@dataclass
class Route:
    start: Position
    end: Position
    start_room: Optional[int] = None
    end_room: Optional[int] = None
    depth: int = 0  # number of BFS layers between start and end

    @property
    def is_fallback(self) -> bool:
        return self.start_room is None


class RouteSelector:
    """
    Pick a start room near the top edge and the most distant reachable room.

    Distance is measured in BFS layers over outgoing edges; the end room is
    the last room appended to the deepest non-empty layer.
    """

    def __init__(self, start_rows: int, rng):
        self.start_rows = start_rows
        self.rng = rng

    def start_candidates(self, graph: RoomGraph) -> List[Room]:
        return [room for room in graph if room.center[1] < self.start_rows]

    @staticmethod
    def fallback(width: int, height: int) -> Route:
        """Fixed start/end near opposite corners, used when no room qualifies."""
        return Route(
            start=clamp_pos((1, 1), width, height),
            end=clamp_pos((width - 2, height - 2), width, height),
        )

    @staticmethod
    def deepest_room(graph: RoomGraph, start_id: int) -> Tuple[int, int]:
        """
        Layered breadth-first walk from `start_id`.

        Returns:
            (end room id, depth of its layer)
        """
        visited = {start_id}
        frontier = [start_id]
        last = start_id
        depth = 0
        while frontier:
            next_layer = []
            for room_id in frontier:
                for neighbor in graph.get_neighbors(room_id):
                    if neighbor in visited:
                        continue
                    visited.add(neighbor)
                    next_layer.append(neighbor)
            if next_layer:
                last = next_layer[-1]
                depth += 1
            frontier = next_layer
        return last, depth

    def select(self, graph: RoomGraph, width: int, height: int) -> Route:
        candidates = self.start_candidates(graph)
        if not candidates:
            logger.debug("No start room near the top edge, using corner fallback")
            return self.fallback(width, height)

        start_room = self.rng.choice(candidates)
        end_id, depth = self.deepest_room(graph, start_room.id)
        end_room = graph.rooms[end_id]
        logger.debug(
            f"Route: room {start_room.id} {start_room.center} -> "
            f"room {end_id} {end_room.center} over {depth} layers"
        )
        return Route(
            start=start_room.center,
            end=end_room.center,
            start_room=start_room.id,
            end_room=end_id,
            depth=depth,
        )
