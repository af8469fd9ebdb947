"""
Level generation configuration.

All tunable parameters of the generation pipeline live in LevelConfig so a
generator can be reproduced from its config alone (pass a seed for a
deterministic run).
"""

from dataclasses import dataclass, field
from typing import Optional

from spelunkgen.config import LEVEL_WIDTH, LEVEL_HEIGHT, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CarveCosts:
    """Extra cost paid for stepping onto a tile, on top of the unit move cost."""
    open_tile: float = 1.0
    wall_down: float = 500.0  # tunneling downward through rock
    wall_up: float = 50.0  # tunneling upward
    wall_side: float = 200.0  # tunneling sideways


@dataclass
class LevelConfig:
    # ------------------------------------------------------------------
    # Dimensions and initial noise
    # ------------------------------------------------------------------
    width: int = LEVEL_WIDTH
    height: int = LEVEL_HEIGHT
    fill_percentage: float = 60.0  # chance (in percent) that a cell starts blocked
    seed: Optional[int] = None

    # ------------------------------------------------------------------
    # Cellular reshaping
    # ------------------------------------------------------------------
    neighborhood_radius: int = 2  # Moore radius fed to the decision function
    reshape_steps: int = 2

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------
    room_stride_x: int = 5
    room_stride_y: int = 4
    room_offset: int = 2
    min_room_tiles: int = 5  # rooms need more than this many tiles to survive
    room_iterations: int = 2  # fixed number of assign/recenter cycles
    adjacency_distance: int = 7  # rooms link when closer than this (manhattan)
    max_rise: int = 2  # a linked room may sit at most this many rows higher

    # ------------------------------------------------------------------
    # Route selection and carving
    # ------------------------------------------------------------------
    start_rows: int = 4  # start rooms must be centered above this row
    carve_costs: CarveCosts = field(default_factory=CarveCosts)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    band_size: int = 5
    edge_depth: int = 3

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            logger.error(f"Invalid level size: {self.width}x{self.height}")
            raise ValueError(f"Level dimensions must be positive, got {self.width}x{self.height}")
        if not 0.0 <= self.fill_percentage <= 100.0:
            logger.error(f"Invalid fill percentage: {self.fill_percentage}")
            raise ValueError("fill_percentage must be within 0..100")
        if self.neighborhood_radius < 0:
            logger.error(f"Invalid neighborhood radius: {self.neighborhood_radius}")
            raise ValueError("neighborhood_radius must not be negative")
        if self.reshape_steps < 0:
            logger.error(f"Invalid reshape step count: {self.reshape_steps}")
            raise ValueError("reshape_steps must not be negative")
        if self.room_stride_x <= 0 or self.room_stride_y <= 0:
            logger.error(f"Invalid room strides: {self.room_stride_x}x{self.room_stride_y}")
            raise ValueError("room strides must be positive")
        if self.room_iterations < 1:
            logger.error(f"Invalid room iteration count: {self.room_iterations}")
            raise ValueError("room_iterations must be at least 1")
        if self.band_size <= 0 or self.edge_depth <= 0:
            logger.error(f"Invalid band size / edge depth: {self.band_size}/{self.edge_depth}")
            raise ValueError("band_size and edge_depth must be positive")

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def fill_probability(self) -> float:
        return self.fill_percentage / 100.0

    @property
    def sensor_size(self) -> int:
        """Length of the neighborhood vector handed to a decision function."""
        side = 2 * self.neighborhood_radius + 1
        return side * side
