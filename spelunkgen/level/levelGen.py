"""
Level generator: noise, cellular reshaping, rooms, route selection and
carving.

This module implements LevelGenerator which exposes:
    config = LevelConfig(...)
    generator = LevelGenerator(config)
    grid = generator.generate(decide)
    stats = generator.get_statistics()
"""
import random
from typing import Dict, List, Optional

import numpy as np

from spelunkgen.config import PerformanceTimer, get_level_logger
from spelunkgen.level.carver import CarveResult, PathCarver, open_pocket
from spelunkgen.level.classifier import ClassificationCounts, TileClassifier
from spelunkgen.level.config import LevelConfig
from spelunkgen.level.export import LevelMetadata, render_level, save_level
from spelunkgen.level.grid import GridBuffer
from spelunkgen.level.reshape import NeighborhoodToScalar, reshape
from spelunkgen.level.rooms import Room, RoomGraph, RoomPartitioner
from spelunkgen.level.route import Route, RouteSelector
from spelunkgen.level.summed_area import SummedAreaTable
from spelunkgen.level.utils import Position


class LevelGenerator:
    """
    Level generator class.

    - Uses LevelConfig for all configurable parameters.
    - Uses deterministic RNG (config.seed) for reproducibility.
    - Derived statistics are memoized against the grid version and rebuilt
      after every replacement or carve.
    - Not safe for concurrent use; one generator per thread.
    """
    def __init__(self, config: LevelConfig = None):
        self.config = config or LevelConfig()
        self.logger = get_level_logger()

        # Deterministic RNG
        if self.config.seed is not None:
            self.rng = random.Random(self.config.seed)
            self.logger.info(f"Generator initialized with seed: {self.config.seed}")
        else:
            self.rng = random.Random()
            self.logger.info("Generator initialized with random seed")

        # Level state
        self.buffer = GridBuffer(self.config.width, self.config.height)
        self.rooms: List[Room] = []
        self.room_graph: RoomGraph = RoomGraph()
        self.route: Optional[Route] = None
        self.carve_result: Optional[CarveResult] = None
        self.start: Optional[Position] = None
        self.end: Optional[Position] = None
        self.in_range = True

        # Memoized derived values: (grid version, value)
        self._summed_area = None
        self._classification = None

        self.classifier = TileClassifier()
        self.partitioner = RoomPartitioner(self.config)
        self.carver = PathCarver(self.config.carve_costs)

    # -------------------------
    # Properties
    # -------------------------
    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def grid(self) -> np.ndarray:
        return self.buffer.cells

    # -------------------------
    # Entry point
    # -------------------------
    def generate(self, decide: Optional[NeighborhoodToScalar] = None,
                 steps: Optional[int] = None) -> np.ndarray:
        """
        Run the full generation pipeline and return the final grid.

        Major stages:
          - random fill
          - cellular reshaping (skipped without a decision function)
          - room partition + adjacency graph
          - start/end selection
          - endpoint pockets and route carving
        """
        self.logger.info(f"Generating {self.width}×{self.height} level")

        with PerformanceTimer(self.logger, "level generation") as timer:
            # Phase 1: random noise
            self.randomize()

            # Phase 2: reshape with the external decision function
            if decide is not None:
                self.shape(decide, steps)

            # Phase 3: rooms and their directed graph
            self.build_rooms()

            # Phase 4: route endpoints
            self.select_route()

            # Phase 5: guarantee a traversable route
            self.carve_route()

        stats = self.get_statistics()
        self.logger.info(
            f"Level complete: {stats['rooms']} rooms, fill={stats['fill_fraction']:.2%}, "
            f"path={stats['path_length']} tiles (reached={stats['path_reached']}), "
            f"{timer.elapsed:.3f}s"
        )
        return self.grid

    # -------------------------
    # Pipeline phases
    # -------------------------
    def randomize(self):
        """Fill the grid with noise at the configured fill probability."""
        self.buffer.randomize(self.config.fill_probability, self.rng)
        self.in_range = True
        self._reset_layout()

    def replace_grid(self, new_grid):
        """Install an externally produced grid (same dimensions)."""
        self.buffer.replace(new_grid)
        self.in_range = True
        self._reset_layout()

    def shape(self, decide: NeighborhoodToScalar, steps: Optional[int] = None) -> bool:
        """
        Run `steps` reshape passes (default config.reshape_steps).

        Returns True if every decision of every pass stayed within [0, 1].
        """
        steps = self.config.reshape_steps if steps is None else steps
        all_in_range = True
        for step in range(steps):
            result = reshape(self.buffer.cells, decide, self.config.neighborhood_radius)
            self.buffer.replace(result.grid)
            all_in_range = all_in_range and result.in_range
            self.logger.debug(
                f"Reshape pass {step + 1}/{steps}: fill={self.buffer.fill_fraction():.2%}, "
                f"in_range={result.in_range}"
            )
        if not all_in_range:
            self.logger.warning("Decision function left [0, 1] during reshaping")
        self.in_range = all_in_range
        self._reset_layout()
        return all_in_range

    def build_rooms(self) -> RoomGraph:
        self.rooms = self.partitioner.partition(self.buffer.cells)
        self.room_graph = self.partitioner.build_graph(self.rooms)
        return self.room_graph

    def select_route(self) -> Route:
        selector = RouteSelector(self.config.start_rows, self.rng)
        self.route = selector.select(self.room_graph, self.width, self.height)
        self.start, self.end = self.route.start, self.route.end
        if self.route.is_fallback:
            self.logger.debug(f"Using fallback route {self.start} -> {self.end}")
        return self.route

    def carve_route(self) -> CarveResult:
        """Open pockets at both endpoints, then carve the connecting route."""
        if self.start is None or self.end is None:
            self.select_route()
        open_pocket(self.buffer, self.start, floor=True)
        open_pocket(self.buffer, self.end)
        self.carve_result = self.carver.carve(self.buffer, self.start, self.end)
        if not self.carve_result.reached:
            self.logger.warning(
                f"Carved route stops at {self.carve_result.tail} instead of {self.end}"
            )
        return self.carve_result

    def _reset_layout(self):
        self.rooms = []
        self.room_graph = RoomGraph()
        self.route = None
        self.carve_result = None
        self.start = None
        self.end = None

    # -------------------------
    # Derived values (memoized per grid version)
    # -------------------------
    def summed_area(self) -> SummedAreaTable:
        version = self.buffer.version
        if self._summed_area is None or self._summed_area[0] != version:
            self._summed_area = (version, SummedAreaTable(self.buffer.cells))
        return self._summed_area[1]

    def classification(self) -> ClassificationCounts:
        version = self.buffer.version
        if self._classification is None or self._classification[0] != version:
            self._classification = (version, self.classifier.classify(self.buffer.cells))
        return self._classification[1]

    def fill_fraction(self) -> float:
        """Fraction of wall tiles in the current grid."""
        return self.summed_area().fill_fraction()

    # -------------------------
    # Statistics helpers
    # -------------------------
    def get_statistics(self) -> Dict:
        """Return a dictionary of the derived statistics scoring code consumes."""
        table = self.summed_area()
        stats = {
            'width': self.width,
            'height': self.height,
            'area': self.config.area,
            'seed': self.config.seed,
            'fill_fraction': table.fill_fraction(),
            'row_fractions': table.row_fractions(),
            'column_fractions': table.column_fractions(),
            'row_bands': table.band_densities(self.config.band_size, 'rows'),
            'column_bands': table.band_densities(self.config.band_size, 'columns'),
            'edge_symmetry': table.edge_symmetry(self.config.edge_depth),
        }
        stats.update(self.classification().as_dict())
        stats['rooms'] = len(self.room_graph)
        stats['room_edges'] = self.room_graph.edge_count
        stats['start'] = self.start
        stats['end_pos'] = self.end
        stats['route_depth'] = self.route.depth if self.route else 0
        stats['path_length'] = len(self.carve_result) if self.carve_result else 0
        stats['path_reached'] = self.carve_result.reached if self.carve_result else False
        stats['in_range'] = self.in_range
        return stats

    # -------------------------
    # Export
    # -------------------------
    def render(self, metadata: Optional[LevelMetadata] = None) -> str:
        return render_level(self.buffer.cells, self.start, self.end, metadata)

    def save(self, path=None, metadata: Optional[LevelMetadata] = None):
        """Write the level text dump (default: generated.lvl)."""
        return save_level(self.render(metadata), path)
