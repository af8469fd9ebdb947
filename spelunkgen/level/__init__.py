"""
Level Package - Cellular Cave Level Generation

This package builds 2D side-view cave levels: noise is reshaped by an
external decision function, open space is grouped into rooms, and a route
from a start room near the top to the deepest reachable room is carved so
the level is always traversable.

MODULES:
--------
config.py
    LevelConfig dataclass with every tunable parameter.

tile.py
    Cell states (AIR/WALL) and structural tile categories.

utils.py
    Grid helpers, neighbor iteration and distance functions.

grid.py
    GridBuffer: the active grid, out-of-bounds semantics, version counter.

summed_area.py
    Summed-area table: O(1) wall counts over rectangles and the density
    statistics derived from them.

classifier.py
    Neighbor-bitmask tile classifier.

rooms.py
    Lattice-seeded room partition and the directed room graph.

route.py
    Start/end room selection by layered BFS.

carver.py
    Best-first route search with directional costs, and carving.

reshape.py
    Cellular reshaping step and the NeighborhoodToScalar capability.

export.py
    Level text format writer.

levelGen.py
    LevelGenerator orchestrating the complete pipeline.

USAGE:
------
```python
from spelunkgen.level import LevelConfig, LevelGenerator, MajorityRule

config = LevelConfig(width=40, height=32, fill_percentage=55, seed=12345)
generator = LevelGenerator(config)
grid = generator.generate(MajorityRule())

stats = generator.get_statistics()
print(f"{stats['rooms']} rooms, {stats['fill_fraction']:.0%} walls")
generator.save("generated.lvl")
```

KNOWN LIMITS:
-------------
- Classifier counters do not add up to the tile count (some codes have no
  category).
- Carved routes are feasible, not optimal: nodes keep their first
  discovered cost and the heuristic ignores the penalties.
- When the search frontier empties before the end is reached the route
  stops at the last expanded node; CarveResult.reached reports this.
"""

from spelunkgen.level.config import LevelConfig, CarveCosts
from spelunkgen.level.levelGen import LevelGenerator
from spelunkgen.level.grid import GridBuffer
from spelunkgen.level.summed_area import SummedAreaTable
from spelunkgen.level.classifier import ClassificationCounts, TileClassifier
from spelunkgen.level.rooms import Room, RoomGraph, RoomPartitioner
from spelunkgen.level.route import Route, RouteSelector
from spelunkgen.level.carver import CarveResult, PathCarver, PathNode, NodeState
from spelunkgen.level.reshape import (
    NeighborhoodToScalar, ReshapeResult, MajorityRule, ThresholdRule,
    reshape, sensor_vector
)
from spelunkgen.level.export import LevelMetadata, render_level, save_level
from spelunkgen.level.tile import AIR, WALL, TileCategory

__all__ = [
    # Configuration
    'LevelConfig',
    'CarveCosts',

    # Generator
    'LevelGenerator',

    # Building blocks
    'GridBuffer',
    'SummedAreaTable',
    'ClassificationCounts',
    'TileClassifier',
    'Room',
    'RoomGraph',
    'RoomPartitioner',
    'Route',
    'RouteSelector',
    'CarveResult',
    'PathCarver',
    'PathNode',
    'NodeState',

    # Reshaping
    'NeighborhoodToScalar',
    'ReshapeResult',
    'MajorityRule',
    'ThresholdRule',
    'reshape',
    'sensor_vector',

    # Export
    'LevelMetadata',
    'render_level',
    'save_level',

    # Tiles
    'AIR',
    'WALL',
    'TileCategory',
]
