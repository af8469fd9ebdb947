import numpy as np

from spelunkgen.level import LevelConfig, Room, RoomPartitioner
from spelunkgen.level.tile import AIR
from spelunkgen.level.utils import euclidean_squared


def _nearest(rooms, pos):
    best, best_dist = None, None
    for room in rooms:
        d = euclidean_squared(pos, room.center)
        if best_dist is None or d < best_dist:
            best, best_dist = room, d
    return best


def test_lattice_seeding_ignores_grid_contents():
    partitioner = RoomPartitioner(LevelConfig(width=20, height=12))
    rooms = partitioner.seed_rooms(20, 12)
    assert [r.center for r in rooms[:4]] == [(2, 2), (7, 2), (12, 2), (17, 2)]
    assert {r.center[1] for r in rooms} == {2, 6, 10}
    assert len(rooms) == 12
    assert [r.id for r in rooms] == list(range(12))


def test_every_open_tile_goes_to_its_nearest_room(noisy_grid):
    h, w = noisy_grid.shape
    partitioner = RoomPartitioner(LevelConfig(width=w, height=h))
    rooms = partitioner.seed_rooms(w, h)
    centers_before = {r.id: r.center for r in rooms}
    labels = partitioner.assign(noisy_grid)

    open_tiles = 0
    for y in range(h):
        for x in range(w):
            if noisy_grid[y, x] == AIR:
                open_tiles += 1
                assert labels[y, x] == _nearest(rooms, (x, y)).id
            else:
                assert labels[y, x] == -1
    assert sum(r.tile_count for r in rooms) == open_tiles
    # assignment never moves the centers
    assert {r.id: r.center for r in rooms} == centers_before


def test_recenter_moves_to_centroid_and_drops_small_rooms():
    grid = np.ones((8, 12), dtype=np.int8)
    grid[1:4, 1:5] = AIR  # 12 open tiles near the first seed
    grid[6, 10] = AIR  # a lone open tile
    partitioner = RoomPartitioner(LevelConfig(width=12, height=8, min_room_tiles=5))
    partitioner.seed_rooms(12, 8)
    partitioner.assign(grid)
    survivors = partitioner.recenter()
    assert len(survivors) >= 1
    for room in survivors:
        assert room.tile_count == 0
    centers = [r.center for r in survivors]
    assert (2, 2) in centers
    assert all(c != (10, 6) for c in centers)


def test_partition_runs_fixed_iterations_without_open_space():
    grid = np.ones((10, 10), dtype=np.int8)
    rooms = RoomPartitioner(LevelConfig(width=10, height=10)).partition(grid)
    assert rooms == []


def test_zero_iterations_keeps_the_lattice_seeds():
    grid = np.ones((10, 10), dtype=np.int8)
    rooms = RoomPartitioner(LevelConfig(width=10, height=10)).partition(grid, iterations=0)
    assert [r.center for r in rooms] == [(2, 2), (7, 2), (2, 6), (7, 6)]


def test_adjacency_is_directed():
    partitioner = RoomPartitioner(LevelConfig(adjacency_distance=7, max_rise=2))
    low = Room(id=0, center=(5, 10))
    high = Room(id=1, center=(5, 5))
    graph = partitioner.build_graph([low, high])
    # high can drop down to low, low cannot climb 5 rows to high
    assert graph.has_edge(1, 0)
    assert not graph.has_edge(0, 1)
    assert high.adjacent == {0}
    assert low.adjacent == set()


def test_adjacency_distance_threshold_is_strict():
    partitioner = RoomPartitioner(LevelConfig(adjacency_distance=7, max_rise=2))
    a = Room(id=0, center=(0, 0))
    b = Room(id=1, center=(7, 0))
    c = Room(id=2, center=(0, 6))
    graph = partitioner.build_graph([a, b, c])
    assert not graph.has_edge(0, 1) and not graph.has_edge(1, 0)
    assert graph.has_edge(0, 2)
    # c would have to climb six rows
    assert not graph.has_edge(2, 0)
    edge = graph.edges[0][0]
    assert (edge.manhattan, edge.chebyshev) == (6, 6)


def test_rise_of_two_rows_is_allowed():
    partitioner = RoomPartitioner(LevelConfig())
    a = Room(id=0, center=(3, 6))
    b = Room(id=1, center=(4, 4))
    graph = partitioner.build_graph([a, b])
    assert graph.has_edge(0, 1) and graph.has_edge(1, 0)
    assert graph.edge_count == 2
