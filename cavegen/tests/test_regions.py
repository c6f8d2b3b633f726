"""Tests for flood fill, region partitioning and threshold filtering."""
from __future__ import annotations

import numpy as np

from cavegen.grid import OPEN, WALL, fill, smooth
from cavegen.regions import flood_fill, get_regions, process_regions, touches_perimeter


def _split_grid() -> np.ndarray:
    # 12x8 map: a 2-wide pocket on the left, a wall column at x=3 and a lone pillar at (7, 3).
    grid = fill(12, 8, 0, 0)
    grid[3, 1:7] = WALL
    grid[7, 3] = WALL
    return grid


def test_empty_room_has_one_wall_ring_and_one_open_block():
    grid = fill(10, 10, 0, "ring")
    walls = get_regions(grid, WALL)
    opens = get_regions(grid, OPEN)
    assert [len(region) for region in walls] == [36]
    assert [len(region) for region in opens] == [64]


def test_regions_partition_every_tagged_cell_exactly_once():
    grid = smooth(fill(60, 45, 50, "partition"), 3)
    for tag in (WALL, OPEN):
        regions = get_regions(grid, tag)
        covered = [tile for region in regions for tile in region]
        assert len(covered) == len(set(covered))
        expected = {(int(x), int(y)) for x, y in zip(*np.nonzero(grid == tag))}
        assert set(covered) == expected
        for region in regions:
            assert region
            assert all(grid[tile] == tag for tile in region)


def test_flood_fill_is_four_connected():
    grid = np.ones((5, 5), dtype=np.int8)
    grid[1, 1] = OPEN
    grid[2, 2] = OPEN
    assert flood_fill(grid, (1, 1)) == [(1, 1)]
    grid[1, 2] = OPEN
    assert sorted(flood_fill(grid, (1, 1))) == [(1, 1), (1, 2), (2, 2)]


def test_flood_fill_starts_with_seed_cell():
    grid = fill(10, 10, 0, 0)
    region = flood_fill(grid, (4, 4))
    assert region[0] == (4, 4)
    assert len(region) == 64


def test_process_regions_flips_small_regions():
    grid = _split_grid()
    rooms = process_regions(grid, wall_threshold=5, room_threshold=20)
    assert grid[7, 3] == OPEN
    assert np.all(grid[1:3, 1:7] == WALL)
    assert len(rooms) == 1
    assert rooms[0].room_size == 42
    assert set(rooms[0].tiles) == {(x, y) for x in range(4, 11) for y in range(1, 7)}


def test_zero_thresholds_keep_everything():
    grid = _split_grid()
    before = grid.copy()
    rooms = process_regions(grid, wall_threshold=0, room_threshold=0)
    assert np.array_equal(grid, before)
    assert sorted(room.room_size for room in rooms) == [12, 41]


def test_no_open_region_below_room_threshold_after_processing():
    grid = smooth(fill(70, 50, 48, "thresholds"), 5)
    rooms = process_regions(grid, wall_threshold=30, room_threshold=40)
    opens = get_regions(grid, OPEN)
    assert all(len(region) >= 40 for region in opens)
    assert len(opens) == len(rooms)


def test_small_map_keeps_its_wall_ring():
    grid = smooth(fill(12, 10, 0, 0), 1)
    process_regions(grid, wall_threshold=50, room_threshold=5)
    assert np.all(grid[0, :] == WALL)
    assert np.all(grid[-1, :] == WALL)
    assert np.all(grid[:, 0] == WALL)
    assert np.all(grid[:, -1] == WALL)


def test_no_inner_wall_region_below_wall_threshold_after_processing():
    grid = smooth(fill(70, 50, 48, "walls"), 5)
    width, height = grid.shape
    process_regions(grid, wall_threshold=30, room_threshold=40)
    inner = [region for region in get_regions(grid, WALL) if not touches_perimeter(region, width, height)]
    assert all(len(region) >= 30 for region in inner)
