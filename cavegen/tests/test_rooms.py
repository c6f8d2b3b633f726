"""Tests for edge tiles, the room graph and passage carving."""
from __future__ import annotations

import numpy as np
import pytest

from cavegen.grid import OPEN, WALL, fill, smooth
from cavegen.regions import get_regions, process_regions
from cavegen.rooms import (
    Room,
    carve_passage,
    connect_closest_rooms,
    connect_rooms,
    find_edge_tiles,
    get_line,
    is_room_graph_connected,
)


def _two_room_grid() -> np.ndarray:
    # Rooms at x=1..3 and x=7..10 separated by walls at x=4..6.
    grid = fill(12, 5, 0, 0)
    grid[4:7, :] = WALL
    return grid


def _rooms(grid: np.ndarray, **kwargs):
    return process_regions(grid, wall_threshold=0, room_threshold=0, **kwargs)


def test_adjacent_rule_keeps_only_tiles_touching_walls():
    grid = fill(9, 8, 0, 0)
    room = Room(get_regions(grid, OPEN)[0], grid)
    # Interior block is 7x6; only its outer ring touches a wall.
    assert len(room.edge_tiles) == 2 * 7 + 2 * 6 - 4
    assert (4, 3) not in room.edge_tiles
    assert (1, 1) in room.edge_tiles


def test_scan_rule_marks_every_tile_behind_the_left_border():
    grid = fill(9, 8, 0, 0)
    tiles = get_regions(grid, OPEN)[0]
    assert find_edge_tiles(tiles, grid, "scan") == tiles


def test_unknown_edge_rule_is_rejected():
    grid = fill(5, 5, 0, 0)
    with pytest.raises(ValueError):
        find_edge_tiles([(2, 2)], grid, "diagonal")


def test_rooms_compare_by_identity():
    grid = fill(6, 6, 0, 0)
    tiles = get_regions(grid, OPEN)[0]
    first = Room(tiles, grid)
    second = Room(tiles, grid)
    assert first != second
    assert len({first, second}) == 2


def test_connect_rooms_is_symmetric():
    grid = _two_room_grid()
    left, right = _rooms(grid)
    assert not left.is_connected(right)
    connect_rooms(left, right)
    assert left.is_connected(right)
    assert right.is_connected(left)


def test_connect_rooms_spreads_accessibility():
    grid = _two_room_grid()
    left, right = _rooms(grid)
    right.is_accessible_from_main_room = True
    connect_rooms(left, right)
    assert left.is_accessible_from_main_room


def test_closest_rooms_joined_at_nearest_edge_tiles():
    grid = _two_room_grid()
    rooms = _rooms(grid)
    passages = connect_closest_rooms(rooms, grid, carve=False)
    assert len(passages) == 1
    passage = passages[0]
    assert passage.room_a is rooms[0]
    assert passage.room_b is rooms[1]
    assert passage.tile_a == (3, 1)
    assert passage.tile_b == (7, 1)
    assert passage.distance_sq == 16
    assert is_room_graph_connected(rooms)
    assert np.all(grid[4:7, :] == WALL)


def _three_room_grid() -> np.ndarray:
    # Rooms at x=1..3, x=7..10 and x=14..16 in a row.
    grid = fill(18, 5, 0, 0)
    grid[4:7, :] = WALL
    grid[11:14, :] = WALL
    return grid


@pytest.mark.parametrize("force_accessibility", [True, False])
def test_rooms_with_a_link_do_not_reach_past_their_neighbours(force_accessibility):
    grid = _three_room_grid()
    left, middle, right = _rooms(grid)
    passages = connect_closest_rooms([left, middle, right], grid, carve=False, force_accessibility=force_accessibility)
    assert [(p.room_a, p.room_b) for p in passages] == [(left, middle), (right, middle)]
    assert all(p.distance_sq == 16 for p in passages)
    assert not left.is_connected(right)
    assert is_room_graph_connected([left, middle, right])


def test_carved_passages_leave_the_middle_room_walls_intact():
    grid = _three_room_grid()
    connect_closest_rooms(_rooms(grid), grid, carve=True, passage_radius=1)
    assert np.all(grid[4:7, 3] == WALL)
    assert np.all(grid[11:14, 3] == WALL)


def test_main_room_is_the_largest():
    grid = _two_room_grid()
    left, right = _rooms(grid)
    connect_closest_rooms([left, right], grid, carve=False)
    assert right.is_main_room
    assert not left.is_main_room
    assert left.is_accessible_from_main_room


def test_carving_opens_corridor_but_not_perimeter():
    grid = _two_room_grid()
    rooms = _rooms(grid)
    connect_closest_rooms(rooms, grid, carve=True, passage_radius=1)
    assert np.all(grid[4:7, 1] == OPEN)
    assert np.all(grid[4:7, 2] == OPEN)
    assert np.all(grid[4:7, 3] == WALL)
    assert np.all(grid[:, 0] == WALL)
    assert len(get_regions(grid, OPEN)) == 1


def test_carve_passage_counts_opened_cells():
    grid = np.ones((7, 7), dtype=np.int8)
    assert carve_passage(grid, (1, 3), (5, 3), 0) == 5
    assert carve_passage(grid, (1, 3), (5, 3), 0) == 0


def test_get_line_reaches_both_ends():
    assert get_line((0, 0), (3, 0)) == [(0, 0), (1, 0), (2, 0), (3, 0)]
    assert get_line((2, 5), (2, 2)) == [(2, 5), (2, 4), (2, 3), (2, 2)]
    diagonal = get_line((0, 0), (4, 2))
    assert diagonal[0] == (0, 0)
    assert diagonal[-1] == (4, 2)
    assert len(diagonal) == 5
    assert get_line((1, 1), (1, 1)) == [(1, 1)]


def test_no_rooms_means_no_passages():
    grid = np.ones((5, 5), dtype=np.int8)
    assert connect_closest_rooms([], grid) == []


@pytest.mark.parametrize("seed", ["graph-a", "graph-b", 7])
def test_generated_rooms_end_up_connected(seed):
    grid = smooth(fill(80, 60, 50, seed), 5)
    rooms = process_regions(grid, wall_threshold=20, room_threshold=20)
    connect_closest_rooms(rooms, grid)
    assert is_room_graph_connected(rooms)
    assert all(room.is_accessible_from_main_room for room in rooms)
    for room in rooms:
        for other in room.connected_rooms:
            assert room in other.connected_rooms
