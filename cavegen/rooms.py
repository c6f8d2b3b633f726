"""Room graph construction and nearest edge-tile joining."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

import numpy as np

from .grid import OPEN, WALL, Coord

LOGGER = logging.getLogger(__name__)

EDGE_RULES = ("adjacent", "scan")

# Rows of tile_a processed per numpy distance block.
_DISTANCE_BLOCK = 1024


# //1.- Edge tile rules: which open tiles of a room count as touching a wall.
def _is_adjacent_edge(grid: np.ndarray, x: int, y: int) -> bool:
    width, height = grid.shape
    for nx, ny in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)):
        if not (0 <= nx < width and 0 <= ny < height):
            return True
        if grid[nx, ny] == WALL:
            return True
    return False


def _is_scan_edge(grid: np.ndarray, x: int, y: int) -> bool:
    # Any wall at or before the tile along its own row or column.
    return bool(np.any(grid[: x + 1, y] == WALL) or np.any(grid[x, : y + 1] == WALL))


def find_edge_tiles(tiles: Iterable[Coord], grid: np.ndarray, edge_rule: str = "adjacent") -> List[Coord]:
    if edge_rule == "adjacent":
        check = _is_adjacent_edge
    elif edge_rule == "scan":
        check = _is_scan_edge
    else:
        raise ValueError(f"Unknown edge_rule '{edge_rule}'")
    return [(x, y) for x, y in tiles if check(grid, x, y)]


class Room:
    """A surviving open region and its place in the connectivity graph.

    Rooms hash and compare by identity: two rooms with equal tiles are still
    different graph nodes.
    """

    def __init__(self, tiles: Sequence[Coord], grid: np.ndarray, *, edge_rule: str = "adjacent") -> None:
        self.tiles: List[Coord] = list(tiles)
        self.room_size = len(self.tiles)
        self.edge_tiles: List[Coord] = find_edge_tiles(self.tiles, grid, edge_rule)
        self.connected_rooms: Set["Room"] = set()
        self.is_main_room = False
        self.is_accessible_from_main_room = False

    def is_connected(self, other: "Room") -> bool:
        return other in self.connected_rooms

    def set_accessible_from_main_room(self) -> None:
        # Walk the graph iteratively so long room chains cannot blow the stack.
        pending = [self]
        while pending:
            room = pending.pop()
            if room.is_accessible_from_main_room:
                continue
            room.is_accessible_from_main_room = True
            pending.extend(room.connected_rooms)

    def __repr__(self) -> str:
        return f"Room(size={self.room_size}, edge_tiles={len(self.edge_tiles)}, links={len(self.connected_rooms)})"


def connect_rooms(room_a: Room, room_b: Room) -> None:
    """Link two rooms symmetrically, spreading main-room accessibility."""

    if room_a.is_accessible_from_main_room:
        room_b.set_accessible_from_main_room()
    elif room_b.is_accessible_from_main_room:
        room_a.set_accessible_from_main_room()
    room_a.connected_rooms.add(room_b)
    room_b.connected_rooms.add(room_a)


@dataclass(frozen=True)
class Passage:
    """The closest pair of edge tiles chosen to join two rooms."""

    room_a: Room
    room_b: Room
    tile_a: Coord
    tile_b: Coord
    distance_sq: int


# //2.- Closest edge-tile pair between one room and a set of candidates.
def _closest_pair(room_a: Room, candidates: Iterable[Room]) -> Optional[Passage]:
    best: Optional[Passage] = None
    if not room_a.edge_tiles:
        return None
    tiles_a = np.asarray(room_a.edge_tiles, dtype=np.int64)
    for room_b in candidates:
        if not room_b.edge_tiles:
            continue
        tiles_b = np.asarray(room_b.edge_tiles, dtype=np.int64)
        for start in range(0, len(tiles_a), _DISTANCE_BLOCK):
            block = tiles_a[start : start + _DISTANCE_BLOCK]
            delta = block[:, None, :] - tiles_b[None, :, :]
            distances = (delta * delta).sum(axis=2)
            # argmin returns the first minimum in tile_a-major order.
            flat = int(np.argmin(distances))
            index_a, index_b = divmod(flat, len(tiles_b))
            distance = int(distances[index_a, index_b])
            if best is None or distance < best.distance_sq:
                best = Passage(
                    room_a=room_a,
                    room_b=room_b,
                    tile_a=room_a.edge_tiles[start + index_a],
                    tile_b=room_b.edge_tiles[index_b],
                    distance_sq=distance,
                )
    return best


# //3.- Rasterise the segment between two tiles stepping along the longer axis.
def get_line(start: Coord, end: Coord) -> List[Coord]:
    x, y = start
    dx = end[0] - x
    dy = end[1] - y
    step = 1 if dx >= 0 else -1
    gradient_step = 1 if dy >= 0 else -1
    longest = abs(dx)
    shortest = abs(dy)
    inverted = False
    if longest < shortest:
        inverted = True
        longest, shortest = shortest, longest
        step, gradient_step = gradient_step, step

    line: List[Coord] = []
    accumulation = longest // 2
    for _ in range(longest):
        line.append((x, y))
        if inverted:
            y += step
        else:
            x += step
        accumulation += shortest
        if accumulation >= longest:
            if inverted:
                x += gradient_step
            else:
                y += gradient_step
            accumulation -= longest
    line.append((x, y))
    return line


def carve_passage(grid: np.ndarray, tile_a: Coord, tile_b: Coord, radius: int) -> int:
    """Open a disc of ``radius`` around every point of the line between tiles.

    The outermost ring of the grid is never opened. Returns the number of
    cells that changed from wall to open.
    """

    width, height = grid.shape
    opened = 0
    radius_sq = radius * radius
    for cx, cy in get_line(tile_a, tile_b):
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                if dx * dx + dy * dy > radius_sq:
                    continue
                x, y = cx + dx, cy + dy
                if 0 < x < width - 1 and 0 < y < height - 1 and grid[x, y] == WALL:
                    grid[x, y] = OPEN
                    opened += 1
    return opened


def _join(passage: Passage, grid: np.ndarray, carve: bool, radius: int) -> Passage:
    connect_rooms(passage.room_a, passage.room_b)
    if carve:
        opened = carve_passage(grid, passage.tile_a, passage.tile_b, radius)
        LOGGER.debug("Carved passage %s -> %s opening %d cells", passage.tile_a, passage.tile_b, opened)
    return passage


# //4.- Greedy nearest join per room, then optional accessibility sweep.
def connect_closest_rooms(
    rooms: Sequence[Room],
    grid: np.ndarray,
    *,
    carve: bool = True,
    passage_radius: int = 1,
    force_accessibility: bool = True,
) -> List[Passage]:
    """Join every room to its nearest unconnected neighbour.

    Rooms are visited in order; a room that already has a link is skipped,
    otherwise it is joined to the room whose edge tiles are closest (squared
    distance, first pair found wins ties) among those it is not linked to.
    With ``force_accessibility`` the largest room becomes the main room and
    the closest inaccessible/accessible pair is joined repeatedly until every
    room can be reached from it.
    """

    passages: List[Passage] = []
    if not rooms:
        return passages

    if force_accessibility:
        main_room = max(rooms, key=lambda room: room.room_size)
        main_room.is_main_room = True
        main_room.is_accessible_from_main_room = True

    for room_a in rooms:
        if room_a.connected_rooms:
            continue
        candidates = [room for room in rooms if room is not room_a and not room_a.is_connected(room)]
        best = _closest_pair(room_a, candidates)
        if best is not None:
            passages.append(_join(best, grid, carve, passage_radius))

    if force_accessibility:
        while True:
            accessible = [room for room in rooms if room.is_accessible_from_main_room]
            inaccessible = [room for room in rooms if not room.is_accessible_from_main_room]
            if not inaccessible:
                break
            best = None
            for room_a in inaccessible:
                candidate = _closest_pair(room_a, accessible)
                if candidate is not None and (best is None or candidate.distance_sq < best.distance_sq):
                    best = candidate
            if best is None:
                LOGGER.warning("%d rooms have no edge tiles and stay unreachable", len(inaccessible))
                break
            passages.append(_join(best, grid, carve, passage_radius))

    LOGGER.debug("Connected %d rooms with %d passages", len(rooms), len(passages))
    return passages


def is_room_graph_connected(rooms: Sequence[Room]) -> bool:
    if not rooms:
        return True
    seen = {rooms[0]}
    pending = [rooms[0]]
    while pending:
        for neighbour in pending.pop().connected_rooms:
            if neighbour not in seen:
                seen.add(neighbour)
                pending.append(neighbour)
    return len(seen) == len(rooms)
