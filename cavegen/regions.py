"""Region extraction and size filtering over the occupancy grid."""
from __future__ import annotations

import logging
from collections import deque
from typing import List, Optional

import numpy as np

from .grid import OPEN, WALL, Coord
from .rooms import Room

LOGGER = logging.getLogger(__name__)

Region = List[Coord]

_NEIGHBOUR_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def flood_fill(grid: np.ndarray, start: Coord, visited: Optional[np.ndarray] = None) -> Region:
    """Collect every cell 4-connected to ``start`` that shares its tag.

    ``visited`` lets callers share one mask across several fills; cells
    collected here are marked in it. A queue keeps memory flat on large maps.
    """

    width, height = grid.shape
    if visited is None:
        visited = np.zeros((width, height), dtype=bool)
    tag = grid[start]
    region: Region = []
    queue = deque([start])
    visited[start] = True
    while queue:
        x, y = queue.popleft()
        region.append((x, y))
        for dx, dy in _NEIGHBOUR_OFFSETS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height:
                if not visited[nx, ny] and grid[nx, ny] == tag:
                    visited[nx, ny] = True
                    queue.append((nx, ny))
    return region


def get_regions(grid: np.ndarray, tag: int) -> List[Region]:
    """Partition every cell tagged ``tag`` into maximal 4-connected regions."""

    width, height = grid.shape
    visited = np.zeros((width, height), dtype=bool)
    regions: List[Region] = []
    for x in range(width):
        for y in range(height):
            if not visited[x, y] and grid[x, y] == tag:
                regions.append(flood_fill(grid, (x, y), visited))
    return regions


def touches_perimeter(region: Region, width: int, height: int) -> bool:
    return any(x in (0, width - 1) or y in (0, height - 1) for x, y in region)


def process_regions(
    grid: np.ndarray,
    wall_threshold: int,
    room_threshold: int,
    *,
    edge_rule: str = "adjacent",
) -> List[Room]:
    """Remove small wall islands and small caverns, returning surviving rooms.

    Wall regions smaller than ``wall_threshold`` become open first, except
    those touching the outermost ring, which always stays solid. Open
    regions are then measured on the updated grid and those smaller than
    ``room_threshold`` are filled in. ``grid`` is modified in place.
    """

    width, height = grid.shape
    removed_walls = 0
    for region in get_regions(grid, WALL):
        if len(region) < wall_threshold and not touches_perimeter(region, width, height):
            for tile in region:
                grid[tile] = OPEN
            removed_walls += 1

    surviving: List[Region] = []
    removed_rooms = 0
    for region in get_regions(grid, OPEN):
        if len(region) < room_threshold:
            for tile in region:
                grid[tile] = WALL
            removed_rooms += 1
        else:
            surviving.append(region)

    # Edge tiles depend on the final grid, so rooms are built after filling.
    rooms = [Room(region, grid, edge_rule=edge_rule) for region in surviving]

    LOGGER.debug(
        "Region filtering removed %d wall regions and %d open regions; %d rooms remain",
        removed_walls,
        removed_rooms,
        len(rooms),
    )
    return rooms
