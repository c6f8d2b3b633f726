"""Binary occupancy grid: seeded fill, cellular-automaton smoothing and bordering.

Grids are ``numpy`` arrays of shape ``(width, height)`` indexed as
``grid[x, y]``. Every cell holds :data:`WALL` or :data:`OPEN`.
"""
from __future__ import annotations

import hashlib
from typing import List, Sequence, Tuple, Union

import numpy as np

WALL = 1
OPEN = 0

Coord = Tuple[int, int]
Seed = Union[int, str]
Cells = Union[np.ndarray, Sequence[Sequence[int]]]

_SEED_MASK = (1 << 64) - 1


# //1.- Fold user supplied seeds into a stable unsigned 64-bit integer.
def seed_to_int(seed: Seed) -> int:
    """Return a reproducible integer for ``seed``.

    Integers pass through (folded into 64 bits). Strings are hashed with
    SHA-256 instead of ``hash()`` so the same text gives the same cave in
    every interpreter run.
    """

    if isinstance(seed, str):
        digest = hashlib.sha256(seed.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big")
    return int(seed) & _SEED_MASK


# //2.- Create a numpy Generator without polluting global RNG state.
def make_rng(seed: Seed) -> np.random.Generator:
    return np.random.default_rng(np.uint64(seed_to_int(seed)))


# //3.- Random fill with a solid perimeter.
def fill(width: int, height: int, fill_percent: float, seed: Seed) -> np.ndarray:
    """Fill a ``width x height`` grid, walls appearing with ``fill_percent`` odds.

    Perimeter cells are always walls. Interior cells draw from the seeded
    stream in x-outer, y-inner order, which is the C order of the interior
    block, so a single batched draw consumes the stream in that order.
    """

    grid = np.full((width, height), WALL, dtype=np.int8)
    if width <= 2 or height <= 2:
        return grid
    rng = make_rng(seed)
    rolls = rng.integers(0, 100, size=(width - 2, height - 2))
    grid[1:-1, 1:-1] = np.where(rolls < fill_percent, WALL, OPEN)
    return grid


# //4.- Count walls among the 8 neighbours, out-of-bounds counting as wall.
def count_surrounding_walls(cells: Cells, grid_x: int, grid_y: int) -> int:
    """``cells`` is indexed ``cells[x][y]``; an array or a list of columns both work."""

    width, height = len(cells), len(cells[0])
    wall_count = 0
    for neighbour_x in range(grid_x - 1, grid_x + 2):
        for neighbour_y in range(grid_y - 1, grid_y + 2):
            if 0 <= neighbour_x < width and 0 <= neighbour_y < height:
                if neighbour_x != grid_x or neighbour_y != grid_y:
                    wall_count += int(cells[neighbour_x][neighbour_y])
            else:
                wall_count += 1
    return wall_count


def _smooth_pass_in_place(cells: List[List[int]]) -> None:
    for x, column in enumerate(cells):
        for y in range(len(column)):
            wall_count = count_surrounding_walls(cells, x, y)
            column[y] = WALL if wall_count > 4 else OPEN


def _smooth_pass_buffered(grid: np.ndarray) -> np.ndarray:
    padded = np.pad(grid, 1, mode="constant", constant_values=WALL).astype(np.int16)
    width, height = grid.shape
    counts = np.zeros((width, height), dtype=np.int16)
    for dx in (0, 1, 2):
        for dy in (0, 1, 2):
            if dx == 1 and dy == 1:
                continue
            counts += padded[dx : dx + width, dy : dy + height]
    return np.where(counts > 4, WALL, OPEN).astype(np.int8)


# //5.- Apply the 4-5 cellular automaton rule ``iterations`` times.
def smooth(grid: np.ndarray, iterations: int, *, in_place: bool = True) -> np.ndarray:
    """Smooth ``grid`` and return it.

    With ``in_place`` the pass scans x-outer, y-inner and writes each result
    straight back, so later cells see neighbours already updated in the same
    pass. Otherwise every pass reads a snapshot of the previous one.
    """

    if in_place:
        width, height = grid.shape
        cells = grid.tolist()
        for _ in range(iterations):
            _smooth_pass_in_place(cells)
        grid[:, :] = np.asarray(cells, dtype=np.int8).reshape(width, height)
        return grid
    for _ in range(iterations):
        grid[:, :] = _smooth_pass_buffered(grid)
    return grid


# //6.- Pad the grid with a solid margin of ``border_size`` cells.
def add_border(grid: np.ndarray, border_size: int) -> np.ndarray:
    width, height = grid.shape
    bordered = np.full((width + border_size * 2, height + border_size * 2), WALL, dtype=np.int8)
    bordered[border_size : border_size + width, border_size : border_size + height] = grid
    return bordered
