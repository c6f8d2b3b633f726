"""Marching squares triangulation of a bordered occupancy grid.

Corner and edge-midpoint nodes live in a :class:`NodeArena` and are referred
to by integer handle. A control node owns the handles of the midpoints above
and to the right of it, and every square borrows its four midpoints from its
corners, so two neighbouring squares always share the same midpoint record
and therefore the same output vertex.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, Sequence, Set, Tuple

import numpy as np

from .grid import WALL
from .vector import Vector3

UNASSIGNED = -1


class NodeArena:
    """Flat storage for mesh node positions and their lazy vertex indices."""

    def __init__(self) -> None:
        self.positions: List[Vector3] = []
        self.vertex_indices: List[int] = []

    def add(self, position: Vector3) -> int:
        self.positions.append(position)
        self.vertex_indices.append(UNASSIGNED)
        return len(self.positions) - 1


@dataclass(frozen=True)
class ControlNode:
    node: int
    active: bool
    above: int
    right: int


@dataclass(frozen=True)
class Square:
    top_left: ControlNode
    top_right: ControlNode
    bottom_right: ControlNode
    bottom_left: ControlNode
    centre_top: int
    centre_right: int
    centre_bottom: int
    centre_left: int
    configuration: int

    @classmethod
    def from_corners(
        cls,
        top_left: ControlNode,
        top_right: ControlNode,
        bottom_right: ControlNode,
        bottom_left: ControlNode,
    ) -> "Square":
        configuration = 0
        if top_left.active:
            configuration += 8
        if top_right.active:
            configuration += 4
        if bottom_right.active:
            configuration += 2
        if bottom_left.active:
            configuration += 1
        return cls(
            top_left=top_left,
            top_right=top_right,
            bottom_right=bottom_right,
            bottom_left=bottom_left,
            centre_top=top_left.right,
            centre_right=bottom_right.above,
            centre_bottom=bottom_left.right,
            centre_left=bottom_left.above,
            configuration=configuration,
        )

    def point(self, name: str) -> int:
        """Arena handle of a corner or midpoint named as in the table."""

        value = getattr(self, name)
        if isinstance(value, ControlNode):
            return value.node
        return value

    def corners(self) -> Tuple[ControlNode, ControlNode, ControlNode, ControlNode]:
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)


# Ordered fan points per configuration (top-left=8, top-right=4, bottom-right=2, bottom-left=1).
TRIANGULATION_TABLE: Dict[int, Tuple[str, ...]] = {
    0: (),
    1: ("centre_left", "centre_bottom", "bottom_left"),
    2: ("bottom_right", "centre_bottom", "centre_right"),
    4: ("top_right", "centre_right", "centre_top"),
    8: ("top_left", "centre_top", "centre_left"),
    3: ("centre_right", "bottom_right", "bottom_left", "centre_left"),
    6: ("centre_top", "top_right", "bottom_right", "centre_bottom"),
    9: ("top_left", "centre_top", "centre_bottom", "bottom_left"),
    12: ("top_left", "top_right", "centre_right", "centre_left"),
    5: ("centre_top", "top_right", "centre_right", "centre_bottom", "bottom_left", "centre_left"),
    10: ("top_left", "centre_top", "centre_right", "bottom_right", "centre_bottom", "centre_left"),
    7: ("centre_top", "top_right", "bottom_right", "bottom_left", "centre_left"),
    11: ("top_left", "centre_top", "centre_right", "bottom_right", "bottom_left"),
    13: ("top_left", "top_right", "centre_right", "centre_bottom", "bottom_left"),
    14: ("top_left", "top_right", "bottom_right", "centre_bottom", "centre_left"),
    15: ("top_left", "top_right", "bottom_right", "bottom_left"),
}


class SquareGrid:
    """Control nodes for every grid cell and squares over each 2x2 block."""

    def __init__(self, grid: np.ndarray, cell_size: float) -> None:
        node_count_x, node_count_y = grid.shape
        map_width = node_count_x * cell_size
        map_height = node_count_y * cell_size
        half = cell_size / 2.0

        self.arena = NodeArena()
        self.control_nodes: List[List[ControlNode]] = []
        for x in range(node_count_x):
            column: List[ControlNode] = []
            for y in range(node_count_y):
                position = Vector3(
                    -map_width / 2.0 + x * cell_size + half,
                    0.0,
                    -map_height / 2.0 + y * cell_size + half,
                )
                node = self.arena.add(position)
                above = self.arena.add(position + Vector3.forward() * half)
                right = self.arena.add(position + Vector3.right() * half)
                column.append(ControlNode(node=node, active=bool(grid[x, y] == WALL), above=above, right=right))
            self.control_nodes.append(column)

        self.squares: List[List[Square]] = []
        for x in range(node_count_x - 1):
            column_squares: List[Square] = []
            for y in range(node_count_y - 1):
                column_squares.append(
                    Square.from_corners(
                        self.control_nodes[x][y + 1],
                        self.control_nodes[x + 1][y + 1],
                        self.control_nodes[x + 1][y],
                        self.control_nodes[x][y],
                    )
                )
            self.squares.append(column_squares)

    def iter_squares(self) -> Iterator[Square]:
        for column in self.squares:
            yield from column


@dataclass(frozen=True)
class Triangle:
    vertex_index_a: int
    vertex_index_b: int
    vertex_index_c: int

    def __getitem__(self, index: int) -> int:
        return (self.vertex_index_a, self.vertex_index_b, self.vertex_index_c)[index]

    def __iter__(self) -> Iterator[int]:
        yield self.vertex_index_a
        yield self.vertex_index_b
        yield self.vertex_index_c

    def __contains__(self, vertex_index: object) -> bool:
        return vertex_index in (self.vertex_index_a, self.vertex_index_b, self.vertex_index_c)


@dataclass
class MeshData:
    """Flat vertex and triangle-index lists for one mesh."""

    vertices: List[Vector3] = field(default_factory=list)
    triangles: List[int] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``float32 (N, 3)`` vertices and ``int32`` indices for upload."""

        vertices = np.array([v.as_tuple() for v in self.vertices], dtype=np.float32).reshape(-1, 3)
        triangles = np.array(self.triangles, dtype=np.int32)
        return vertices, triangles

    def to_dict(self) -> dict:
        return {
            "vertices": [list(v.as_tuple()) for v in self.vertices],
            "triangles": list(self.triangles),
        }


@dataclass(frozen=True)
class FloorMesh:
    """Floor mesh plus the adjacency data the outline tracer needs."""

    mesh: MeshData
    triangle_map: Dict[int, List[Triangle]]
    checked_vertices: FrozenSet[int]


class MeshTriangulator:
    """Runs marching squares once over a grid; build a new one per grid."""

    def __init__(self, grid: np.ndarray, cell_size: float) -> None:
        self.square_grid = SquareGrid(grid, cell_size)
        self.vertices: List[Vector3] = []
        self.triangles: List[int] = []
        self.triangle_map: Dict[int, List[Triangle]] = {}
        self.checked_vertices: Set[int] = set()
        self._result: FloorMesh | None = None

    def triangulate(self) -> FloorMesh:
        if self._result is None:
            for square in self.square_grid.iter_squares():
                self.triangulate_square(square)
            self._result = FloorMesh(
                mesh=MeshData(vertices=self.vertices, triangles=self.triangles),
                triangle_map=self.triangle_map,
                checked_vertices=frozenset(self.checked_vertices),
            )
        return self._result

    def triangulate_square(self, square: Square) -> None:
        names = TRIANGULATION_TABLE[square.configuration]
        if not names:
            return
        self.mesh_from_points([square.point(name) for name in names])
        if square.configuration == 15:
            arena = self.square_grid.arena
            for corner in square.corners():
                self.checked_vertices.add(arena.vertex_indices[corner.node])

    def mesh_from_points(self, points: Sequence[int]) -> None:
        """Assign vertices and emit a triangle fan anchored at ``points[0]``."""

        self._assign_vertices(points)
        vertex_indices = self.square_grid.arena.vertex_indices
        anchor = vertex_indices[points[0]]
        for i in range(1, len(points) - 1):
            self._create_triangle(anchor, vertex_indices[points[i]], vertex_indices[points[i + 1]])

    def _assign_vertices(self, points: Sequence[int]) -> None:
        arena = self.square_grid.arena
        for handle in points:
            if arena.vertex_indices[handle] == UNASSIGNED:
                arena.vertex_indices[handle] = len(self.vertices)
                self.vertices.append(arena.positions[handle])

    def _create_triangle(self, a: int, b: int, c: int) -> None:
        self.triangles.extend((a, b, c))
        triangle = Triangle(a, b, c)
        for vertex_index in triangle:
            self.triangle_map.setdefault(vertex_index, []).append(triangle)


def triangulate(grid: np.ndarray, cell_size: float) -> FloorMesh:
    return MeshTriangulator(grid, cell_size).triangulate()
