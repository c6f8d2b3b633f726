"""Boundary loop tracing over the floor mesh and wall extrusion."""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Set

from .mesh import FloorMesh, MeshData, Triangle
from .vector import Vector3

LOGGER = logging.getLogger(__name__)

Outline = List[int]
TriangleMap = Dict[int, List[Triangle]]

NO_VERTEX = -1


def is_outline_edge(vertex_a: int, vertex_b: int, triangle_map: TriangleMap) -> bool:
    """An edge lies on the boundary when exactly one triangle holds both ends."""

    shared = 0
    for triangle in triangle_map.get(vertex_a, ()):
        if vertex_b in triangle:
            shared += 1
            if shared > 1:
                break
    return shared == 1


def get_connected_outline_vertex(vertex_index: int, triangle_map: TriangleMap, checked: Set[int]) -> int:
    """First unchecked vertex sharing a boundary edge with ``vertex_index``."""

    for triangle in triangle_map.get(vertex_index, ()):
        for vertex_b in triangle:
            if vertex_b != vertex_index and vertex_b not in checked:
                if is_outline_edge(vertex_index, vertex_b, triangle_map):
                    return vertex_b
    return NO_VERTEX


def trace_outlines(floor: FloorMesh, *, strict: bool = False) -> List[Outline]:
    """Trace every closed boundary loop of ``floor``.

    Vertices already marked by fully enclosed squares are skipped. A loop
    whose last vertex cannot reach back to its start is still closed and
    returned; with ``strict`` a :class:`ValueError` is raised instead.
    """

    triangle_map = floor.triangle_map
    checked: Set[int] = set(floor.checked_vertices)
    outlines: List[Outline] = []

    for vertex_index in range(floor.mesh.vertex_count):
        if vertex_index in checked:
            continue
        next_vertex = get_connected_outline_vertex(vertex_index, triangle_map, checked)
        if next_vertex == NO_VERTEX:
            continue
        checked.add(vertex_index)
        outline: Outline = [vertex_index]
        while next_vertex != NO_VERTEX:
            outline.append(next_vertex)
            checked.add(next_vertex)
            next_vertex = get_connected_outline_vertex(next_vertex, triangle_map, checked)
        closes = len(outline) > 2 and is_outline_edge(outline[-1], vertex_index, triangle_map)
        if not closes:
            if strict:
                raise ValueError(f"Outline starting at vertex {vertex_index} does not close")
            LOGGER.debug("Outline starting at vertex %d ended early after %d vertices", vertex_index, len(outline))
        outline.append(vertex_index)
        outlines.append(outline)

    LOGGER.debug("Traced %d outlines", len(outlines))
    return outlines


def build_wall_mesh(outlines: Sequence[Outline], vertices: Sequence[Vector3], wall_height: float) -> MeshData:
    """Extrude each outline edge straight down into a quad of two triangles."""

    drop = Vector3.up() * wall_height
    wall = MeshData()
    for outline in outlines:
        for i in range(len(outline) - 1):
            start_index = len(wall.vertices)
            top_0 = vertices[outline[i]]
            top_1 = vertices[outline[i + 1]]
            wall.vertices.extend((top_0, top_1, top_0 - drop, top_1 - drop))

            wall.triangles.extend((start_index + 0, start_index + 2, start_index + 3))
            wall.triangles.extend((start_index + 3, start_index + 1, start_index + 0))
    return wall
