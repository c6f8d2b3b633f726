"""Cave generation package.

Builds a cellular-automaton cave grid, filters and joins its regions, then
turns the result into a marching-squares floor mesh with extruded walls.
"""

from .vector import Vector3
from .grid import OPEN, WALL, add_border, fill, seed_to_int, smooth
from .regions import flood_fill, get_regions, process_regions
from .rooms import Passage, Room, carve_passage, connect_closest_rooms, connect_rooms
from .mesh import FloorMesh, MeshData, MeshTriangulator, SquareGrid, Triangle, TRIANGULATION_TABLE, triangulate
from .outline import build_wall_mesh, is_outline_edge, trace_outlines
from .settings import CaveSettings, load_cave_settings
from .generator import CaveGenerator, CaveResult, generate_cave
from .metrics import CaveMetrics, collect_cave_metrics, export_cave_metrics

__all__ = [
    "Vector3",
    "OPEN",
    "WALL",
    "add_border",
    "fill",
    "seed_to_int",
    "smooth",
    "flood_fill",
    "get_regions",
    "process_regions",
    "Passage",
    "Room",
    "carve_passage",
    "connect_closest_rooms",
    "connect_rooms",
    "FloorMesh",
    "MeshData",
    "MeshTriangulator",
    "SquareGrid",
    "Triangle",
    "TRIANGULATION_TABLE",
    "triangulate",
    "build_wall_mesh",
    "is_outline_edge",
    "trace_outlines",
    "CaveSettings",
    "load_cave_settings",
    "CaveGenerator",
    "CaveResult",
    "generate_cave",
    "CaveMetrics",
    "collect_cave_metrics",
    "export_cave_metrics",
]
