"""Summary statistics for generated caves with JSON export."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict

import numpy as np

from .generator import CaveResult
from .grid import OPEN, WALL
from .rooms import is_room_graph_connected


# //1.- Flat record of the numbers worth tracking between runs.
@dataclass(frozen=True)
class CaveMetrics:
    seed: str
    width: int
    height: int
    open_cells: int
    wall_cells: int
    room_count: int
    passage_count: int
    rooms_connected: bool
    outline_count: int
    floor_vertices: int
    floor_triangles: int
    wall_vertices: int
    wall_triangles: int
    phase_ms: Dict[str, float] = field(default_factory=dict)

    @property
    def open_ratio(self) -> float:
        total = self.open_cells + self.wall_cells
        return self.open_cells / total if total else 0.0


# //2.- Derive metrics from a finished generation result.
def collect_cave_metrics(result: CaveResult) -> CaveMetrics:
    width, height = result.grid.shape
    return CaveMetrics(
        seed=str(result.seed),
        width=int(width),
        height=int(height),
        open_cells=int(np.count_nonzero(result.grid == OPEN)),
        wall_cells=int(np.count_nonzero(result.grid == WALL)),
        room_count=len(result.rooms),
        passage_count=len(result.passages),
        rooms_connected=is_room_graph_connected(result.rooms),
        outline_count=len(result.outlines),
        floor_vertices=result.floor.mesh.vertex_count,
        floor_triangles=result.floor.mesh.triangle_count,
        wall_vertices=result.wall_mesh.vertex_count,
        wall_triangles=result.wall_mesh.triangle_count,
        phase_ms=dict(result.phase_ms),
    )


# //3.- Export metrics to JSON for CI validation or dashboards.
def export_cave_metrics(metrics: CaveMetrics, *, filepath: str) -> None:
    payload = asdict(metrics)
    payload["open_ratio"] = metrics.open_ratio
    with open(filepath, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
