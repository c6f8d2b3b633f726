"""High-level cave generation entry point."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .grid import Seed, add_border, fill, smooth
from .mesh import FloorMesh, MeshData, triangulate
from .outline import Outline, build_wall_mesh, trace_outlines
from .regions import process_regions
from .rooms import Passage, Room, connect_closest_rooms
from .settings import CaveSettings

LOGGER = logging.getLogger(__name__)

SeedSource = Callable[[], Seed]


def clock_seed() -> str:
    return str(time.time())


@dataclass
class CaveResult:
    """Everything one generation run produced."""

    seed: Seed
    grid: np.ndarray
    bordered_grid: np.ndarray
    rooms: List[Room]
    passages: List[Passage]
    floor: FloorMesh
    outlines: List[Outline]
    wall_mesh: MeshData
    phase_ms: Dict[str, float] = field(default_factory=dict)

    @property
    def floor_mesh(self) -> MeshData:
        return self.floor.mesh

    def meshes(self) -> Tuple[MeshData, MeshData]:
        return self.floor.mesh, self.wall_mesh


class CaveGenerator:
    """Runs the full grid-to-mesh pipeline with fresh state on every call.

    ``seed_source`` supplies the seed when ``use_random_seed`` is set; it
    defaults to the wall clock.
    """

    def __init__(self, settings: CaveSettings, *, seed_source: Optional[SeedSource] = None) -> None:
        self._settings = settings.validate()
        self._seed_source = seed_source or clock_seed

    @property
    def settings(self) -> CaveSettings:
        return self._settings

    def resolve_seed(self) -> Seed:
        if self._settings.use_random_seed:
            return self._seed_source()
        return self._settings.seed

    def generate(self) -> CaveResult:
        settings = self._settings
        seed = self.resolve_seed()
        phase_ms: Dict[str, float] = {}

        def _phase(label, fn, *args, **kwargs):
            started = time.perf_counter()
            value = fn(*args, **kwargs)
            phase_ms[label] = (time.perf_counter() - started) * 1000.0
            return value

        grid = _phase("fill", fill, settings.width, settings.height, settings.fill_percent, seed)
        _phase(
            "smooth",
            smooth,
            grid,
            settings.smoothing_iterations,
            in_place=settings.smoothing_in_place,
        )
        rooms = _phase(
            "process_regions",
            process_regions,
            grid,
            settings.wall_threshold,
            settings.room_threshold,
            edge_rule=settings.edge_rule,
        )
        passages = _phase(
            "connect_rooms",
            connect_closest_rooms,
            rooms,
            grid,
            carve=settings.carve_passages,
            passage_radius=settings.passage_radius,
            force_accessibility=settings.force_accessibility,
        )
        bordered = _phase("add_border", add_border, grid, settings.border_size)
        floor = _phase("triangulate", triangulate, bordered, settings.cell_size)
        outlines = _phase("trace_outlines", trace_outlines, floor)
        wall_mesh = _phase("build_walls", build_wall_mesh, outlines, floor.mesh.vertices, settings.wall_height)

        LOGGER.info(
            "Generated %dx%d cave (seed=%r): %d rooms, %d passages, %d floor triangles, %d wall triangles",
            settings.width,
            settings.height,
            seed,
            len(rooms),
            len(passages),
            floor.mesh.triangle_count,
            wall_mesh.triangle_count,
        )
        return CaveResult(
            seed=seed,
            grid=grid,
            bordered_grid=bordered,
            rooms=rooms,
            passages=passages,
            floor=floor,
            outlines=outlines,
            wall_mesh=wall_mesh,
            phase_ms=phase_ms,
        )


def generate_cave(settings: Optional[CaveSettings] = None, *, seed_source: Optional[SeedSource] = None) -> CaveResult:
    return CaveGenerator(settings or CaveSettings(), seed_source=seed_source).generate()
