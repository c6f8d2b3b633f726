"""Command line harness that generates a cave and reports on it."""
from __future__ import annotations

import argparse
import json
import logging
from typing import Dict, List, Optional, Sequence

from .generator import CaveGenerator, CaveResult
from .metrics import collect_cave_metrics, export_cave_metrics
from .settings import load_cave_settings


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate a cellular-automaton cave and its floor/wall meshes.")
    ap.add_argument("--config", type=str, default=None, help="JSON file with cave settings")
    ap.add_argument("--seed", type=str, default=None, help="Seed (integer or text)")
    ap.add_argument("--random-seed", action="store_true", help="Seed from the clock instead of --seed")
    ap.add_argument("--width", type=int, default=None, help="Grid width in cells")
    ap.add_argument("--height", type=int, default=None, help="Grid height in cells")
    ap.add_argument("--fill", type=float, default=None, help="Initial wall fill percent (0..100)")
    ap.add_argument("--metrics", type=str, default=None, help="Write metrics JSON to this path")
    ap.add_argument("--mesh", type=str, default=None, help="Write floor and wall meshes as JSON to this path")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return ap


def _overrides(args: argparse.Namespace) -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.random_seed:
        overrides["use_random_seed"] = True
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    if args.fill is not None:
        overrides["fill_percent"] = args.fill
    return overrides


def export_meshes(result: CaveResult, filepath: str) -> None:
    payload = {
        "seed": str(result.seed),
        "floor": result.floor.mesh.to_dict(),
        "walls": result.wall_mesh.to_dict(),
    }
    with open(filepath, "w", encoding="utf-8") as handle:
        json.dump(payload, handle)


def summarize(result: CaveResult) -> List[str]:
    metrics = collect_cave_metrics(result)
    return [
        f"Cave {metrics.width}x{metrics.height} seed={metrics.seed}",
        f"  open ratio={metrics.open_ratio:.2f}, rooms={metrics.room_count}, passages={metrics.passage_count}, "
        f"connected={metrics.rooms_connected}",
        f"  floor: {metrics.floor_vertices} vertices / {metrics.floor_triangles} triangles",
        f"  walls: {metrics.outline_count} outlines, {metrics.wall_vertices} vertices / {metrics.wall_triangles} triangles",
    ]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )
    settings = load_cave_settings(_overrides(args), config_path=args.config)
    result = CaveGenerator(settings).generate()
    for line in summarize(result):
        print(line)
    if args.metrics:
        export_cave_metrics(collect_cave_metrics(result), filepath=args.metrics)
    if args.mesh:
        export_meshes(result, args.mesh)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
