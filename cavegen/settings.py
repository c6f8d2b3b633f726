"""Cave generation settings with JSON and environment loading."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

from .rooms import EDGE_RULES

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


# //1.- Immutable bundle of every knob the generation pipeline reads.
@dataclass(frozen=True)
class CaveSettings:
    width: int = 80
    height: int = 60
    fill_percent: float = 47.0
    smoothing_iterations: int = 5
    wall_threshold: int = 50
    room_threshold: int = 50
    border_size: int = 20
    cell_size: float = 1.0
    wall_height: float = 5.0
    seed: Union[int, str] = "cave"
    use_random_seed: bool = False
    smoothing_in_place: bool = True
    edge_rule: str = "adjacent"
    carve_passages: bool = True
    passage_radius: int = 1
    force_accessibility: bool = True
    max_cells: int = 4_000_000

    # //2.- Reject configurations the core cannot honour before it runs.
    def validate(self) -> "CaveSettings":
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if self.width * self.height > self.max_cells:
            raise ValueError(f"grid of {self.width}x{self.height} exceeds max_cells={self.max_cells}")
        if not 0 <= self.fill_percent <= 100:
            raise ValueError("fill_percent must be between 0 and 100")
        if self.smoothing_iterations < 0:
            raise ValueError("smoothing_iterations must not be negative")
        if self.wall_threshold < 0 or self.room_threshold < 0:
            raise ValueError("region thresholds must not be negative")
        if self.border_size < 0:
            raise ValueError("border_size must not be negative")
        if self.cell_size <= 0:
            raise ValueError("cell_size must be positive")
        if self.wall_height <= 0:
            raise ValueError("wall_height must be positive")
        if self.passage_radius < 0:
            raise ValueError("passage_radius must not be negative")
        if self.edge_rule not in EDGE_RULES:
            raise ValueError(f"edge_rule must be one of {', '.join(EDGE_RULES)}")
        return self

    # //3.- Coerce loosely typed payloads (JSON, environment) into settings.
    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]] = None, *, base: Optional["CaveSettings"] = None) -> "CaveSettings":
        settings = base or cls()
        if not payload:
            return settings
        known = {f.name: f for f in fields(cls)}
        updates: Dict[str, Any] = {}
        for key, raw in payload.items():
            if key not in known:
                raise ValueError(f"Unknown cave setting '{key}'")
            updates[key] = _coerce(key, raw, getattr(settings, key))
        return replace(settings, **updates)

    # //4.- Allow overriding settings through environment variables.
    @classmethod
    def from_environment(
        cls,
        prefix: str = "CAVEGEN",
        env: Optional[Mapping[str, str]] = None,
        *,
        base: Optional["CaveSettings"] = None,
    ) -> "CaveSettings":
        source = env if env is not None else os.environ
        mapping: Dict[str, str] = {}
        for item in fields(cls):
            value = source.get(f"{prefix}_{item.name.upper()}")
            if value is not None:
                mapping[item.name] = value
        return cls.from_mapping(mapping, base=base)


def _coerce(key: str, raw: Any, current: Any) -> Any:
    if key == "seed":
        if isinstance(raw, int):
            return raw
        text = str(raw)
        digits = text[1:] if text.startswith("-") else text
        return int(text) if digits.isdecimal() else text
    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"Cannot interpret {raw!r} as a boolean for '{key}'")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    return str(raw)


# //5.- Load a single JSON configuration file and coerce to dictionary.
def _read_json_config(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Cave settings file {path} must contain a JSON object")
    return payload


# //6.- Public helper layering file, explicit mapping and environment overrides.
def load_cave_settings(
    mapping: Optional[Mapping[str, Any]] = None,
    *,
    config_path: Optional[str] = None,
    env_prefix: Optional[str] = "CAVEGEN",
    env: Optional[Mapping[str, str]] = None,
) -> CaveSettings:
    """Resolve settings: defaults, then ``config_path``, then env, then ``mapping``.

    Pass ``env_prefix=None`` to ignore the environment. The result is
    validated before it is returned.
    """

    settings = CaveSettings()
    if config_path is not None:
        settings = CaveSettings.from_mapping(_read_json_config(config_path), base=settings)
    if env_prefix is not None:
        settings = CaveSettings.from_environment(env_prefix, env, base=settings)
    if mapping is not None:
        settings = CaveSettings.from_mapping(mapping, base=settings)
    return settings.validate()
