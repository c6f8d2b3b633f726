"""Lightweight 3D vector used for mesh vertex positions.

Only the arithmetic the mesh builders need is implemented. Positions are
immutable so shared mesh nodes can hand the same instance to several
squares without copying.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Vector3:
    """Immutable mesh-space position; y is up."""

    x: float
    y: float
    z: float

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @staticmethod
    def up() -> "Vector3":
        return Vector3(0.0, 1.0, 0.0)

    @staticmethod
    def right() -> "Vector3":
        return Vector3(1.0, 0.0, 0.0)

    @staticmethod
    def forward() -> "Vector3":
        return Vector3(0.0, 0.0, 1.0)
