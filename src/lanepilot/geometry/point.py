"""
Point Types

Immutable 2-D and 3-D coordinates used by the line toolkit.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """
    Immutable 2-D coordinate.

    Two points are equal when their coordinates are equal; there is no
    identity beyond value.
    """
    x: float
    y: float

    def distance(self, other: "Point") -> float:
        """Euclidean distance to another point (x/y plane)."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def as_tuple(self) -> tuple:
        return (self.x, self.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class Point3D(Point):
    """Point with an additional z-coordinate."""
    z: float = 0.0

    def distance(self, other: Point) -> float:
        """
        Euclidean distance to another point.

        Uses all three axes when `other` is also a Point3D, otherwise
        falls back to the planar distance.
        """
        if isinstance(other, Point3D):
            return math.sqrt(
                (other.x - self.x) ** 2
                + (other.y - self.y) ** 2
                + (other.z - self.z) ** 2
            )
        return super().distance(other)

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"
