"""
Displacement Vector

A free-floating (dx, dy) pair: how far and in which direction, without an
anchor point.
"""

from dataclasses import dataclass

from .errors import GeometryError
from .point import Point


@dataclass(frozen=True)
class Vector:
    """
    2-D displacement.

    Usage:
        origin = Point(10, 10)
        end = Vector(4, -2).project(origin, 0.5)   # Point(12, 9)
    """
    dx: float
    dy: float

    @classmethod
    def for_x(cls, dx: float) -> "Vector":
        return cls(dx, 0.0)

    @classmethod
    def for_y(cls, dy: float) -> "Vector":
        return cls(0.0, dy)

    def project(self, origin: Point, delta: float = 1.0) -> Point:
        """Point reached from `origin` by moving `delta` times this vector."""
        return Point(origin.x + delta * self.dx, origin.y + delta * self.dy)

    def x_for(self, delta_y: float) -> float:
        """
        Horizontal delta matching a vertical delta along this direction.

        Raises:
            GeometryError: if the vector has no vertical component
        """
        if self.dy == 0:
            raise GeometryError("Vector has no y-component; x is undefined for a y-delta")
        return (delta_y / self.dy) * self.dx

    def y_for(self, delta_x: float) -> float:
        """
        Vertical delta matching a horizontal delta along this direction.

        Raises:
            GeometryError: if the vector has no horizontal component
        """
        if self.dx == 0:
            raise GeometryError("Vector has no x-component; y is undefined for an x-delta")
        return (delta_x / self.dx) * self.dy

    @property
    def is_zero(self) -> bool:
        return self.dx == 0 and self.dy == 0
