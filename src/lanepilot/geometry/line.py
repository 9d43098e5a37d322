"""
Line Segment

Directed line between two points, with the measurements the lane classifier
needs: length, angle, side tests, extremes, interpolation, intersection,
point distance and population averaging.

Direction matters for `angle` and the side tests (swapping endpoints turns
left into right and rotates the angle by 180°). It does not matter for the
extremes, `width`, `height` or `point_at`, which compare coordinates.

Lines are planar: Point3D endpoints are accepted but every measurement
uses only x and y.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from .errors import DegenerateLineError, GeometryError
from .point import Point
from .vector import Vector


@dataclass(frozen=True)
class Line:
    """
    Immutable line from point `a` to point `b`.

    Usage:
        line = Line(Point(0, 0), Point(10, 10))
        line = Line.from_coordinates([0, 0, 10, 10])   # e.g. a HoughLinesP row

    Raises:
        GeometryError: if either endpoint is missing
    """
    a: Point
    b: Point

    def __post_init__(self):
        if self.a is None:
            raise GeometryError("Line start point can not be None")
        if self.b is None:
            raise GeometryError("Line end point can not be None")

    @classmethod
    def from_coordinates(cls, coordinates: Sequence[float]) -> "Line":
        """
        Build a line from four raw coordinates (x1, y1, x2, y2).

        Accepts any 4-element sequence, including numpy rows of shape (4,)
        or (1, 4).
        """
        if coordinates is None:
            raise GeometryError("Line coordinates can not be None")
        values = np.asarray(coordinates, dtype=float).ravel()
        if values.size != 4:
            raise GeometryError(f"Expected 4 coordinates, got {values.size}")
        x1, y1, x2, y2 = (float(v) for v in values)
        return cls(Point(x1, y1), Point(x2, y2))

    # =========================================================================
    # Measurements
    # =========================================================================

    @property
    def direction(self) -> Vector:
        """Displacement from `a` to `b`."""
        return Vector(self.b.x - self.a.x, self.b.y - self.a.y)

    @property
    def is_degenerate(self) -> bool:
        return self.a.x == self.b.x and self.a.y == self.b.y

    def length(self) -> float:
        """Length in the x/y plane; z of Point3D endpoints is ignored."""
        return math.hypot(self.b.x - self.a.x, self.b.y - self.a.y)

    def angle(self, degrees: bool = False) -> float:
        """
        Signed angle of the vector b - a, atan2(dy, dx).

        Args:
            degrees: Return degrees instead of radians

        Raises:
            DegenerateLineError: for a zero-length line
        """
        self._require_direction("angle")
        rad = math.atan2(self.b.y - self.a.y, self.b.x - self.a.x)
        return math.degrees(rad) if degrees else rad

    def width(self) -> float:
        """Horizontal span between the endpoints."""
        return abs(self.a.x - self.b.x)

    def height(self) -> float:
        """Vertical span between the endpoints."""
        return abs(self.a.y - self.b.y)

    # =========================================================================
    # Side tests
    # =========================================================================

    def how_left(self, point: Point) -> float:
        """
        Cross product of (b - a) and (point - a), at full precision.

        Returns:
            > 0 when the point is left of the directed line
            = 0 when it is on the (infinite) line
            < 0 when it is right of the directed line
        """
        return ((self.b.x - self.a.x) * (point.y - self.a.y)
                - (point.x - self.a.x) * (self.b.y - self.a.y))

    def side_of(self, point: Point, epsilon: float = 0.0) -> int:
        """Sign of `how_left`, treating |cross| <= epsilon as collinear."""
        cross = self.how_left(point)
        if abs(cross) <= epsilon:
            return 0
        return 1 if cross > 0 else -1

    def is_left_of_line(self, point: Point, epsilon: float = 0.0) -> bool:
        return self.side_of(point, epsilon) > 0

    def is_right_of_line(self, point: Point, epsilon: float = 0.0) -> bool:
        return self.side_of(point, epsilon) < 0

    def exists_on_line(self, point: Point, epsilon: float = 0.0) -> bool:
        """
        True if the point lies within the line's y-span and is collinear.

        The default epsilon of 0 demands an exact collinear match.
        """
        if point.y > max(self.a.y, self.b.y):
            return False
        if point.y < min(self.a.y, self.b.y):
            return False
        return self.side_of(point, epsilon) == 0

    # =========================================================================
    # Extremes (ties resolve to b)
    # =========================================================================

    def left_most(self) -> Point:
        return self.a if self.a.x < self.b.x else self.b

    def right_most(self) -> Point:
        return self.a if self.a.x > self.b.x else self.b

    def top_most(self) -> Point:
        return self.a if self.a.y < self.b.y else self.b

    def bottom_most(self) -> Point:
        return self.a if self.a.y > self.b.y else self.b

    def point_at(self, fraction: float) -> Point:
        """
        Interpolate across the line's bounding box.

        x runs from the left-most x and y from the top-most y. For lines
        whose left-most and top-most endpoint differ (rising to the right in
        image coordinates) the result lies on the box diagonal, not on the
        segment.
        """
        x = self.left_most().x + self.width() * fraction
        y = self.top_most().y + self.height() * fraction
        return Point(x, y)

    def reversed(self) -> "Line":
        return Line(self.b, self.a)

    # =========================================================================
    # Relations to other geometry
    # =========================================================================

    def intersect(self, other: "Line") -> Optional[Point]:
        """
        Intersection of the two infinite lines.

        Returns:
            The crossing point, or None when the determinant is exactly zero
            (parallel or coincident lines)

        Raises:
            DegenerateLineError: if either line has zero length
        """
        self._require_direction("intersection")
        other._require_direction("intersection")

        x1, y1 = self.a.x, self.a.y
        x2, y2 = self.b.x, self.b.y
        x3, y3 = other.a.x, other.a.y
        x4, y4 = other.b.x, other.b.y

        determinant = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
        if determinant == 0:
            return None

        cross_self = x1 * y2 - y1 * x2
        cross_other = x3 * y4 - y3 * x4

        x = (cross_self * (x3 - x4) - (x1 - x2) * cross_other) / determinant
        y = (cross_self * (y3 - y4) - (y1 - y2) * cross_other) / determinant
        return Point(x, y)

    def distance(self, point: Point) -> float:
        """
        Perpendicular distance from a point to the infinite line.

        Raises:
            DegenerateLineError: for a zero-length line
        """
        self._require_direction("distance")
        x0, y0 = point.x, point.y
        x1, y1 = self.a.x, self.a.y
        x2, y2 = self.b.x, self.b.y

        numerator = abs((y2 - y1) * x0 - (x2 - x1) * y0 + x2 * y1 - y2 * x1)
        return numerator / self.length()

    @staticmethod
    def average(lines: Iterable["Line"]) -> "Line":
        """
        Representative line for a population of lines.

        Direction is the mean displacement vector (angles are never averaged,
        they wrap at ±180°). Position is centred on the centroid of all
        endpoints. Lines pointing in opposite directions cancel out into a
        zero-length result.

        Raises:
            GeometryError: for an empty collection
        """
        coords = np.array(
            [(line.a.x, line.a.y, line.b.x, line.b.y) for line in lines],
            dtype=float,
        ).reshape(-1, 4)
        if coords.shape[0] == 0:
            raise GeometryError("Can not average an empty collection of lines")

        centroid_x = float((coords[:, 0] + coords[:, 2]).mean() / 2.0)
        centroid_y = float((coords[:, 1] + coords[:, 3]).mean() / 2.0)
        mean = Vector(
            float((coords[:, 2] - coords[:, 0]).mean()),
            float((coords[:, 3] - coords[:, 1]).mean()),
        )

        origin = Point(centroid_x - 0.5 * mean.dx, centroid_y - 0.5 * mean.dy)
        return Line(origin, mean.project(origin, 1.0))

    def _require_direction(self, operation: str):
        if self.is_degenerate:
            raise DegenerateLineError(f"{operation} is undefined for zero-length line {self}")

    def __str__(self) -> str:
        return f"{self.a} - {self.b}"
