"""
Geometry Module

Immutable point / line / vector algebra used to describe and combine detected
road-boundary segments.

Public API:
- Point, Point3D: Coordinates
- Line: Directed segment (length, angle, side tests, intersect, average)
- Vector: Free displacement
- GeometryError, DegenerateLineError: Local, recoverable geometry failures
"""

from .errors import GeometryError, DegenerateLineError
from .point import Point, Point3D
from .vector import Vector
from .line import Line

__all__ = [
    'Point',
    'Point3D',
    'Vector',
    'Line',
    'GeometryError',
    'DegenerateLineError',
]
