"""
Geometry Errors

Raised by the line toolkit. All are local to the caller: skip the malformed
line, fall back to a default, or drop the frame.
"""


class GeometryError(ValueError):
    """Invalid geometric input (missing point, empty collection, zero axis)."""


class DegenerateLineError(GeometryError):
    """Operation needs a direction but the line has zero length."""
