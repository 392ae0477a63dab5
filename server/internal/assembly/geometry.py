"""
Vector and axis-aligned bounding box helpers.
Coordinate frame: X = width, Y = vertical, Z = depth.
"""

from __future__ import annotations

import math
from typing import Iterable, List, NamedTuple

# Relative floor below which a vector is treated as having no direction
EPSILON = 1e-12


class Vector3(NamedTuple):
    x: float
    y: float
    z: float

    def __add__(self, other: "Vector3") -> "Vector3":  # type: ignore[override]
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def scaled(self, factor: float) -> "Vector3":
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def multiply(self, other: "Vector3") -> "Vector3":
        """Component-wise product."""
        return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self)


ZERO = Vector3(0.0, 0.0, 0.0)
ONE = Vector3(1.0, 1.0, 1.0)


class Box3(NamedTuple):
    """Axis-aligned bounding box given by its min and max corners."""

    min: Vector3
    max: Vector3

    def size(self) -> Vector3:
        return self.max - self.min

    def center(self) -> Vector3:
        return Vector3(
            (self.min.x + self.max.x) / 2.0,
            (self.min.y + self.max.y) / 2.0,
            (self.min.z + self.max.z) / 2.0,
        )

    def translated(self, offset: Vector3) -> "Box3":
        return Box3(self.min + offset, self.max + offset)

    def corners(self) -> List[Vector3]:
        """All 8 corners of the box."""
        return [
            Vector3(x, y, z)
            for x in (self.min.x, self.max.x)
            for y in (self.min.y, self.max.y)
            for z in (self.min.z, self.max.z)
        ]

    def top_corners(self) -> List[Vector3]:
        """
        The 4 corners of the top face, in order:
        front-left, front-right, back-right, back-left (front is max Z).
        """
        top = self.max.y
        return [
            Vector3(self.min.x, top, self.max.z),
            Vector3(self.max.x, top, self.max.z),
            Vector3(self.max.x, top, self.min.z),
            Vector3(self.min.x, top, self.min.z),
        ]

    def top_center(self) -> Vector3:
        c = self.center()
        return Vector3(c.x, self.max.y, c.z)


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def radians_to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


def midpoint(a: Vector3, b: Vector3) -> Vector3:
    return Vector3((a.x + b.x) / 2.0, (a.y + b.y) / 2.0, (a.z + b.z) / 2.0)


def direction(origin: Vector3, target: Vector3) -> Vector3:
    """
    Unit vector pointing from origin towards target.

    Raises:
        ValueError: If the two points coincide (no direction exists)
    """
    delta = target - origin
    length = delta.length()
    if length <= EPSILON:
        raise ValueError(f"Cannot take direction between coincident points {origin}")
    return delta.scaled(1.0 / length)


def box_from_points(points: Iterable[Vector3]) -> Box3:
    """Smallest box containing every point. Raises ValueError for no points."""
    xs: List[float] = []
    ys: List[float] = []
    zs: List[float] = []
    for p in points:
        xs.append(p.x)
        ys.append(p.y)
        zs.append(p.z)
    if not xs:
        raise ValueError("Cannot build a bounding box from zero points")
    return Box3(Vector3(min(xs), min(ys), min(zs)), Vector3(max(xs), max(ys), max(zs)))


def union(boxes: Iterable[Box3]) -> Box3:
    """Union of boxes. Raises ValueError when given no boxes."""
    result = None
    for box in boxes:
        if result is None:
            result = box
            continue
        result = Box3(
            Vector3(
                min(result.min.x, box.min.x),
                min(result.min.y, box.min.y),
                min(result.min.z, box.min.z),
            ),
            Vector3(
                max(result.max.x, box.max.x),
                max(result.max.y, box.max.y),
                max(result.max.z, box.max.z),
            ),
        )
    if result is None:
        raise ValueError("Cannot take the union of zero boxes")
    return result


def _snap(value: float) -> float:
    # sin/cos of quarter turns leave ~1e-17 residue
    return 0.0 if abs(value) < EPSILON else value


def rotate_y(point: Vector3, angle: float) -> Vector3:
    """Rotate a point about the vertical axis (right-handed, +90° maps +X to -Z)."""
    cos_a = _snap(math.cos(angle))
    sin_a = _snap(math.sin(angle))
    return Vector3(
        point.x * cos_a + point.z * sin_a,
        point.y,
        -point.x * sin_a + point.z * cos_a,
    )


def transform_box(local: Box3, position: Vector3, rotation_y: float, scale: Vector3) -> Box3:
    """
    World-space bounding box of a local box after scale, rotation about Y and
    translation (in that order).
    """
    return box_from_points(
        rotate_y(corner.multiply(scale), rotation_y) + position for corner in local.corners()
    )
