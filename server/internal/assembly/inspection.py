"""
Joint inspection for assembled buildings.
Reports parts whose bounding boxes interpenetrate beyond the joinery tolerance.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

import shapely.geometry as sg
from shapely.ops import unary_union

from .parts import PartInstance


def footprint(instance: PartInstance) -> sg.Polygon:
    """Horizontal (X/Z) footprint of an instance's world box."""
    box = instance.bbox
    return sg.box(box.min.x, box.min.z, box.max.x, box.max.z)


def _shrunk(polygon: sg.Polygon, tolerance: float) -> sg.Polygon:
    minx, miny, maxx, maxy = polygon.bounds
    return sg.box(minx + tolerance, miny + tolerance, maxx - tolerance, maxy - tolerance)


def find_overlaps(instances: Sequence[PartInstance], tolerance: float = 1e-6) -> List[Dict[str, Any]]:
    """
    Find pairs of instances that interpenetrate by more than `tolerance`
    along every axis. Faces that merely touch are not reported.

    Returns:
        List of {"a", "b", "roles", "area", "vertical"} dicts where a/b are
        indices into `instances`, area is the footprint intersection and
        vertical the shared height
    """
    footprints = [_shrunk(footprint(inst), tolerance) for inst in instances]
    overlaps: List[Dict[str, Any]] = []

    for i in range(len(instances)):
        a = instances[i].bbox
        for j in range(i + 1, len(instances)):
            b = instances[j].bbox
            vertical = min(a.max.y, b.max.y) - max(a.min.y, b.min.y)
            if vertical <= tolerance:
                continue
            if not footprints[i].intersects(footprints[j]):
                continue
            area = footprints[i].intersection(footprints[j]).area
            if area <= 0.0:
                continue
            overlaps.append(
                {
                    "a": i,
                    "b": j,
                    "roles": [instances[i].role, instances[j].role],
                    "area": area,
                    "vertical": vertical,
                }
            )
    return overlaps


def describe_overlap(overlap: Dict[str, Any]) -> str:
    role_a, role_b = overlap["roles"]
    return (
        f"{role_a} #{overlap['a']} overlaps {role_b} #{overlap['b']} "
        f"({overlap['area']:.6f} m2 over {overlap['vertical']:.4f} m)"
    )


def support_area(instance: PartInstance, supports: Iterable[PartInstance]) -> float:
    """Plan area of `instance` that lies over any of `supports`."""
    under = unary_union([footprint(support) for support in supports])
    return footprint(instance).intersection(under).area


def find_unsupported(
    instances: Sequence[PartInstance], role: str, support_roles: Sequence[str], tolerance: float = 1e-6
) -> List[int]:
    """Indices of `role` instances whose footprint does not rest on any support role."""
    supports = [inst for inst in instances if inst.role in support_roles]
    return [
        index
        for index, inst in enumerate(instances)
        if inst.role == role and support_area(inst, supports) <= tolerance
    ]
