"""
Part templates, placed instances, the Building they form and the Scene
the assembler commits them to.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from .geometry import ONE, ZERO, Box3, Vector3, radians_to_degrees, transform_box, union

# Structural roles, in pipeline emission order
FLOOR = "floor"
POST = "post"
ROOF_BEAM = "roof_beam"
CORNER_BRACKET = "corner_bracket"
LODGE = "lodge"
ROLES = (FLOOR, POST, ROOF_BEAM, CORNER_BRACKET, LODGE)


class AssetId(NamedTuple):
    """Stable (geometry_path, material_path) identifier of one template."""

    geometry: str
    material: str


@dataclass(frozen=True)
class Material:
    name: str
    diffuse: Tuple[float, float, float] = (0.8, 0.8, 0.8)


@dataclass(frozen=True)
class PartTemplate:
    """
    Immutable description of one structural role.

    Geometry is kept as vertex/face tuples in the template's own untransformed
    space; `bbox` is the local axis-aligned box of those vertices. Instances
    share the template and never mutate it.
    """

    role: str
    asset_id: AssetId
    vertices: Tuple[Vector3, ...]
    faces: Tuple[Tuple[int, ...], ...]
    materials: Tuple[Material, ...]
    bbox: Box3


@dataclass(frozen=True)
class Transform:
    position: Vector3 = ZERO
    rotation_y: float = 0.0  # radians
    scale: Vector3 = ONE

    def translated(self, offset: Vector3) -> "Transform":
        return replace(self, position=self.position + offset)


@dataclass(frozen=True)
class PartInstance:
    template: PartTemplate
    transform: Transform
    bbox: Box3 = field(init=False, compare=False)

    def __post_init__(self):
        t = self.transform
        world = transform_box(self.template.bbox, t.position, t.rotation_y, t.scale)
        object.__setattr__(self, "bbox", world)

    @property
    def role(self) -> str:
        return self.template.role

    def with_transform(self, transform: Transform) -> "PartInstance":
        return PartInstance(self.template, transform)

    def to_dict(self) -> Dict[str, Any]:
        t = self.transform
        return {
            "role": self.role,
            "position": list(t.position),
            "rotation_y": radians_to_degrees(t.rotation_y),
            "scale": list(t.scale),
            "bbox": {"min": list(self.bbox.min), "max": list(self.bbox.max)},
        }


class Building:
    """Ordered part instances plus their aggregate bounding box."""

    def __init__(self, instances: Optional[Iterable[PartInstance]] = None):
        self._instances: List[PartInstance] = list(instances or [])

    @property
    def instances(self) -> List[PartInstance]:
        return list(self._instances)

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self):
        return iter(self._instances)

    def add(self, instances: Iterable[PartInstance]) -> None:
        self._instances.extend(instances)

    def by_role(self, role: str) -> List[PartInstance]:
        return [inst for inst in self._instances if inst.role == role]

    @property
    def bbox(self) -> Box3:
        """Union of every instance box, recomputed on each access."""
        return union(inst.bbox for inst in self._instances)

    def to_dict(self) -> Dict[str, Any]:
        box = self.bbox
        return {
            "instance_count": len(self._instances),
            "bbox": {
                "min": list(box.min),
                "max": list(box.max),
                "size": list(box.size()),
                "center": list(box.center()),
            },
            "instances": [inst.to_dict() for inst in self._instances],
        }


class Scene:
    """Caller-owned container the assembler inserts instances into."""

    def __init__(self):
        self._objects: List[PartInstance] = []

    @property
    def objects(self) -> List[PartInstance]:
        return list(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, instance: object) -> bool:
        return any(obj is instance for obj in self._objects)

    def add(self, instance: PartInstance) -> None:
        self._objects.append(instance)

    def remove(self, instance: PartInstance) -> None:
        """Remove this exact instance. Raises ValueError if it is not in the scene."""
        for index, obj in enumerate(self._objects):
            if obj is instance:
                del self._objects[index]
                return
        raise ValueError("Instance is not part of this scene")

    def remove_many(self, instances: Iterable[PartInstance]) -> None:
        """Remove every given instance that is in the scene, in one pass."""
        doomed = {id(instance) for instance in instances}
        self._objects = [obj for obj in self._objects if id(obj) not in doomed]

    def clear(self) -> None:
        self._objects.clear()
