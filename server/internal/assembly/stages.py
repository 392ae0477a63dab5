"""
Placement stages of the building assembly pipeline.

Each stage loads the template for its role through the `load` coroutine it
is given and computes instance transforms from the bounding boxes produced
by the earlier stages. Pipeline order:

    floor -> ground beams -> roof beams -> corner brackets -> roof lodges -> centering

Frame: X = width, Y = up, Z = depth. The floor template spans the unit
square X [0, 1], Z [-1, 0], so before centering the front edge of the
building lies on Z = 0 and the back edge on Z = -depth.
"""

from __future__ import annotations

import logging
import math
from typing import Awaitable, Callable, List, NamedTuple, Sequence

from .config import JoineryMargins
from .errors import DegenerateInputError
from .geometry import ZERO, Box3, Vector3, degrees_to_radians, direction, midpoint, union
from .parts import CORNER_BRACKET, FLOOR, LODGE, POST, ROOF_BEAM, PartInstance, PartTemplate, Transform

logger = logging.getLogger(__name__)

TemplateLoader = Callable[[str], Awaitable[PartTemplate]]

QUARTER_TURN = degrees_to_radians(90.0)
HALF_TURN = degrees_to_radians(180.0)

# Instance counts per stage
GROUND_BEAM_COUNT = 6
ROOF_BEAM_COUNT = 4
CORNER_BRACKET_COUNT = 12
LODGE_COUNT = 4


class Dimensions(NamedTuple):
    width: float
    height: float
    depth: float


class FloorResult(NamedTuple):
    instance: PartInstance
    bbox: Box3


class GroundBeamResult(NamedTuple):
    instances: List[PartInstance]
    post_bbox: Box3
    height_scale: float


class RoofBeamResult(NamedTuple):
    instances: List[PartInstance]
    beam_bbox: Box3


def validate_dimensions(width: float, height: float, depth: float) -> Dimensions:
    """Reject non-positive or non-finite dimensions before any template is loaded."""
    for name, value in (("width", width), ("height", height), ("depth", depth)):
        if value is None or not math.isfinite(value) or value <= 0:
            raise DegenerateInputError(f"Building {name} must be a positive number, got {value!r}")
    return Dimensions(float(width), float(height), float(depth))


def require_extent(template: PartTemplate, axes: str = "xyz") -> Vector3:
    """
    Size of the template's local bounding box, checked to be non-zero and
    finite along every named axis.
    """
    size = template.bbox.size()
    for axis in axes:
        value = getattr(size, axis)
        if not math.isfinite(value) or value <= 0:
            raise DegenerateInputError(
                f"{template.role} template has a degenerate {axis} extent ({value!r})"
            )
    return size


def _require_positive(name: str, value: float) -> float:
    if not math.isfinite(value) or value <= 0:
        raise DegenerateInputError(f"{name} must be positive, got {value!r}")
    return value


def flush_inset(point: Vector3, center: Vector3, inset: float) -> Vector3:
    """Move `point` towards `center` by `inset`, so a part's outer face lands on `point`."""
    return point + direction(point, center).scaled(inset)


async def build_floor(load: TemplateLoader, dims: Dimensions) -> FloorResult:
    """Floor slab: horizontal extents follow the building, thickness stays the template's."""
    template = await load(FLOOR)
    require_extent(template, "xz")

    floor = PartInstance(template, Transform(position=ZERO, scale=Vector3(dims.width, 1.0, dims.depth)))
    logger.debug("Placed floor %s", floor.bbox)
    return FloorResult(floor, floor.bbox)


async def build_ground_beams(load: TemplateLoader, dims: Dimensions, floor_bbox: Box3) -> GroundBeamResult:
    """
    Six vertical posts, three along each depth-parallel edge of the floor.

    The mid-edge posts are inset from the edge midpoints towards the floor
    centre by half a post width; the corner posts are the mid posts shifted
    along depth until their faces are flush with the front and back edges.
    """
    template = await load(POST)
    post_size = require_extent(template)
    post_width, post_height, post_depth = post_size.x, post_size.y, post_size.z
    _require_positive("Gap between left and right posts (width - 2 * post width)", dims.width - 2.0 * post_width)
    _require_positive("Gap between corner and mid posts (depth - 3 * post depth)", dims.depth - 3.0 * post_depth)

    front_left, front_right, back_right, back_left = floor_bbox.top_corners()
    center = floor_bbox.top_center()
    edge_midpoints = (midpoint(front_left, back_left), midpoint(front_right, back_right))

    height_scale = dims.height / post_height
    scale = Vector3(1.0, height_scale, 1.0)
    corner_offset = Vector3(0.0, 0.0, dims.depth / 2.0 - post_depth / 2.0)

    instances: List[PartInstance] = []
    for edge_midpoint in edge_midpoints:
        mid_post = flush_inset(edge_midpoint, center, post_width / 2.0)
        for position in (mid_post + corner_offset, mid_post, mid_post - corner_offset):
            instances.append(PartInstance(template, Transform(position=position, scale=scale)))

    logger.debug("Placed %d ground beams, height scale %.4f", len(instances), height_scale)
    return GroundBeamResult(instances, template.bbox, height_scale)


async def build_roof_beams(load: TemplateLoader, dims: Dimensions, post_bbox: Box3) -> RoofBeamResult:
    """
    Four perimeter beams on top of the posts.

    Front and back beams run the full width; the side beams are turned a
    quarter and span only between the inner faces of the front and back
    beams.
    """
    template = await load(ROOF_BEAM)
    require_extent(template)
    post_size = post_bbox.size()
    post_width, post_depth = post_size.x, post_size.z

    side_length = _require_positive("Side roof beam length (depth - 2 * post depth)", dims.depth - 2.0 * post_depth)

    front = Transform(
        position=Vector3(0.0, dims.height, -post_depth / 2.0),
        scale=Vector3(dims.width, 1.0, 1.0),
    )
    back = front.translated(Vector3(0.0, 0.0, -(dims.depth - post_depth)))
    side = Transform(
        position=front.position + Vector3(post_depth / 2.0, 0.0, -post_width / 2.0),
        rotation_y=QUARTER_TURN,
        scale=Vector3(side_length, 1.0, 1.0),
    )
    opposite_side = side.translated(Vector3(dims.width - post_width, 0.0, 0.0))

    instances = [PartInstance(template, t) for t in (front, back, side, opposite_side)]
    logger.debug("Placed %d roof beams at y=%.3f", len(instances), dims.height)
    return RoofBeamResult(instances, template.bbox)


def corner_bracket_table(dims: Dimensions, post_bbox: Box3) -> List[Transform]:
    """
    Exact bracket placements, two per post.

    Each row is (x, z, rotation in degrees); the bracket arm points along
    local +X, so 0 runs towards +X, 180 towards -X, 90 towards -Z (back) and
    -90 towards +Z (front). Every bracket starts at the face of its post.
    """
    post_size = post_bbox.size()
    half_w = post_size.x / 2.0
    half_d = post_size.z / 2.0

    left = half_w
    right = dims.width - half_w
    front = -half_d
    middle = -dims.depth / 2.0
    back = -dims.depth + half_d

    rows = [
        # front-left post
        (left + half_w, front, 0.0),
        (left, front - half_d, 90.0),
        # front-right post
        (right - half_w, front, 180.0),
        (right, front - half_d, 90.0),
        # mid-left post
        (left, middle + half_d, -90.0),
        (left, middle - half_d, 90.0),
        # mid-right post
        (right, middle + half_d, -90.0),
        (right, middle - half_d, 90.0),
        # back-left post
        (left + half_w, back, 0.0),
        (left, back + half_d, -90.0),
        # back-right post
        (right - half_w, back, 180.0),
        (right, back + half_d, -90.0),
    ]
    return [
        Transform(position=Vector3(x, 0.0, z), rotation_y=degrees_to_radians(angle))
        for x, z, angle in rows
    ]


async def build_corner_beams(
    load: TemplateLoader, dims: Dimensions, post_bbox: Box3, height_scale: float
) -> List[PartInstance]:
    """
    Twelve brackets at the post/beam junctions. Bracket templates are modelled
    in the post's vertical frame, so the post's height scale keeps them tucked
    under the beams.
    """
    template = await load(CORNER_BRACKET)
    require_extent(template)
    _require_positive("Height scale", height_scale)

    scale = Vector3(1.0, height_scale, 1.0)
    instances = [
        PartInstance(template, Transform(position=t.position, rotation_y=t.rotation_y, scale=scale))
        for t in corner_bracket_table(dims, post_bbox)
    ]
    logger.debug("Placed %d corner brackets", len(instances))
    return instances


async def build_roof_lodges(
    load: TemplateLoader, dims: Dimensions, beam_bbox: Box3, margins: JoineryMargins
) -> List[PartInstance]:
    """
    Four lodges forming a closed frame on top of the roof beams, overhanging
    the floor by half the reveal margin on every side.

    The overhang must stay below the lodge thickness so that every lodge
    keeps part of its underside over the beam below it.
    """
    template = await load(LODGE)
    lodge_size = require_extent(template)
    local = template.bbox
    reveal = margins.lodge_reveal
    if not 0.0 <= reveal / 2.0 < lodge_size.z:
        raise DegenerateInputError(
            f"Lodge overhang {reveal / 2.0!r} must be at least 0 and less than the "
            f"lodge thickness {lodge_size.z!r} to rest on the roof beams"
        )
    y = dims.height + beam_bbox.size().y + margins.lodge_vertical_padding

    front_length = dims.width + reveal
    front = PartInstance(
        template,
        Transform(
            position=Vector3(-reveal / 2.0 - local.min.x * front_length, y, reveal / 2.0 - local.max.z),
            scale=Vector3(front_length, 1.0, 1.0),
        ),
    )
    lodge_thickness = front.bbox.size().z
    back = front.with_transform(
        front.transform.translated(Vector3(0.0, 0.0, -(dims.depth + reveal - lodge_thickness)))
    )

    side_length = _require_positive(
        "Side lodge length (depth + reveal - 2 * lodge thickness)",
        dims.depth + reveal - 2.0 * lodge_thickness,
    )
    side = PartInstance(
        template,
        Transform(
            position=Vector3(-reveal / 2.0 - local.min.z, y, front.bbox.min.z + local.min.x * side_length),
            rotation_y=QUARTER_TURN,
            scale=Vector3(side_length, 1.0, 1.0),
        ),
    )
    side_thickness = side.bbox.size().x
    opposite_side = side.with_transform(
        side.transform.translated(Vector3(dims.width + reveal - side_thickness, 0.0, 0.0))
    )

    instances = [front, back, side, opposite_side]
    logger.debug("Placed %d roof lodges at y=%.3f", len(instances), y)
    return instances


def center_instances(instances: Sequence[PartInstance]) -> List[PartInstance]:
    """
    Translate every instance so the union of their boxes is centred on the
    origin. Rotation and scale are left untouched.
    """
    if not instances:
        return []
    offset = -union(inst.bbox for inst in instances).center()
    return [inst.with_transform(inst.transform.translated(offset)) for inst in instances]
