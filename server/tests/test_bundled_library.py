"""
Integration tests assembling buildings from the bundled OBJ/MTL part library.
"""

import asyncio
import math

import pytest

from internal.assembly import inspection
from internal.assembly.parts import CORNER_BRACKET, FLOOR, LODGE, POST, ROOF_BEAM


def _dimension_grid(cfg):
    """Every corner of the supported range plus a few points in between."""
    lo, hi, step = cfg.min_dimension, cfg.max_dimension, cfg.dimension_step
    values = sorted({lo, lo + step, (lo + hi) / 2.0, hi})
    return [(w, h, d) for w in values for h in values for d in values]


def test_templates_match_bundled_dimensions(asset_store, part_library):
    """Template extents the placement tables were tuned for"""

    async def load(role):
        return await asset_store.load(role, part_library[role])

    post = asyncio.run(load(POST)).bbox.size()
    beam = asyncio.run(load(ROOF_BEAM)).bbox.size()

    assert post.x == pytest.approx(0.15)
    assert post.y == pytest.approx(2.5)
    assert post.z == pytest.approx(0.15)
    assert beam.y == pytest.approx(0.2)
    assert beam.z == pytest.approx(post.z)


def test_bundled_scenario(bundled_assembler, scene):
    building = asyncio.run(bundled_assembler.build(5, 3, 4))

    assert len(building) == 27
    assert len(scene) == 27
    assert [len(building.by_role(r)) for r in (FLOOR, POST, ROOF_BEAM, CORNER_BRACKET, LODGE)] == [1, 6, 4, 12, 4]
    for lodge, beam in zip(building.by_role(LODGE), building.by_role(ROOF_BEAM)):
        assert inspection.support_area(lodge, [beam]) > 0.0
    for c in building.bbox.center():
        assert abs(c) < 1e-9


def test_full_range_is_finite_centred_supported_and_overlap_free(bundled_assembler, service_config):
    tolerance = service_config.joinery.joint_tolerance

    for width, height, depth in _dimension_grid(service_config):
        building = asyncio.run(bundled_assembler.build(width, height, depth))

        for inst in building:
            t = inst.transform
            assert t.position.is_finite()
            assert t.scale.is_finite()
            assert math.isfinite(t.rotation_y)
            assert min(t.scale) > 0

        for c in building.bbox.center():
            assert abs(c) < 1e-9
        overlaps = inspection.find_overlaps(building.instances, tolerance)
        assert overlaps == [], [inspection.describe_overlap(o) for o in overlaps]
        assert inspection.find_unsupported(building.instances, LODGE, (ROOF_BEAM,), tolerance) == []


def test_minimum_building(bundled_assembler, service_config):
    lo = service_config.min_dimension
    building = asyncio.run(bundled_assembler.build(lo, lo, lo))

    posts = building.by_role(POST)
    assert len(posts) == 6
    for post in posts:
        assert post.bbox.size().y == pytest.approx(lo)
