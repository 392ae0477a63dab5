"""
In-memory asset store serving box templates with the same extents as the
bundled part library.
"""

import sys
from pathlib import Path

# Add server directory to path
server_dir = Path(__file__).parent.parent.parent.parent
sys.path.insert(0, str(server_dir))

from internal.assembly.assets import AssetStore
from internal.assembly.errors import AssetLoadError
from internal.assembly.geometry import Box3, Vector3
from internal.assembly.parts import (
    CORNER_BRACKET,
    FLOOR,
    LODGE,
    POST,
    ROOF_BEAM,
    AssetId,
    Material,
    PartTemplate,
)

TEMPLATE_BOXES = {
    FLOOR: Box3(Vector3(0.0, -0.05, -1.0), Vector3(1.0, 0.0, 0.0)),
    POST: Box3(Vector3(-0.075, 0.0, -0.075), Vector3(0.075, 2.5, 0.075)),
    ROOF_BEAM: Box3(Vector3(0.0, 0.0, -0.075), Vector3(1.0, 0.2, 0.075)),
    CORNER_BRACKET: Box3(Vector3(0.0, 2.0, -0.02), Vector3(0.3, 2.5, 0.02)),
    LODGE: Box3(Vector3(0.0, 0.0, -0.05), Vector3(1.0, 0.1, 0.05)),
}

POST_WIDTH = 0.15
POST_DEPTH = 0.15
POST_HEIGHT = 2.5
FLOOR_THICKNESS = 0.05
ROOF_BEAM_THICKNESS = 0.2
LODGE_THICKNESS = 0.1
LODGE_REVEAL = 0.1


def box_template(role: str, box: Box3) -> PartTemplate:
    return PartTemplate(
        role=role,
        asset_id=AssetId(f"models/{role}.obj", f"models/{role}.mtl"),
        vertices=tuple(box.corners()),
        faces=(),
        materials=(Material(role),),
        bbox=box,
    )


class FakeAssetStore(AssetStore):
    """Serves box templates, records every request, and can fail or hold loads per role."""

    def __init__(self, boxes=None):
        self.templates = {role: box_template(role, box) for role, box in (boxes or TEMPLATE_BOXES).items()}
        self.calls = []
        self.fail_roles = set()
        self.gates = {}

    async def load(self, role, asset_id):
        self.calls.append(role)
        gate = self.gates.get(role)
        if gate is not None:
            await gate.wait()
        if role in self.fail_roles or role not in self.templates:
            raise AssetLoadError(f"cannot resolve {asset_id}", role=role, asset_id=asset_id)
        return self.templates[role]
