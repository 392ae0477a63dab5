"""
Part library loader and asset stores.

The part library maps each structural role to one (geometry, material)
identifier pair. Asset stores resolve an identifier to an immutable
PartTemplate; the filesystem store loads Wavefront OBJ geometry and MTL
materials through trimesh.
"""

from __future__ import annotations

import abc
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import trimesh
from trimesh.exchange.obj import parse_mtl

from .errors import AssetLoadError
from .geometry import Box3, Vector3
from .parts import ROLES, AssetId, Material, PartTemplate

logger = logging.getLogger(__name__)

DEFAULT_DIFFUSE = (0.8, 0.8, 0.8)

_LIB_CACHE: Dict[str, Dict[str, Any]] = {}


def load_part_library(path: Path) -> Dict[str, AssetId]:
    """
    Load and cache the role -> AssetId mapping from a part library JSON file.

    Raises:
        AssetLoadError: If the file is missing, invalid, or lacks a role
    """
    key = str(Path(path).resolve())
    if key not in _LIB_CACHE:
        if not Path(path).exists():
            raise AssetLoadError(f"Part library not found: {path}")
        try:
            with Path(path).open("r", encoding="utf-8") as f:
                _LIB_CACHE[key] = json.load(f)
        except json.JSONDecodeError as e:
            raise AssetLoadError(f"Invalid part library {path}: {e}") from e

    parts = _LIB_CACHE[key].get("parts", {})
    library: Dict[str, AssetId] = {}
    for role in ROLES:
        entry = parts.get(role)
        if not entry or "geometry" not in entry or "material" not in entry:
            raise AssetLoadError(f"Part library {path} has no entry for role '{role}'", role=role)
        library[role] = AssetId(entry["geometry"], entry["material"])
    return library


def clear_library_cache() -> None:
    _LIB_CACHE.clear()


class AssetStore(abc.ABC):
    """Resolves part identifiers to templates."""

    @abc.abstractmethod
    async def load(self, role: str, asset_id: AssetId) -> PartTemplate:
        """Return the template for asset_id, or raise AssetLoadError."""


def read_materials(path: Path) -> Tuple[Material, ...]:
    """Material names and diffuse colours (Kd) from an MTL file."""
    parsed = parse_mtl(path.read_text(encoding="utf-8"))
    materials = []
    for name, properties in parsed.items():
        diffuse = properties.get("diffuse", DEFAULT_DIFFUSE)
        if not isinstance(diffuse, (list, tuple)):
            diffuse = [diffuse] * 3
        materials.append(Material(name, tuple(float(c) for c in diffuse[:3])))
    return tuple(materials)


def read_mesh(path: Path) -> trimesh.Trimesh:
    """Load OBJ geometry as a single triangle mesh."""
    if not path.is_file():
        raise FileNotFoundError(f"Geometry not found: {path}")
    mesh = trimesh.load(str(path), force="mesh")
    if not isinstance(mesh, trimesh.Trimesh) or len(mesh.vertices) == 0:
        raise ValueError("geometry has no vertices")
    return mesh


class ObjAssetStore(AssetStore):
    """
    Loads OBJ/MTL pairs relative to a root directory.

    Files are read off the event loop; parsed templates are cached per
    identifier so repeated builds reuse the same immutable template.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cache: Dict[AssetId, PartTemplate] = {}

    async def load(self, role: str, asset_id: AssetId) -> PartTemplate:
        cached = self._cache.get(asset_id)
        if cached is not None:
            return cached

        logger.debug("Loading %s template from %s", role, asset_id.geometry)
        try:
            template = await asyncio.to_thread(self._read_template, role, asset_id)
        except (OSError, ValueError, IndexError) as e:
            logger.error("Failed to load %s template %s: %s", role, asset_id, e)
            raise AssetLoadError(
                f"Failed to load {role} template {asset_id.geometry}: {e}",
                role=role,
                asset_id=asset_id,
            ) from e

        self._cache[asset_id] = template
        return template

    def _read_template(self, role: str, asset_id: AssetId) -> PartTemplate:
        mesh = read_mesh(self.root / asset_id.geometry)
        materials = read_materials(self.root / asset_id.material)
        lower, upper = mesh.bounds

        return PartTemplate(
            role=role,
            asset_id=asset_id,
            vertices=tuple(Vector3(*(float(c) for c in v)) for v in mesh.vertices),
            faces=tuple(tuple(int(i) for i in face) for face in mesh.faces),
            materials=materials,
            bbox=Box3(Vector3(*(float(c) for c in lower)), Vector3(*(float(c) for c in upper))),
        )
