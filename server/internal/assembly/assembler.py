"""
Building assembler.

Runs the placement stages in order for one (width, height, depth) request
and commits the finished Building to the caller's scene. A generation
counter makes sure a build that is overtaken by a newer request while its
templates are still loading never reaches the scene.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from . import stages
from .assets import AssetStore
from .config import JoineryMargins
from .errors import AssetLoadError, StaleBuildError
from .parts import ROLES, AssetId, Building, PartTemplate, Scene

logger = logging.getLogger(__name__)


class BuildContext:
    """Everything one assembler works against: its scene, asset store and part library."""

    def __init__(
        self,
        scene: Scene,
        store: AssetStore,
        library: Dict[str, AssetId],
        margins: Optional[JoineryMargins] = None,
        concurrent_loads: bool = False,
    ):
        self.scene = scene
        self.store = store
        self.library = dict(library)
        self.margins = margins or JoineryMargins()
        self.concurrent_loads = concurrent_loads


class Assembler:
    def __init__(self, context: BuildContext):
        self.context = context
        self.building: Optional[Building] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def build(self, width: float, height: float, depth: float) -> Optional[Building]:
        """
        Assemble a building and replace the one currently in the scene.

        Returns:
            The committed Building, or None if a newer build request
            superseded this one before it finished

        Raises:
            DegenerateInputError: A dimension or template extent is unusable
            AssetLoadError: A template could not be loaded; the scene is left as it was
        """
        dims = stages.validate_dimensions(width, height, depth)

        self._generation += 1
        generation = self._generation
        logger.debug("Build %d started for %s", generation, dims)

        try:
            building = await self._assemble(dims, generation)
            self._check_current(generation)
        except StaleBuildError as e:
            logger.debug("Discarding build: %s", e)
            return None
        except AssetLoadError:
            if generation != self._generation:
                logger.debug("Ignoring load failure of superseded build %d", generation)
                return None
            raise

        self._commit(building)
        logger.info(
            "Assembled building %.2f x %.2f x %.2f with %d parts",
            dims.width,
            dims.height,
            dims.depth,
            len(building),
        )
        return building

    def _check_current(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleBuildError(generation, self._generation)

    async def _assemble(self, dims: stages.Dimensions, generation: int) -> Building:
        ctx = self.context
        templates: Dict[str, PartTemplate] = {}

        if ctx.concurrent_loads:
            roles = list(ROLES)
            loaded = await asyncio.gather(*(self._resolve(role) for role in roles))
            templates.update(zip(roles, loaded))
            self._check_current(generation)

        async def load(role: str) -> PartTemplate:
            if role not in templates:
                templates[role] = await self._resolve(role)
            self._check_current(generation)
            return templates[role]

        building = Building()

        floor = await stages.build_floor(load, dims)
        building.add([floor.instance])

        ground = await stages.build_ground_beams(load, dims, floor.bbox)
        building.add(ground.instances)

        roof = await stages.build_roof_beams(load, dims, ground.post_bbox)
        building.add(roof.instances)

        building.add(await stages.build_corner_beams(load, dims, ground.post_bbox, ground.height_scale))
        building.add(await stages.build_roof_lodges(load, dims, roof.beam_bbox, ctx.margins))

        return Building(stages.center_instances(building.instances))

    async def _resolve(self, role: str) -> PartTemplate:
        asset_id = self.context.library.get(role)
        if asset_id is None:
            raise AssetLoadError(f"No asset registered for role '{role}'", role=role)
        return await self.context.store.load(role, asset_id)

    def _commit(self, building: Building) -> None:
        scene = self.context.scene
        if self.building is not None:
            scene.remove_many(self.building)
        for instance in building:
            scene.add(instance)
        self.building = building
