"""
Building Assembly Service
Main entry point for the Python building assembly service.
"""

import logging
import math
import os
import sys
from pathlib import Path

# Add server directory to path for imports
server_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(server_dir))

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List
import uvicorn

from internal.assembly import config
from internal.assembly import inspection
from internal.assembly.assembler import Assembler, BuildContext
from internal.assembly.assets import ObjAssetStore, load_part_library
from internal.assembly.errors import AssetLoadError, DegenerateInputError
from internal.assembly.parts import LODGE, ROOF_BEAM, Scene

load_dotenv()

SERVICE_NAME = "building-assembly-service"
SERVICE_VERSION = "0.1.0"

# Load configuration
cfg = config.load_config()

logging.basicConfig(
    level=cfg.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Building Assembly Service",
    description="Service for assembling timber-frame buildings from part templates",
    version=SERVICE_VERSION,
)

# CORS middleware (allow the viewer client to call this service)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to the client URL
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def create_assembler(service_config: config.Config) -> Assembler:
    """Build an assembler bound to a fresh scene and the configured part library."""
    context = BuildContext(
        scene=Scene(),
        store=ObjAssetStore(service_config.asset_root),
        library=load_part_library(service_config.part_library),
        margins=service_config.joinery,
        concurrent_loads=service_config.concurrent_loads,
    )
    return Assembler(context)


assembler = create_assembler(cfg)


def _dimension_field(name: str):
    return Field(
        default=cfg.default_dimension,
        ge=cfg.min_dimension,
        le=cfg.max_dimension,
        description=f"Building {name} in meters",
    )


class HealthResponse(BaseModel):
    """Health check response"""

    status: str
    service: str
    version: str


class DimensionLimits(BaseModel):
    """Supported building dimension range"""

    min: float
    max: float
    step: float
    default: float


class BuildRequest(BaseModel):
    """Request to assemble a building"""

    width: float = _dimension_field("width")
    height: float = _dimension_field("height")
    depth: float = _dimension_field("depth")

    @field_validator("width", "height", "depth")
    @classmethod
    def check_step(cls, value: float) -> float:
        steps = (value - cfg.min_dimension) / cfg.dimension_step
        if not math.isclose(steps, round(steps), abs_tol=1e-6):
            raise ValueError(f"must be a multiple of {cfg.dimension_step} from {cfg.min_dimension}")
        return value


class BoundingBox(BaseModel):
    min: List[float]
    max: List[float]


class BuildingBox(BoundingBox):
    size: List[float]
    center: List[float]


class PartPlacement(BaseModel):
    """One placed part"""

    role: str
    position: List[float]
    rotation_y: float = Field(..., description="Rotation about the vertical axis in degrees")
    scale: List[float]
    bbox: BoundingBox


class BuildResponse(BaseModel):
    """Response from building assembly"""

    success: bool
    instance_count: int
    bbox: BuildingBox
    instances: List[PartPlacement]
    warnings: List[str] = []


class PartAsset(BaseModel):
    geometry: str
    material: str


def _building_response(building, tolerance: float) -> BuildResponse:
    warnings = [
        inspection.describe_overlap(overlap)
        for overlap in inspection.find_overlaps(building.instances, tolerance)
    ]
    warnings.extend(
        f"lodge #{index} does not rest on a roof beam"
        for index in inspection.find_unsupported(building.instances, LODGE, (ROOF_BEAM,), tolerance)
    )
    for warning in warnings:
        logger.warning("Joint check: %s", warning)
    return BuildResponse(success=True, warnings=warnings, **building.to_dict())


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(status="ok", service=SERVICE_NAME, version=SERVICE_VERSION)


@app.get("/api/v1/parts", response_model=Dict[str, PartAsset])
async def list_parts():
    """Part library: structural role -> (geometry, material) asset paths"""
    return {
        role: PartAsset(geometry=asset_id.geometry, material=asset_id.material)
        for role, asset_id in assembler.context.library.items()
    }


@app.get("/api/v1/buildings/limits", response_model=DimensionLimits)
async def get_limits():
    return DimensionLimits(
        min=cfg.min_dimension,
        max=cfg.max_dimension,
        step=cfg.dimension_step,
        default=cfg.default_dimension,
    )


@app.post("/api/v1/buildings/build", response_model=BuildResponse)
async def build_building(request: BuildRequest):
    """
    Assemble a building for the requested dimensions.

    The result replaces the building currently held by the service's scene.
    """
    try:
        building = await assembler.build(request.width, request.height, request.depth)
    except DegenerateInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AssetLoadError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load part templates: {e}")

    if building is None:
        raise HTTPException(status_code=409, detail="Build superseded by a newer request")

    return _building_response(building, assembler.context.margins.joint_tolerance)


@app.get("/api/v1/buildings/current", response_model=BuildResponse)
async def get_current_building():
    """The building currently in the scene"""
    if assembler.building is None:
        raise HTTPException(status_code=404, detail="No building has been assembled yet")
    return _building_response(assembler.building, assembler.context.margins.joint_tolerance)


if __name__ == "__main__":
    port = int(os.getenv("ASSEMBLY_SERVICE_PORT", "8082"))
    host = os.getenv("ASSEMBLY_SERVICE_HOST", "0.0.0.0")

    uvicorn.run(
        "main:app", host=host, port=port, reload=cfg.environment == "development"
    )
