"""
Configuration management for the building assembly service.
"""

import os
from pathlib import Path

# __file__ = server/internal/assembly/config.py
# config lives at server/config
_SERVER_DIR = Path(__file__).resolve().parents[2]
DEFAULT_ASSET_ROOT = _SERVER_DIR / "config"
DEFAULT_PART_LIBRARY = DEFAULT_ASSET_ROOT / "part-library.json"


class JoineryMargins:
    """
    Hand-tuned joinery offsets used by the placement stages.

    lodge_reveal: total overhang of the lodge frame beyond the floor along each
        horizontal axis (half of it on each side). Half the reveal must stay
        below the lodge thickness or the lodges miss the roof beams.
    lodge_vertical_padding: gap between the top of the roof beams and the
        underside of the lodges.
    joint_tolerance: interpenetration allowed between two parts before
        inspection reports the joint as an overlap.
    """

    def __init__(
        self,
        lodge_reveal: float = 0.1,
        lodge_vertical_padding: float = 0.0,
        joint_tolerance: float = 1e-6,
    ):
        self.lodge_reveal = lodge_reveal
        self.lodge_vertical_padding = lodge_vertical_padding
        self.joint_tolerance = joint_tolerance

    @classmethod
    def from_env(cls) -> "JoineryMargins":
        return cls(
            lodge_reveal=float(os.getenv("LODGE_REVEAL", "0.1")),
            lodge_vertical_padding=float(os.getenv("LODGE_VERTICAL_PADDING", "0.0")),
            joint_tolerance=float(os.getenv("JOINT_TOLERANCE", "1e-6")),
        )


class Config:
    """Configuration for the building assembly service"""

    def __init__(self):
        # Server configuration
        self.host = os.getenv("ASSEMBLY_SERVICE_HOST", "0.0.0.0")
        self.port = int(os.getenv("ASSEMBLY_SERVICE_PORT", "8082"))
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Part library configuration
        self.part_library = Path(os.getenv("PART_LIBRARY", str(DEFAULT_PART_LIBRARY)))
        self.asset_root = Path(os.getenv("ASSET_ROOT", str(DEFAULT_ASSET_ROOT)))

        # Building dimension limits (meters), enforced by the caller
        self.min_dimension = float(os.getenv("MIN_BUILDING_DIMENSION", "2.0"))
        self.max_dimension = float(os.getenv("MAX_BUILDING_DIMENSION", "20.0"))
        self.dimension_step = float(os.getenv("BUILDING_DIMENSION_STEP", "0.5"))
        self.default_dimension = float(
            os.getenv("DEFAULT_BUILDING_DIMENSION", str(self.min_dimension))
        )

        # Performance configuration
        self.concurrent_loads = os.getenv("CONCURRENT_LOADS", "false").lower() == "true"

        self.joinery = JoineryMargins.from_env()


def load_config() -> Config:
    """Load configuration from environment variables"""
    return Config()
