"""
Pytest configuration and fixtures for assembly integration tests.
"""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Add server directory to path
server_dir = Path(__file__).parent.parent
sys.path.insert(0, str(server_dir))

from internal.assembly import config
from internal.assembly.assembler import Assembler, BuildContext
from internal.assembly.assets import ObjAssetStore, load_part_library
from internal.assembly.parts import Scene

# Try multiple paths for .env file
env_paths = [
    Path(".env"),  # Current directory
    server_dir / ".env",  # server/.env
    server_dir.parent / ".env",  # project root .env
]

for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path, override=False)
        break


@pytest.fixture(scope="session")
def service_config():
    """Service configuration, honouring TEST_* overrides for the part library."""
    cfg = config.load_config()
    cfg.part_library = Path(os.getenv("TEST_PART_LIBRARY", str(config.DEFAULT_PART_LIBRARY)))
    cfg.asset_root = Path(os.getenv("TEST_ASSET_ROOT", str(config.DEFAULT_ASSET_ROOT)))
    return cfg


@pytest.fixture(scope="session")
def part_library(service_config):
    return load_part_library(service_config.part_library)


@pytest.fixture(scope="session")
def asset_store(service_config):
    """One store for the whole session so templates are parsed once."""
    return ObjAssetStore(service_config.asset_root)


@pytest.fixture
def scene():
    return Scene()


@pytest.fixture
def bundled_assembler(scene, asset_store, part_library, service_config):
    """Assembler wired to the OBJ/MTL templates shipped in server/config."""
    context = BuildContext(
        scene=scene,
        store=asset_store,
        library=part_library,
        margins=service_config.joinery,
    )
    return Assembler(context)
