"""
Shared fixtures for assembly tests.
"""

import asyncio
import sys
from pathlib import Path

# Add server directory to path
server_dir = Path(__file__).parent.parent.parent.parent
sys.path.insert(0, str(server_dir))

import pytest
from fakes import FakeAssetStore
from internal.assembly.assembler import Assembler, BuildContext
from internal.assembly.parts import ROLES, AssetId, Scene


@pytest.fixture
def library():
    return {role: AssetId(f"models/{role}.obj", f"models/{role}.mtl") for role in ROLES}


@pytest.fixture
def store():
    return FakeAssetStore()


@pytest.fixture
def scene():
    return Scene()


@pytest.fixture
def assembler(scene, store, library):
    return Assembler(BuildContext(scene, store, library))


@pytest.fixture
def loader(store, library):
    """Stage-level template loader backed by the fake store."""

    def load(role):
        return store.load(role, library[role])

    return load


@pytest.fixture
def run():
    return asyncio.run
