#!/usr/bin/env python3
"""
Validate part-library.json and every OBJ/MTL asset it references
"""
import asyncio
import sys
from pathlib import Path

# Add server directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from internal.assembly import config
from internal.assembly.assets import ObjAssetStore, load_part_library
from internal.assembly.errors import AssemblyError
from internal.assembly.parts import ROLES
from internal.assembly.stages import require_extent


def validate_part_library(cfg):
    """Validate the part library file"""
    print(f"Validating {cfg.part_library.name}...")
    try:
        library = load_part_library(cfg.part_library)
    except AssemblyError as e:
        print(f"✗ {e}")
        return None
    print(f"✓ All {len(ROLES)} roles present")
    return library


def validate_assets(cfg, library):
    """Load every template and check its bounding box is usable"""
    print("Validating part assets...")
    store = ObjAssetStore(cfg.asset_root)
    ok = True

    for role in ROLES:
        try:
            template = asyncio.run(store.load(role, library[role]))
            size = require_extent(template)
        except AssemblyError as e:
            print(f"✗ {role}: {e}")
            ok = False
            continue
        if not template.materials:
            print(f"✗ {role}: {library[role].material} defines no materials")
            ok = False
            continue
        print(
            f"✓ {role}: {len(template.vertices)} vertices, "
            f"{size.x:.3f} x {size.y:.3f} x {size.z:.3f} m, material '{template.materials[0].name}'"
        )
    return ok


def main():
    cfg = config.load_config()
    library = validate_part_library(cfg)
    if library is None:
        return 1
    if not validate_assets(cfg, library):
        return 1
    print("\n✓ All part configs are valid")
    return 0


if __name__ == '__main__':
    sys.exit(main())
