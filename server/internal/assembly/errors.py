"""
Errors raised by the assembly pipeline.
"""

from typing import Optional


class AssemblyError(Exception):
    """Base class for every assembly failure."""


class AssetLoadError(AssemblyError):
    """A required part template could not be resolved."""

    def __init__(self, message: str, role: Optional[str] = None, asset_id=None):
        super().__init__(message)
        self.role = role
        self.asset_id = asset_id


class DegenerateInputError(AssemblyError):
    """A dimension or template extent would make the placement formulas degenerate."""


class StaleBuildError(AssemblyError):
    """Raised internally when a newer build request supersedes the running one."""

    def __init__(self, generation: int, current: int):
        super().__init__(f"Build {generation} superseded by build {current}")
        self.generation = generation
        self.current = current
