"""Version utilities for RomPatch."""

from __future__ import annotations

from importlib import metadata

__version__ = "1.0.0"

# Patch files embed the engine version they were built for; it must match exactly.
ENGINE_VERSION = 5


def load_version() -> str:
    try:
        return metadata.version("rompatch")
    except metadata.PackageNotFoundError:
        return __version__
