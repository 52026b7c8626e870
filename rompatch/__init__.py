"""RomPatch - verify, apply and remove S-record patches on ROM images."""

from .version import ENGINE_VERSION, __version__

__all__ = ["ENGINE_VERSION", "__version__"]
