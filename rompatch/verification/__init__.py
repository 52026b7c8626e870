"""ROM verification module.

Features:
- Independent post-write verification of patched ROM images
"""

from .verifier import Verifier

__all__ = [
    "Verifier",
]
