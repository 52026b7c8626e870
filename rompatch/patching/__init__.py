"""Patch engine module.

Features:
- Patch metadata model (version, calibration change, patch ranges)
- Tagged patch/baseline ranges
- Verify, apply and reverse patches against a ROM image
- Baseline extraction for patch authoring
"""

from .constants import (
    BASELINE_OFFSET,
    DEFAULT_CONSTANTS,
    METADATA_ADDRESS,
    PatchConstants,
)
from .patch import Patch
from .ranges import PatchRange, RangeKind, RangeTable
from .metadata import (
    CalibrationField,
    MetadataField,
    PatchField,
    PatchMetadata,
    ShorthandField,
    TerminatorField,
    VersionField,
    encode_metadata,
    parse_metadata,
)
from .rom_image import RomImage
from .patcher import Patcher, PatchCheck, VerificationReport

__all__ = [
    "BASELINE_OFFSET",
    "DEFAULT_CONSTANTS",
    "METADATA_ADDRESS",
    "PatchConstants",
    "Patch",
    "PatchRange",
    "RangeKind",
    "RangeTable",
    "CalibrationField",
    "MetadataField",
    "PatchField",
    "PatchMetadata",
    "ShorthandField",
    "TerminatorField",
    "VersionField",
    "encode_metadata",
    "parse_metadata",
    "RomImage",
    "Patcher",
    "PatchCheck",
    "VerificationReport",
]
