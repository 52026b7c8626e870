"""Fixed values shared by patch files and the engine."""

from __future__ import annotations

from dataclasses import dataclass

from ..version import ENGINE_VERSION

# Baseline bytes for target address A are stored at A + BASELINE_OFFSET on the wire.
BASELINE_OFFSET = 0xFF000000
METADATA_ADDRESS = 0x80001000
# Smallest blob that can hold a version field plus the start of the next cookie.
METADATA_MIN_LENGTH = 10

REQUIRED_VERSION_COOKIE = 0x12340000
CALIBRATION_ID_COOKIE = 0x12340001
PATCH_COOKIE = 0x12340002
REPLACE_4_BYTES_COOKIE = 0x12340003
END_OF_METADATA_COOKIE = 0x00090009

CALIBRATION_ID_LENGTH = 16


@dataclass(frozen=True)
class PatchConstants:
    """Values the engine is built against.

    Passed into the metadata parser and the patcher so tests can run the
    engine against a synthetic version or address layout.
    """

    engine_version: int = ENGINE_VERSION
    baseline_offset: int = BASELINE_OFFSET
    metadata_address: int = METADATA_ADDRESS
    metadata_min_length: int = METADATA_MIN_LENGTH

    def is_baseline_address(self, address: int) -> bool:
        return address >= self.baseline_offset

    def to_baseline_address(self, address: int) -> int:
        return address + self.baseline_offset

    def from_baseline_address(self, address: int) -> int:
        return address - self.baseline_offset


DEFAULT_CONSTANTS = PatchConstants()
