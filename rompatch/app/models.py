from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from ..patching.patch import Patch
from ..srecord.blobs import Blob

LogCallback = Callable[[str], None]


class PatchMode(Enum):
    """What to do with a patch and a ROM."""

    TEST = "test"
    APPLY = "apply"
    APPLIED = "applied"
    REMOVE = "remove"

    @property
    def forward(self) -> bool:
        """True when the patch goes onto the ROM, False when it comes off."""
        return self in (PatchMode.TEST, PatchMode.APPLY)

    @property
    def commit(self) -> bool:
        """True when the ROM file is modified."""
        return self in (PatchMode.APPLY, PatchMode.REMOVE)


@dataclass(frozen=True)
class PatchRunReport:
    mode: PatchMode
    patch_path: str
    rom_path: str
    success: bool
    committed: bool = False
    initial_calibration_id: Optional[str] = None
    final_calibration_id: Optional[str] = None
    patches: Tuple[Patch, ...] = ()
    messages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DumpReport:
    patch_path: str
    success: bool
    records: int = 0
    invalid_records: int = 0
    blobs: Tuple[Blob, ...] = ()


@dataclass(frozen=True)
class BaselineReport:
    patch_path: str
    rom_path: str
    success: bool
    patches: Tuple[Patch, ...] = ()
