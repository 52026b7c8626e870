"""Independent re-verification of a patched ROM.

Runs a fresh read of the patch file and a fresh engine against the working
copy after it has been written and closed, so a write that did not reach the
file is caught before the copy replaces the original ROM.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from ..patching.constants import DEFAULT_CONSTANTS, PatchConstants
from ..patching.patch import Patch
from ..patching.patcher import LogCallback, Patcher
from ..patching.rom_image import RomImage
from ..srecord.io import SRecordReader

logger = logging.getLogger(__name__)


class Verifier:
    """Checks that a ROM now holds a patch's post-state.

    ``applied=True`` expects the patch bytes (after applying);
    ``applied=False`` expects the baseline bytes (after removing).
    """

    def __init__(
        self,
        patch_path: Union[str, Path],
        rom_path: Union[str, Path],
        applied: bool,
        constants: PatchConstants = DEFAULT_CONSTANTS,
        log_cb: Optional[LogCallback] = None,
    ):
        self.patch_path = Path(patch_path)
        self.rom_path = Path(rom_path)
        self.applied = applied
        self.constants = constants
        self.log_cb = log_cb

    def _log(self, message: str) -> None:
        logger.debug(message)
        if self.log_cb is not None:
            self.log_cb(message)

    def verify(self, expected_patches: Optional[Sequence[Patch]] = None) -> bool:
        with SRecordReader(self.patch_path) as reader, RomImage.open(self.rom_path) as rom:
            patcher = Patcher(reader, rom, self.constants, self.log_cb)
            if not patcher.read_patches():
                return False

            if expected_patches is not None and tuple(expected_patches) != patcher.patches:
                self._log("The patch file changed while it was being applied.")
                return False

            # After applying, the patch bytes are what must be present now.
            if self.applied and not patcher.reverse_patches():
                return False

            report = patcher.verify_expected_data()
            if not report.valid:
                logger.warning(
                    "Re-verification of %s failed: %d patches, %d mismatched bytes",
                    self.rom_path, len(report.failed), report.mismatched_bytes,
                )
            return report.valid
