"""Patch engine - verifies, applies and reverses S-record patches on a ROM.

Works in four steps, each returning success and reporting through ``log_cb``:

- read_patches: decode the patch file, aggregate blobs, parse the metadata
- reverse_patches: swap patch/baseline roles so removal runs like application
- verify_expected_data: compare the baseline bytes with the ROM
- apply_patches: write the patch bytes into the ROM
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, TextIO, Tuple

from ..exceptions import (
    CoverageError,
    ImageIOError,
    MetadataError,
    MissingMetadataError,
    RecordDecodeError,
)
from ..srecord.blobs import Blob, BlobList
from ..srecord.io import SRecordReader, SRecordWriter
from ..srecord.record import DEFAULT_MAX_DATA_LENGTH
from .constants import DEFAULT_CONSTANTS, PatchConstants
from .metadata import PatchMetadata, parse_metadata
from .patch import Patch
from .ranges import RangeKind, RangeTable
from .rom_image import RomImage

logger = logging.getLogger(__name__)

LogCallback = Callable[[str], None]


@dataclass(frozen=True)
class PatchCheck:
    """Outcome of comparing one patch's expected bytes with the ROM."""

    patch: Patch
    valid: bool
    mismatches: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class VerificationReport:
    checks: Tuple[PatchCheck, ...]

    @property
    def valid(self) -> bool:
        return bool(self.checks) and all(check.valid for check in self.checks)

    @property
    def mismatched_bytes(self) -> int:
        return sum(check.mismatches for check in self.checks)

    @property
    def failed(self) -> Tuple[PatchCheck, ...]:
        return tuple(check for check in self.checks if not check.valid)


def find_metadata_content(blobs: Tuple[Blob, ...],
                          constants: PatchConstants = DEFAULT_CONSTANTS) -> bytes:
    """Bytes of the blob holding the metadata, starting at the metadata address."""
    address = constants.metadata_address
    for blob in blobs:
        if blob.contains(address, constants.metadata_min_length):
            return blob.content[address - blob.start_address:]
    raise MissingMetadataError("This patch file does not contain metadata.", address)


class Patcher:
    """Applies a series of patches to a ROM."""

    def __init__(
        self,
        reader: SRecordReader,
        rom: RomImage,
        constants: PatchConstants = DEFAULT_CONSTANTS,
        log_cb: Optional[LogCallback] = None,
    ):
        self.reader = reader
        self.rom = rom
        self.constants = constants
        self.log_cb = log_cb
        self.blobs: Tuple[Blob, ...] = ()
        self.ranges = RangeTable()
        self.metadata: Optional[PatchMetadata] = None

    @property
    def patches(self) -> Tuple[Patch, ...]:
        return self.metadata.patches if self.metadata else ()

    @property
    def initial_calibration_id(self) -> str:
        return self.metadata.initial_calibration_id if self.metadata else ""

    @property
    def final_calibration_id(self) -> str:
        return self.metadata.final_calibration_id if self.metadata else ""

    def _log(self, message: str) -> None:
        logger.debug(message)
        if self.log_cb is not None:
            self.log_cb(message)

    # -------------------------------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------------------------------

    def read_patches(self) -> bool:
        """Read the patch file and its metadata (patch ranges, calibration ids)."""
        try:
            blobs = self._read_blobs()
            metadata = parse_metadata(self._metadata_content(blobs), self.constants)
        except RecordDecodeError as exc:
            self._log("The patch file contains garbage - was it corrupted somehow?")
            self._log(f"Line {exc.line_number}: {exc.raw_data}")
            logger.debug("Record rejected: %s", exc)
            return False
        except MetadataError as exc:
            self._log(str(exc))
            return False
        except OSError as exc:
            self._log(f"Unable to read patch file {self.reader.path}: {exc}")
            return False

        ranges = RangeTable.from_blobs(blobs, self.constants)
        # Aggregated blobs come first, so they win lookups over synthesized ranges.
        ranges.extend(metadata.synthesized_ranges)

        self.blobs = blobs
        self.metadata = metadata
        self.ranges = ranges
        logger.debug("Read %d patches from %d blobs", len(metadata.patches), len(blobs))
        return True

    def _read_blobs(self) -> Tuple[Blob, ...]:
        blob_list = BlobList()
        for record in self.reader.records():
            if not record.is_valid:
                raise RecordDecodeError(
                    f"Invalid record: {record.reason}", record.line_number, record.raw_data
                )
            blob_list.process_record(record)
        return blob_list.blobs

    def _metadata_content(self, blobs: Tuple[Blob, ...]) -> bytes:
        return find_metadata_content(blobs, self.constants)

    def describe_patches(self) -> List[str]:
        return [str(patch) for patch in self.patches]

    # -------------------------------------------------------------------------------------------------
    # Direction
    # -------------------------------------------------------------------------------------------------

    def reverse_patches(self) -> bool:
        """Swap patch and baseline ranges so the patch can be removed."""
        try:
            self.ranges = self.ranges.reversed_for(self.patches)
        except CoverageError as exc:
            self._log(str(exc))
            return False
        return True

    # -------------------------------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------------------------------

    def verify_expected_data(self) -> VerificationReport:
        """Check whether the data the patch will overwrite matches the ROM.

        Every patch is checked, even after a failure, so the report lists all
        problems at once.
        """
        self._log("Validating patches...")
        return VerificationReport(tuple(self._check_patch(patch) for patch in self.patches))

    def _check_patch(self, patch: Patch) -> PatchCheck:
        try:
            expected = self.ranges.require(RangeKind.BASELINE, patch)
            actual = self.rom.read(patch.start_address, patch.length)
        except (CoverageError, ImageIOError) as exc:
            self._log(f"{patch} - Failed.")
            self._log(str(exc))
            return PatchCheck(patch, False, error=str(exc))

        expected_bytes = expected.slice(patch.start_address, patch.length)
        mismatches = sum(1 for have, want in zip(actual, expected_bytes) if have != want)
        if mismatches == 0:
            self._log(f"{patch} - Valid.")
            return PatchCheck(patch, True)

        self._log(f"{patch} - Invalid.")
        self._log(f"{mismatches} bytes (of {patch.length}) do not meet expectations.")
        return PatchCheck(patch, False, mismatches)

    # -------------------------------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------------------------------

    def apply_patches(self) -> bool:
        """Write every patch into the ROM, stopping at the first failure.

        Writes made before the failing patch stay in place; callers work on a
        copy of the ROM and discard it.
        """
        for patch in self.patches:
            if not self._apply_patch(patch):
                return False
        self.rom.flush()
        return True

    def _apply_patch(self, patch: Patch) -> bool:
        source = self.ranges.find(RangeKind.PATCH, patch.start_address, patch.length)
        if source is None:
            partial = self.ranges.find_start(RangeKind.PATCH, patch.start_address)
            if partial is None:
                self._log(f"No patch data found for patch starting at {patch.start_address:08X}")
                return False
            shortfall = (patch.end_address + 1) - partial.next_address
            self._log(
                f"Patch data for patch starting at {patch.start_address:08X} "
                f"does not contain the entire patch ({shortfall} bytes short)."
            )
            self._log(
                f"Patch start {patch.start_address:08X}, end {patch.end_address:08X}, "
                f"length {patch.length:08X}"
            )
            self._log(
                f"Data  start {partial.start_address:08X}, end {partial.end_address:08X}, "
                f"length {len(partial.content):08X}"
            )
            return False

        try:
            self.rom.write(patch.start_address, source.slice(patch.start_address, patch.length))
        except (ImageIOError, OSError) as exc:
            self._log(f"Unable to write patch starting at {patch.start_address:08X}: {exc}")
            return False
        return True

    # -------------------------------------------------------------------------------------------------
    # Baselines
    # -------------------------------------------------------------------------------------------------

    def extract_baselines(self, out: TextIO,
                          max_data_length: int = DEFAULT_MAX_DATA_LENGTH) -> bool:
        """Write the ROM's current bytes for each patch as baseline S-records.

        The output can be appended to the patch file as its baseline data.
        """
        writer = SRecordWriter(out, max_data_length)
        result = True
        for patch in self.patches:
            if self.constants.to_baseline_address(patch.end_address) > 0xFFFFFFFF:
                self._log(
                    f"Patch starting at {patch.start_address:08X} cannot carry baseline data "
                    "(address too high)."
                )
                result = False
                continue
            try:
                data = self.rom.read(patch.start_address, patch.length)
            except ImageIOError as exc:
                self._log(str(exc))
                result = False
                continue
            writer.write(self.constants.to_baseline_address(patch.start_address), data)
        return result
