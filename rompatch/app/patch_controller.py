"""Patch commands: dump, test, apply, applied, remove and baseline.

Modifying commands never touch the ROM directly. They work on a copy,
re-verify the copy with a fresh engine and only then replace the ROM.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

from ..config.models import SRecordConfig, WorkflowConfig
from ..exceptions import ImageIOError, MetadataError
from ..patching.constants import DEFAULT_CONSTANTS, PatchConstants
from ..patching.metadata import parse_metadata
from ..patching.patcher import Patcher, find_metadata_content
from ..patching.rom_image import RomImage
from ..srecord.blobs import BlobList
from ..srecord.io import SRecordReader
from ..verification.verifier import Verifier
from .execute_helpers import atomic_copy, create_working_copy, discard_working_copy
from .models import BaselineReport, DumpReport, LogCallback, PatchMode, PatchRunReport

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class _Messages:
    """Collects user-facing messages and forwards them to ``log_cb``."""

    def __init__(self, log_cb: Optional[LogCallback]):
        self.log_cb = log_cb
        self.lines: List[str] = []

    def __call__(self, message: str) -> None:
        self.lines.append(message)
        if self.log_cb is not None:
            self.log_cb(message)


def working_copy_path(rom_path: PathLike, suffix: str = ".temp") -> Path:
    rom = Path(rom_path)
    return rom.with_name(rom.name + suffix)


def run_patch(
    patch_path: PathLike,
    rom_path: PathLike,
    mode: PatchMode,
    *,
    constants: PatchConstants = DEFAULT_CONSTANTS,
    settings: Optional[WorkflowConfig] = None,
    log_cb: Optional[LogCallback] = None,
) -> PatchRunReport:
    """Check a patch against a ROM and, for APPLY/REMOVE, commit the change."""
    settings = settings or WorkflowConfig()
    emit = _Messages(log_cb)
    patch_file = Path(patch_path)
    rom_file = Path(rom_path)
    working = working_copy_path(rom_file, settings.working_suffix)

    patcher: Optional[Patcher] = None
    success = False
    committed = False

    try:
        image_path = create_working_copy(rom_file, working) if mode.commit else rom_file

        with SRecordReader(patch_file) as reader, RomImage.open(image_path, writable=mode.commit) as rom:
            patcher = Patcher(reader, rom, constants, emit)
            success = _check(patcher, mode, emit)
            if success and mode.commit:
                success = _write(patcher, mode, emit)

        if success and mode.commit:
            committed = _commit(patcher, patch_file, working, rom_file, mode, constants, emit)
            success = committed

    except (ImageIOError, OSError) as exc:
        logger.error("Patch %s on %s failed: %s", mode.value, rom_file, exc)
        emit(f"Error: {exc}")
        success = False
    finally:
        if mode.commit:
            discard_working_copy(working)

    return PatchRunReport(
        mode=mode,
        patch_path=str(patch_file),
        rom_path=str(rom_file),
        success=success,
        committed=committed,
        initial_calibration_id=patcher.initial_calibration_id if patcher and patcher.metadata else None,
        final_calibration_id=patcher.final_calibration_id if patcher and patcher.metadata else None,
        patches=patcher.patches if patcher else (),
        messages=tuple(emit.lines),
    )


def _check(patcher: Patcher, mode: PatchMode, emit: LogCallback) -> bool:
    if not patcher.read_patches():
        return False

    emit(f"This patch file was intended for: {patcher.initial_calibration_id}.")
    emit(f"This patch file converts ROM to:  {patcher.final_calibration_id}.")

    if not mode.forward:
        emit("Preparing to remove patch.")
        if not patcher.reverse_patches():
            return False

    report = patcher.verify_expected_data()
    if not report.valid:
        if mode.forward:
            emit("This patch file can NOT be applied to this ROM file.")
        else:
            emit("This patch file was NOT previously applied to this ROM file.")
        return False

    if mode.forward:
        emit("This patch file can be applied to this ROM file.")
    else:
        emit("This patch file was previously applied to this ROM file.")
    return True


def _write(patcher: Patcher, mode: PatchMode, emit: LogCallback) -> bool:
    emit("Applying patch." if mode.forward else "Removing patch.")
    if not patcher.apply_patches():
        emit("The ROM file has not been modified.")
        return False
    return True


def _commit(
    patcher: Patcher,
    patch_file: Path,
    working: Path,
    rom_file: Path,
    mode: PatchMode,
    constants: PatchConstants,
    emit: LogCallback,
) -> bool:
    emit("Verifying patch.")
    verifier = Verifier(patch_file, working, applied=mode.forward, constants=constants, log_cb=emit)
    if not verifier.verify(patcher.patches):
        emit("Verification failed, ROM file not modified.")
        return False

    atomic_copy(working, rom_file)
    logger.info("Committed %s of %s to %s", mode.value, patch_file, rom_file)
    emit("ROM file modified successfully.")
    return True


def dump_patch_file(
    patch_path: PathLike,
    *,
    constants: PatchConstants = DEFAULT_CONSTANTS,
    log_cb: Optional[LogCallback] = None,
) -> DumpReport:
    """List every record of a patch file, then the aggregated blobs and metadata.

    Invalid records are listed and skipped; any of them fails the dump.
    """
    emit = _Messages(log_cb)
    blob_list = BlobList()
    records = 0
    invalid = 0

    try:
        with SRecordReader(patch_path) as reader:
            for record in reader.records():
                records += 1
                emit(str(record))
                if not record.is_valid:
                    invalid += 1
                    continue
                blob_list.process_record(record)
    except OSError as exc:
        emit(f"Error: {exc}")
        return DumpReport(patch_path=str(patch_path), success=False)

    blobs = blob_list.blobs
    emit("Aggregated:")
    for blob in blobs:
        emit(str(blob))

    _dump_metadata(blobs, constants, emit)

    return DumpReport(
        patch_path=str(patch_path),
        success=invalid == 0,
        records=records,
        invalid_records=invalid,
        blobs=blobs,
    )


def _dump_metadata(blobs: Tuple, constants: PatchConstants, emit: LogCallback) -> None:
    try:
        metadata = parse_metadata(find_metadata_content(blobs, constants), constants)
    except MetadataError as exc:
        emit(f"Metadata: {exc}")
        return
    emit("Metadata:")
    emit(f"Required engine version: {metadata.required_version}")
    emit(f"Calibration change: {metadata.initial_calibration_id} -> {metadata.final_calibration_id}")
    for patch in metadata.patches:
        emit(str(patch))


def generate_baseline(
    patch_path: PathLike,
    rom_path: PathLike,
    out: TextIO,
    *,
    constants: PatchConstants = DEFAULT_CONSTANTS,
    srecord_settings: Optional[SRecordConfig] = None,
    log_cb: Optional[LogCallback] = None,
) -> BaselineReport:
    """Write baseline S-records for a (partial) patch file from an unpatched ROM."""
    srecord_settings = srecord_settings or SRecordConfig()
    emit = _Messages(log_cb)
    try:
        with SRecordReader(patch_path) as reader, RomImage.open(rom_path) as rom:
            patcher = Patcher(reader, rom, constants, emit)
            if not patcher.read_patches():
                return BaselineReport(str(patch_path), str(rom_path), False)
            success = patcher.extract_baselines(out, srecord_settings.max_data_length)
            return BaselineReport(str(patch_path), str(rom_path), success, patcher.patches)
    except (ImageIOError, OSError) as exc:
        emit(f"Error: {exc}")
        return BaselineReport(str(patch_path), str(rom_path), False)
