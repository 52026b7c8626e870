"""File helpers for the working-copy commit."""

from __future__ import annotations

import os
import shutil
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def create_working_copy(src: Path, working: Path) -> Path:
    """Copy the ROM to ``working``, replacing any stale copy."""
    if working.exists():
        logger.debug("Replacing stale working copy %s", working)
        working.unlink()
    shutil.copyfile(src, working)
    return working


def atomic_copy(src: Path, dst: Path, *, buffer_size: int = 1024 * 1024) -> None:
    """Copy src -> dst atomically: write a .part file, fsync, then replace."""

    tmp = dst.with_name(dst.name + ".part")

    try:
        if tmp.exists():
            tmp.unlink()

        with open(src, "rb") as fsrc, open(tmp, "wb") as fdst:
            while True:
                chunk = fsrc.read(buffer_size)
                if not chunk:
                    break
                fdst.write(chunk)

            try:
                fdst.flush()
                os.fsync(fdst.fileno())
            except OSError as exc:
                logger.debug("Flush/fsync failed: %s", exc)

        if dst.exists():
            try:
                shutil.copymode(dst, tmp)
            except OSError as exc:
                logger.debug("copymode failed: %s", exc)

        os.replace(str(tmp), str(dst))

    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError as exc:
                logger.debug("Failed to remove temp file: %s", exc)


def discard_working_copy(working: Path) -> None:
    try:
        working.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Failed to remove working copy %s: %s", working, exc)
