import os
import stat
from pathlib import Path

import pytest

from rompatch.app import execute_helpers
from rompatch.app.execute_helpers import atomic_copy, create_working_copy, discard_working_copy


def test_create_working_copy_replaces_stale_copy(tmp_path: Path):
    src = tmp_path / "rom.bin"
    src.write_bytes(b"fresh")
    working = tmp_path / "rom.bin.temp"
    working.write_bytes(b"stale contents")

    assert create_working_copy(src, working) == working
    assert working.read_bytes() == b"fresh"


def test_atomic_copy_replaces_destination(tmp_path: Path):
    src = tmp_path / "src.bin"
    dst = tmp_path / "dst.bin"
    src.write_bytes(b"x" * 3000)
    dst.write_bytes(b"old")

    atomic_copy(src, dst, buffer_size=1024)

    assert dst.read_bytes() == b"x" * 3000
    assert not dst.with_name(dst.name + ".part").exists()


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_atomic_copy_keeps_destination_mode(tmp_path: Path):
    src = tmp_path / "src.bin"
    dst = tmp_path / "dst.bin"
    src.write_bytes(b"new")
    dst.write_bytes(b"old")
    os.chmod(src, 0o600)
    os.chmod(dst, 0o640)

    atomic_copy(src, dst)

    assert stat.S_IMODE(dst.stat().st_mode) == 0o640


def test_atomic_copy_failure_cleans_part_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    src = tmp_path / "src.bin"
    dst = tmp_path / "dst.bin"
    src.write_bytes(b"new")
    dst.write_bytes(b"old")

    def fail_replace(a, b):
        raise OSError("disk full")

    monkeypatch.setattr(execute_helpers.os, "replace", fail_replace)

    with pytest.raises(OSError):
        atomic_copy(src, dst)

    assert dst.read_bytes() == b"old"
    assert not dst.with_name(dst.name + ".part").exists()


def test_discard_working_copy_ignores_missing_file(tmp_path: Path):
    working = tmp_path / "gone.temp"
    discard_working_copy(working)

    working.write_bytes(b"x")
    discard_working_copy(working)
    assert not working.exists()
