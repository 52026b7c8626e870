from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from builders import make_rom, shorthand_for, write_patch_file  # noqa: E402


def pytest_configure() -> None:
    """Ensure pytest base temp directory exists for CI runs."""

    base_temp = ROOT / "temp" / "pytest"
    base_temp.mkdir(parents=True, exist_ok=True)


@pytest.fixture
def rom_bytes() -> bytes:
    return make_rom()


@pytest.fixture
def rom_file(tmp_path: Path, rom_bytes: bytes) -> Path:
    path = tmp_path / "target.bin"
    path.write_bytes(rom_bytes)
    return path


@pytest.fixture
def shorthand(rom_bytes: bytes):
    return [shorthand_for(rom_bytes)]


@pytest.fixture
def patch_file(tmp_path: Path, rom_bytes: bytes, shorthand) -> Path:
    return write_patch_file(tmp_path / "change.srec", rom_bytes, shorthand=shorthand)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory so no rompatch.json is picked up."""
    monkeypatch.delenv("ROMPATCH_CONFIG", raising=False)
    monkeypatch.delenv("ROMPATCH_LOG_JSON", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def reset_logging():
    yield
    from rompatch.logging_config import cleanup_logging

    cleanup_logging()
