"""Command line entry points."""

from __future__ import annotations

import importlib
import json

import pytest

import start_rompatch
from builders import write_patch_file
from rompatch.srecord import decode_record
from rompatch.version import ENGINE_VERSION

pytestmark = pytest.mark.usefixtures("isolated_config", "reset_logging")


def test_version(capsys):
    assert start_rompatch.main(["--version"]) == 0
    assert f"engine version {ENGINE_VERSION}" in capsys.readouterr().out


def test_missing_command_fails(capsys):
    assert start_rompatch.main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_test_command(patch_file, rom_file, capsys):
    assert start_rompatch.main(["test", str(patch_file), str(rom_file)]) == 0
    assert "This patch file can be applied to this ROM file." in capsys.readouterr().out


def test_apply_then_remove(patch_file, rom_file, rom_bytes):
    assert start_rompatch.main(["apply", str(patch_file), str(rom_file)]) == 0
    assert rom_file.read_bytes() != rom_bytes
    assert start_rompatch.main(["applied", str(patch_file), str(rom_file)]) == 0
    assert start_rompatch.main(["remove", str(patch_file), str(rom_file)]) == 0
    assert rom_file.read_bytes() == rom_bytes


def test_failed_check_exits_with_one(patch_file, rom_file):
    assert start_rompatch.main(["applied", str(patch_file), str(rom_file)]) == 1


def test_dump_command(patch_file, capsys):
    assert start_rompatch.main(["dump", str(patch_file)]) == 0
    assert "Aggregated:" in capsys.readouterr().out


def test_baseline_writes_records_to_stdout(tmp_path, rom_file, rom_bytes, capsys):
    path = write_patch_file(tmp_path / "partial.srec", rom_bytes, baseline=False)

    assert start_rompatch.main(["baseline", str(path), str(rom_file)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out
    assert all(decode_record(line).is_valid for line in out)


def test_config_file_sets_record_length(tmp_path, rom_file, rom_bytes, capsys):
    config = tmp_path / "custom.json"
    config.write_text(json.dumps({"srecord": {"max_data_length": 4}}), encoding="utf-8")
    path = write_patch_file(tmp_path / "partial.srec", rom_bytes, baseline=False)

    assert start_rompatch.main(["--config", str(config), "baseline", str(path), str(rom_file)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert max(len(decode_record(line).data) for line in lines) == 4


def test_invalid_config_is_reported(tmp_path, patch_file, rom_file, capsys):
    config = tmp_path / "bad.json"
    config.write_text(json.dumps({"workflow": {"working_suffix": ""}}), encoding="utf-8")

    assert start_rompatch.main(["--config", str(config), "test", str(patch_file), str(rom_file)]) == 1
    assert "Error: Invalid configuration" in capsys.readouterr().err


def test_malformed_explicit_config_is_reported(tmp_path, patch_file, rom_file, capsys):
    config = tmp_path / "broken.json"
    config.write_text("{not json", encoding="utf-8")

    assert start_rompatch.main(["--config", str(config), "test", str(patch_file), str(rom_file)]) == 1
    assert "Error: Could not read config" in capsys.readouterr().err


def test_missing_rom_exits_with_one(patch_file, tmp_path):
    assert start_rompatch.main(["apply", str(patch_file), str(tmp_path / "nope.bin")]) == 1


def test_module_shim_delegates(patch_file, rom_file):
    module = importlib.import_module("rompatch.main")
    assert module.main(["test", str(patch_file), str(rom_file)]) == 0
