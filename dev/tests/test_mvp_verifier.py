from __future__ import annotations

from builders import DEFAULT_PATCHES, PATCH_A, patched_rom, write_patch_file
from rompatch.patching import Patch
from rompatch.verification import Verifier


def test_verifies_applied_patch(patch_file, rom_file, rom_bytes, shorthand):
    rom_file.write_bytes(patched_rom(rom_bytes, DEFAULT_PATCHES, shorthand=shorthand))

    assert Verifier(patch_file, rom_file, applied=True).verify()
    assert not Verifier(patch_file, rom_file, applied=False).verify()


def test_verifies_removed_patch(patch_file, rom_file):
    assert Verifier(patch_file, rom_file, applied=False).verify()
    assert not Verifier(patch_file, rom_file, applied=True).verify()


def test_partially_written_rom_fails(patch_file, rom_file, rom_bytes):
    rom_file.write_bytes(patched_rom(rom_bytes, [PATCH_A]))
    messages = []

    assert not Verifier(patch_file, rom_file, applied=True, log_cb=messages.append).verify()
    assert any(m.endswith(" - Invalid.") for m in messages)


def test_changed_patch_list_fails(patch_file, rom_file):
    messages = []
    verifier = Verifier(patch_file, rom_file, applied=False, log_cb=messages.append)

    assert not verifier.verify([Patch(0, 3)])
    assert "The patch file changed while it was being applied." in messages


def test_unreadable_patch_file_fails(tmp_path, rom_file, rom_bytes):
    path = write_patch_file(tmp_path / "broken.srec", rom_bytes)
    path.write_text(path.read_text(encoding="ascii").replace("S3", "S4", 1), encoding="ascii")

    assert not Verifier(path, rom_file, applied=False).verify()
