from __future__ import annotations

import pytest

from rompatch.exceptions import CoverageError
from rompatch.patching import Patch, PatchConstants, PatchRange, RangeKind, RangeTable
from rompatch.srecord import Blob


def test_from_blobs_strips_baseline_offset():
    table = RangeTable.from_blobs([
        Blob(0x100, b"new!"),
        Blob(0xFF000100, b"old!"),
    ])

    assert list(table) == [
        PatchRange(RangeKind.PATCH, 0x100, b"new!"),
        PatchRange(RangeKind.BASELINE, 0x100, b"old!"),
    ]


def test_from_blobs_uses_given_offset():
    constants = PatchConstants(baseline_offset=0x10000)
    table = RangeTable.from_blobs([Blob(0x10004, b"ab")], constants)
    assert list(table) == [PatchRange(RangeKind.BASELINE, 4, b"ab")]


def test_find_returns_first_match():
    first = PatchRange(RangeKind.PATCH, 0x100, b"aaaa")
    second = PatchRange(RangeKind.PATCH, 0x100, b"bbbb")
    table = RangeTable([first, second])

    assert table.find(RangeKind.PATCH, 0x101, 2) is first
    assert table.find(RangeKind.BASELINE, 0x101, 2) is None
    assert table.find(RangeKind.PATCH, 0x102, 4) is None
    assert table.find_start(RangeKind.PATCH, 0x103) is first


def test_require_names_missing_side():
    table = RangeTable([PatchRange(RangeKind.PATCH, 0x100, b"abcd")])

    with pytest.raises(CoverageError) as excinfo:
        table.require(RangeKind.BASELINE, Patch(0x100, 0x103))
    assert str(excinfo.value) == "Patch file does not contain baseline data for patch starting at 00000100"

    with pytest.raises(CoverageError, match="modified data"):
        RangeTable().require(RangeKind.PATCH, Patch(0x100, 0x103))


def test_reverse_twice_restores_roles():
    patches = [Patch(0x100, 0x103)]
    table = RangeTable([
        PatchRange(RangeKind.PATCH, 0x100, b"new!"),
        PatchRange(RangeKind.BASELINE, 0x100, b"old!"),
    ])

    once = table.reversed_for(patches)
    twice = once.reversed_for(patches)

    assert once.require(RangeKind.PATCH, patches[0]).content == b"old!"
    assert once.require(RangeKind.BASELINE, patches[0]).content == b"new!"
    assert twice.require(RangeKind.PATCH, patches[0]).content == b"new!"
    assert twice.require(RangeKind.BASELINE, patches[0]).content == b"old!"


def test_reverse_requires_both_sides():
    table = RangeTable([PatchRange(RangeKind.PATCH, 0x100, b"new!")])
    with pytest.raises(CoverageError):
        table.reversed_for([Patch(0x100, 0x103)])


def test_range_str():
    assert str(PatchRange(RangeKind.BASELINE, 0x10, b"abcd")) == (
        "Baseline range start: 00000010, end: 00000013, length: 00000004"
    )
