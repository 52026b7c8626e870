from __future__ import annotations

import io
from pathlib import Path

import pytest

from rompatch.srecord import (
    RecordKind,
    SRecordReader,
    SRecordWriter,
    compute_checksum,
    decode_record,
    encode_records,
    format_record,
)

# Classic S1 example line: 16 data bytes at 7AF0.
KNOWN_S1 = "S1137AF00A0A0D" + "00" * 13 + "61"


def test_known_record_decodes():
    record = decode_record(KNOWN_S1, 1)

    assert record.is_valid
    assert record.record_type == 1
    assert record.kind is RecordKind.DATA
    assert record.address == 0x7AF0
    assert record.data == b"\x0a\x0a\x0d" + bytes(13)
    assert record.end_address == 0x7AFF


def test_compute_checksum_is_ones_complement_of_low_byte():
    assert compute_checksum(bytes.fromhex("137AF00A0A0D") + bytes(13)) == 0x61
    assert compute_checksum(b"") == 0xFF
    assert compute_checksum(b"\xff\x01") == 0xFF


@pytest.mark.parametrize(
    "record_type,address",
    [(1, 0x1234), (2, 0x123456), (3, 0x80001000)],
)
def test_format_then_decode_preserves_address_and_data(record_type, address):
    data = bytes(range(20))
    line = format_record(record_type, address, data)

    record = decode_record(line)
    assert record.is_valid
    assert record.record_type == record_type
    assert record.address == address
    assert record.data == data


def test_lowercase_hex_is_accepted():
    record = decode_record(KNOWN_S1.lower(), 3)
    assert record.is_valid
    assert record.address == 0x7AF0


def test_encode_records_splits_long_data():
    data = bytes(range(40))
    lines = encode_records(0x200, data, max_data_length=16)

    assert len(lines) == 3
    records = [decode_record(line) for line in lines]
    assert [r.address for r in records] == [0x200, 0x210, 0x220]
    assert b"".join(r.data for r in records) == data
    assert all(line.startswith("S3") for line in lines)


def test_encode_records_rejects_bad_length():
    with pytest.raises(ValueError):
        encode_records(0, b"abc", max_data_length=0)


def test_format_record_rejects_oversized_data():
    with pytest.raises(ValueError):
        format_record(3, 0, bytes(251))


def test_format_record_rejects_address_out_of_range():
    with pytest.raises(ValueError):
        format_record(1, 0x10000, b"\x00")


def test_corrupted_checksum_is_flagged():
    line = KNOWN_S1[:-2] + "62"
    record = decode_record(line, 7)

    assert not record.is_valid
    assert record.line_number == 7
    assert record.raw_data == line
    assert "checksum" in record.reason


def test_corrupted_data_byte_is_flagged():
    line = KNOWN_S1[:8] + "1" + KNOWN_S1[9:]
    assert not decode_record(line).is_valid


@pytest.mark.parametrize(
    "line,reason",
    [
        ("", "marker"),
        ("X1137AF0", "marker"),
        ("S4030000FC", "record type"),
        ("SX030000FC", "record type"),
        ("S\u00b2030000FC", "record type"),
        ("S1137AF0ZZ", "non-hex"),
        ("S1137AF", "odd"),
        ("S1", "truncated"),
        ("S1FF7AF000", "byte count"),
        ("S102007D", "too short"),
    ],
)
def test_malformed_lines_are_invalid(line, reason):
    record = decode_record(line, 2)
    assert not record.is_valid
    assert reason in record.reason


def test_header_and_terminator_records():
    header = decode_record(format_record(0, 0, b"hdr"))
    terminator = decode_record(format_record(7, 0x1000))

    assert header.kind is RecordKind.HEADER
    assert terminator.kind is RecordKind.TERMINATOR
    assert terminator.data == b""


def test_invalid_record_str_mentions_line():
    record = decode_record("garbage", 12)
    assert str(record).startswith("Line 12: invalid")


def test_reader_skips_blank_lines_and_numbers_from_one(tmp_path: Path):
    path = tmp_path / "sample.srec"
    path.write_text(KNOWN_S1 + "\n\n" + "bad line\n", encoding="ascii")

    with SRecordReader(path) as reader:
        records = list(reader.records())
        again = list(reader.records())

    assert [r.line_number for r in records] == [1, 3]
    assert records[0].is_valid
    assert not records[1].is_valid
    assert again == records


def test_reader_flags_non_ascii_bytes(tmp_path: Path):
    path = tmp_path / "binary.srec"
    path.write_bytes(b"S1\xff\xfe0000\n")

    with SRecordReader(path) as reader:
        (record,) = list(reader.records())
    assert not record.is_valid


def test_writer_reports_line_count():
    out = io.StringIO()
    writer = SRecordWriter(out, max_data_length=8)

    assert writer.write(0xFF000100, bytes(20)) == 3
    lines = out.getvalue().splitlines()
    assert len(lines) == 3
    assert decode_record(lines[2]).address == 0xFF000110
