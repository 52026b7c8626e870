"""Motorola S-record codec.

A record line looks like ``S<type><count><address><data><checksum>``:

- type: one digit, selects the address width and the record kind
- count: number of bytes after the count byte (address + data + checksum)
- checksum: one's complement of the low byte of the sum of count, address and data

Decoding never raises for bad input. A malformed line yields a record with
``is_valid`` set to False and a ``reason``; the caller decides whether to abort.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional


class RecordKind(Enum):
    """What a record means to the aggregator."""

    HEADER = auto()  # S0
    DATA = auto()  # S1, S2, S3
    COUNT = auto()  # S5, S6
    TERMINATOR = auto()  # S7, S8, S9
    UNKNOWN = auto()


# record type -> (address width in bytes, kind); S4 is reserved
RECORD_TYPES = {
    0: (2, RecordKind.HEADER),
    1: (2, RecordKind.DATA),
    2: (3, RecordKind.DATA),
    3: (4, RecordKind.DATA),
    5: (2, RecordKind.COUNT),
    6: (3, RecordKind.COUNT),
    7: (4, RecordKind.TERMINATOR),
    8: (3, RecordKind.TERMINATOR),
    9: (2, RecordKind.TERMINATOR),
}

DEFAULT_MAX_DATA_LENGTH = 16

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class SRecord:
    """One decoded line of a patch file."""

    line_number: int
    raw_data: str
    record_type: int = -1
    kind: RecordKind = RecordKind.UNKNOWN
    address: int = 0
    data: bytes = b""
    is_valid: bool = False
    reason: Optional[str] = None

    @property
    def end_address(self) -> int:
        """Address of the last data byte."""
        return self.address + len(self.data) - 1

    def __str__(self) -> str:
        if not self.is_valid:
            return f"Line {self.line_number}: invalid ({self.reason}): {self.raw_data}"
        return (
            f"Line {self.line_number}: S{self.record_type} {self.kind.name.lower()} "
            f"address {self.address:08X}, length {len(self.data)}: {self.data.hex().upper()}"
        )


def compute_checksum(payload: bytes) -> int:
    """One's complement of the low byte of the sum of ``payload``."""
    return 0xFF - (sum(payload) & 0xFF)


def _invalid(line_number: int, raw: str, reason: str, record_type: int = -1) -> SRecord:
    return SRecord(line_number=line_number, raw_data=raw, record_type=record_type, reason=reason)


def decode_record(line: str, line_number: int = 0) -> SRecord:
    """Decode one line of S-record text."""
    raw = line.rstrip("\r\n")
    text = raw.strip()

    if len(text) < 2 or text[0] not in "Ss":
        return _invalid(line_number, raw, "missing S record marker")

    type_char = text[1]
    if type_char not in "0123456789" or int(type_char) not in RECORD_TYPES:
        return _invalid(line_number, raw, f"unknown record type {type_char!r}")
    record_type = int(type_char)
    address_width, kind = RECORD_TYPES[record_type]

    body = text[2:]
    if any(ch not in _HEX_DIGITS for ch in body):
        return _invalid(line_number, raw, "non-hex characters", record_type)
    if len(body) % 2:
        return _invalid(line_number, raw, "odd number of hex digits", record_type)

    payload = bytes.fromhex(body)
    if not payload:
        return _invalid(line_number, raw, "truncated record", record_type)

    count = payload[0]
    if count != len(payload) - 1:
        return _invalid(
            line_number, raw,
            f"byte count {count} does not match {len(payload) - 1} bytes present",
            record_type,
        )
    if count < address_width + 1:
        return _invalid(line_number, raw, "record too short for its address", record_type)

    expected = compute_checksum(payload[:-1])
    if payload[-1] != expected:
        return _invalid(
            line_number, raw,
            f"checksum {payload[-1]:02X}, expected {expected:02X}",
            record_type,
        )

    address = int.from_bytes(payload[1:1 + address_width], "big")
    return SRecord(
        line_number=line_number,
        raw_data=raw,
        record_type=record_type,
        kind=kind,
        address=address,
        data=bytes(payload[1 + address_width:-1]),
        is_valid=True,
    )


def format_record(record_type: int, address: int, data: bytes = b"") -> str:
    """Encode a single record line."""
    if record_type not in RECORD_TYPES:
        raise ValueError(f"Unsupported record type: S{record_type}")
    address_width, _ = RECORD_TYPES[record_type]
    if address < 0 or address >= 1 << (8 * address_width):
        raise ValueError(f"Address {address:X} does not fit an S{record_type} record")

    count = address_width + len(data) + 1
    if count > 0xFF:
        raise ValueError(f"Too much data for one record: {len(data)} bytes")
    body = bytes([count]) + address.to_bytes(address_width, "big") + bytes(data)
    return f"S{record_type}{(body + bytes([compute_checksum(body)])).hex().upper()}"


def iter_encoded_records(
    address: int,
    data: bytes,
    max_data_length: int = DEFAULT_MAX_DATA_LENGTH,
    record_type: int = 3,
) -> Iterator[str]:
    """Yield record lines for ``data`` at ``address``, lowest address first."""
    if max_data_length < 1:
        raise ValueError("max_data_length must be positive")
    for offset in range(0, len(data), max_data_length):
        yield format_record(record_type, address + offset, data[offset:offset + max_data_length])


def encode_records(
    address: int,
    data: bytes,
    max_data_length: int = DEFAULT_MAX_DATA_LENGTH,
    record_type: int = 3,
) -> List[str]:
    """Encode a buffer as one or more independently checksummed lines."""
    return list(iter_encoded_records(address, data, max_data_length, record_type))
