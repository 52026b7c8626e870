"""Patch metadata model.

The metadata blob lives at a fixed address in the patch file and is a
sequence of big-endian fields, each introduced by a 32-bit cookie:

    version      12340000  required engine version
    calibration  12340001  address, length, initial id[16], final id[16]
    patch        12340002  start, end (inclusive)
    4-byte patch 12340003  address, old value, new value
    end          00090009

The first field must be the version, the second the calibration change,
followed by any number of patch / 4-byte patch fields and the end marker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Iterable, List, Tuple, Type, Union

from ..exceptions import (
    MetadataError,
    NoPatchesError,
    TruncatedMetadataError,
    UnexpectedFieldError,
    UnknownFieldError,
    UnsupportedVersionError,
)
from .constants import (
    CALIBRATION_ID_COOKIE,
    CALIBRATION_ID_LENGTH,
    DEFAULT_CONSTANTS,
    END_OF_METADATA_COOKIE,
    PATCH_COOKIE,
    REPLACE_4_BYTES_COOKIE,
    REQUIRED_VERSION_COOKIE,
    PatchConstants,
)
from .patch import Patch
from .ranges import PatchRange, RangeKind

logger = logging.getLogger(__name__)


def _u32(value: int) -> bytes:
    return int(value).to_bytes(4, "big")


def _encode_calibration_id(calibration_id: str) -> bytes:
    raw = calibration_id.encode("ascii")
    if len(raw) > CALIBRATION_ID_LENGTH:
        raise ValueError(f"Calibration id longer than {CALIBRATION_ID_LENGTH} bytes: {calibration_id!r}")
    return raw.ljust(CALIBRATION_ID_LENGTH, b"\x00")


# =====================================================================================================
# Field variants
# =====================================================================================================

@dataclass(frozen=True)
class VersionField:
    version: int

    COOKIE: ClassVar[int] = REQUIRED_VERSION_COOKIE

    def to_bytes(self) -> bytes:
        return _u32(self.COOKIE) + _u32(self.version)


@dataclass(frozen=True)
class CalibrationField:
    """Calibration id change; also patches the id bytes in the ROM."""

    address: int
    length: int
    initial_id: str
    final_id: str

    COOKIE: ClassVar[int] = CALIBRATION_ID_COOKIE

    def to_bytes(self) -> bytes:
        return (
            _u32(self.COOKIE) + _u32(self.address) + _u32(self.length)
            + _encode_calibration_id(self.initial_id) + _encode_calibration_id(self.final_id)
        )

    def to_patch(self) -> Patch:
        return Patch(self.address, self.address + self.length - 1)

    def synthesized_ranges(self) -> Tuple[PatchRange, PatchRange]:
        return (
            PatchRange(RangeKind.BASELINE, self.address, self.initial_id.encode("ascii")),
            PatchRange(RangeKind.PATCH, self.address, self.final_id.encode("ascii")),
        )


@dataclass(frozen=True)
class PatchField:
    start_address: int
    end_address: int

    COOKIE: ClassVar[int] = PATCH_COOKIE

    def to_bytes(self) -> bytes:
        return _u32(self.COOKIE) + _u32(self.start_address) + _u32(self.end_address)

    def to_patch(self) -> Patch:
        return Patch(self.start_address, self.end_address)


@dataclass(frozen=True)
class ShorthandField:
    """Replace one 32-bit big-endian value."""

    address: int
    old_value: int
    new_value: int

    COOKIE: ClassVar[int] = REPLACE_4_BYTES_COOKIE

    def to_bytes(self) -> bytes:
        return _u32(self.COOKIE) + _u32(self.address) + _u32(self.old_value) + _u32(self.new_value)

    def to_patch(self) -> Patch:
        return Patch(self.address, self.address + 3)

    def synthesized_ranges(self) -> Tuple[PatchRange, PatchRange]:
        return (
            PatchRange(RangeKind.PATCH, self.address, _u32(self.new_value)),
            PatchRange(RangeKind.BASELINE, self.address, _u32(self.old_value)),
        )


@dataclass(frozen=True)
class TerminatorField:
    COOKIE: ClassVar[int] = END_OF_METADATA_COOKIE

    def to_bytes(self) -> bytes:
        return _u32(self.COOKIE)


MetadataField = Union[VersionField, CalibrationField, PatchField, ShorthandField, TerminatorField]


def encode_metadata(fields: Iterable[MetadataField]) -> bytes:
    """Serialize fields into a metadata blob."""
    return b"".join(item.to_bytes() for item in fields)


# =====================================================================================================
# Decoding
# =====================================================================================================

class MetadataCursor:
    """Sequential big-endian reader over the metadata bytes."""

    def __init__(self, content: bytes):
        self.content = bytes(content)
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.content) - self.offset

    def peek_uint32(self, what: str) -> int:
        if self.remaining < 4:
            raise TruncatedMetadataError(
                f"This patch file's metadata is too short (no {what}).", self.offset
            )
        return int.from_bytes(self.content[self.offset:self.offset + 4], "big")

    def read_uint32(self, what: str) -> int:
        value = self.peek_uint32(what)
        self.offset += 4
        return value

    def read_bytes(self, count: int, what: str) -> bytes:
        if self.remaining < count:
            raise TruncatedMetadataError(
                f"This patch file's metadata ran out before the complete {what} could be found.",
                self.offset,
            )
        data = self.content[self.offset:self.offset + count]
        self.offset += count
        return data


def _decode_calibration_id(cursor: MetadataCursor) -> str:
    offset = cursor.offset
    raw = cursor.read_bytes(CALIBRATION_ID_LENGTH, "calibration ID")
    text, _, padding = raw.partition(b"\x00")
    if padding.strip(b"\x00"):
        raise MetadataError(
            "This patch file's metadata contains garbage after the calibration ID.",
            "CALIBRATION_ID_GARBAGE", offset,
        )
    try:
        return text.decode("ascii")
    except UnicodeDecodeError as exc:
        raise MetadataError(
            "This patch file's calibration ID is not ASCII text.", "CALIBRATION_ID_GARBAGE", offset
        ) from exc


def _decode_version(cursor: MetadataCursor) -> VersionField:
    return VersionField(cursor.read_uint32("version"))


def _decode_calibration(cursor: MetadataCursor) -> CalibrationField:
    address = cursor.read_uint32("calibration address")
    length = cursor.read_uint32("calibration length")
    initial_id = _decode_calibration_id(cursor)
    final_id = _decode_calibration_id(cursor)
    return CalibrationField(address, length, initial_id, final_id)


def _decode_patch(cursor: MetadataCursor) -> PatchField:
    start = cursor.read_uint32("patch start address")
    end = cursor.read_uint32("patch end address")
    return PatchField(start, end)


def _decode_shorthand(cursor: MetadataCursor) -> ShorthandField:
    address = cursor.read_uint32("4-byte patch address")
    old_value = cursor.read_uint32("4-byte patch baseline value")
    new_value = cursor.read_uint32("4-byte patch value")
    return ShorthandField(address, old_value, new_value)


def _decode_terminator(cursor: MetadataCursor) -> TerminatorField:
    return TerminatorField()


_DECODERS: Dict[int, Callable[[MetadataCursor], MetadataField]] = {
    VersionField.COOKIE: _decode_version,
    CalibrationField.COOKIE: _decode_calibration,
    PatchField.COOKIE: _decode_patch,
    ShorthandField.COOKIE: _decode_shorthand,
    TerminatorField.COOKIE: _decode_terminator,
}


def decode_field(cursor: MetadataCursor) -> MetadataField:
    """Decode the field at the cursor; unknown cookies raise UnknownFieldError."""
    offset = cursor.offset
    cookie = cursor.read_uint32("field cookie")
    decoder = _DECODERS.get(cookie)
    if decoder is None:
        raise UnknownFieldError(
            f"The metadata contains unexpected data. Found {cookie:08X} at {offset:08X}.",
            cookie, offset,
        )
    return decoder(cursor)


def _expect(cursor: MetadataCursor, field_type: Type, what: str, message: str) -> MetadataField:
    """Decode the next field, which must be a ``field_type``.

    ``message`` is formatted with ``found`` and ``expected`` cookies.
    """
    offset = cursor.offset
    cookie = cursor.peek_uint32(what)
    if cookie != field_type.COOKIE:
        raise UnexpectedFieldError(
            message.format(found=cookie, expected=field_type.COOKIE), cookie, offset,
        )
    return decode_field(cursor)


@dataclass(frozen=True)
class PatchMetadata:
    required_version: int
    initial_calibration_id: str
    final_calibration_id: str
    patches: Tuple[Patch, ...]
    synthesized_ranges: Tuple[PatchRange, ...] = ()
    fields: Tuple[MetadataField, ...] = field(default=(), repr=False)


def parse_metadata(content: bytes, constants: PatchConstants = DEFAULT_CONSTANTS) -> PatchMetadata:
    """Decode and validate a metadata blob.

    Raises a MetadataError subclass for any structural problem; a version
    that differs from ``constants.engine_version`` is rejected outright.
    """
    cursor = MetadataCursor(content)
    fields: List[MetadataField] = []

    version = _expect(
        cursor, VersionField, "version metadata",
        "This patch file's metadata starts with {found:08X}, it should start with {expected:08X}.",
    )
    assert isinstance(version, VersionField)
    fields.append(version)
    if version.version != constants.engine_version:
        raise UnsupportedVersionError(
            f"This is RomPatch engine version {constants.engine_version}. "
            f"This patch file requires version {version.version}.",
            version.version, constants.engine_version,
        )

    calibration = _expect(
        cursor, CalibrationField, "calibration metadata",
        "Expected calibration id prefix {expected:08X}, found {found:08X}.",
    )
    assert isinstance(calibration, CalibrationField)
    fields.append(calibration)

    patches: List[Patch] = []
    ranges: List[PatchRange] = []
    if calibration.length > 0:
        patches.append(calibration.to_patch())
        ranges.extend(calibration.synthesized_ranges())
    else:
        logger.debug("Calibration change with zero length, no calibration patch synthesized")

    while True:
        offset = cursor.offset
        if cursor.remaining == 0:
            raise TruncatedMetadataError(
                "This patch file's metadata ended before the end-of-metadata marker.", offset
            )
        item = decode_field(cursor)
        fields.append(item)

        if isinstance(item, TerminatorField):
            break
        if isinstance(item, PatchField):
            if item.end_address < item.start_address:
                raise MetadataError(
                    f"Invalid patch found. Patch end {item.end_address:08X} precedes "
                    f"start {item.start_address:08X}.",
                    "INVALID_PATCH", offset,
                )
            patches.append(item.to_patch())
        elif isinstance(item, ShorthandField):
            patches.append(item.to_patch())
            ranges.extend(item.synthesized_ranges())
        else:
            raise UnexpectedFieldError(
                "The metadata contains unexpected data following the patch descriptions. "
                f"Found {item.COOKIE:08X} at {offset:08X} while looking for the next patch.",
                item.COOKIE, offset,
            )

    if not patches:
        raise NoPatchesError("This patch file's metadata contains no patches.")

    return PatchMetadata(
        required_version=version.version,
        initial_calibration_id=calibration.initial_id,
        final_calibration_id=calibration.final_id,
        patches=tuple(patches),
        synthesized_ranges=tuple(ranges),
        fields=tuple(fields),
    )
