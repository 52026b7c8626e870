"""Aggregation of data records into contiguous blobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .record import RecordKind, SRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Blob:
    """A contiguous run of bytes starting at ``start_address``."""

    start_address: int
    content: bytes

    def __len__(self) -> int:
        return len(self.content)

    @property
    def next_address(self) -> int:
        """First address after the blob."""
        return self.start_address + len(self.content)

    @property
    def end_address(self) -> int:
        """Address of the last byte."""
        return self.next_address - 1

    def contains(self, address: int, length: int) -> bool:
        return self.start_address <= address and address + length <= self.next_address

    def slice(self, address: int, length: int) -> bytes:
        """Bytes for ``[address, address + length)``; the range must be contained."""
        if not self.contains(address, length):
            raise IndexError(
                f"{address:08X}+{length:X} is outside blob {self.start_address:08X}-{self.end_address:08X}"
            )
        offset = address - self.start_address
        return self.content[offset:offset + length]

    def __str__(self) -> str:
        return (
            f"Blob start: {self.start_address:08X}, end: {self.end_address:08X}, "
            f"length: {len(self.content):08X}"
        )


class _Span:
    """Mutable blob under construction."""

    __slots__ = ("start", "content")

    def __init__(self, start: int, content: bytes):
        self.start = start
        self.content = bytearray(content)

    @property
    def next_address(self) -> int:
        return self.start + len(self.content)

    def cover(self, start: int, next_address: int) -> None:
        """Grow the span so it includes ``[start, next_address)``."""
        if start < self.start:
            self.content[0:0] = bytes(self.start - start)
            self.start = start
        if next_address > self.next_address:
            self.content.extend(bytes(next_address - self.next_address))

    def overlay(self, start: int, data: bytes) -> None:
        self.cover(start, start + len(data))
        offset = start - self.start
        self.content[offset:offset + len(data)] = data


class BlobList:
    """Folds data records into a minimal set of non-touching blobs.

    The resulting address intervals do not depend on the order records arrive
    in; where records overlap, the later one wins.
    """

    def __init__(self, records: Optional[Iterable[SRecord]] = None):
        self._spans: List[_Span] = []
        if records is not None:
            for record in records:
                self.process_record(record)

    def process_record(self, record: SRecord) -> bool:
        """Merge a record; returns False when it carries no data to aggregate."""
        if not record.is_valid:
            raise ValueError(f"Cannot aggregate an invalid record (line {record.line_number})")
        if record.kind is not RecordKind.DATA or not record.data:
            return False
        self.add(record.address, record.data)
        return True

    def add(self, address: int, data: bytes) -> None:
        if not data:
            return
        next_address = address + len(data)
        touching = [
            span for span in self._spans
            if span.start <= next_address and span.next_address >= address
        ]

        if not touching:
            self._spans.append(_Span(address, data))
            self._spans.sort(key=lambda span: span.start)
            return

        base = touching[0]
        for other in touching[1:]:
            base.overlay(other.start, bytes(other.content))
            self._spans.remove(other)
        base.overlay(address, data)
        if len(touching) > 1:
            logger.debug("Record at %08X bridged %d blobs", address, len(touching))

    @property
    def blobs(self) -> Tuple[Blob, ...]:
        return tuple(Blob(span.start, bytes(span.content)) for span in self._spans)

    def find_blob(self, address: int, length: int) -> Optional[Blob]:
        """Return the blob that fully contains ``[address, address + length)``."""
        for span in self._spans:
            if span.start <= address and address + length <= span.next_address:
                return Blob(span.start, bytes(span.content))
        return None
