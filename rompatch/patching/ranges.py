"""Tagged byte ranges used by the patch engine.

Patch files overload the address space: baseline bytes for target address A
are recorded at A + baseline offset. The engine works on explicit
``RangeKind`` tags at the real address instead; the offset only exists at the
transport boundary (``RangeTable.from_blobs`` and baseline extraction).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional

from ..exceptions import CoverageError
from ..srecord.blobs import Blob
from .constants import DEFAULT_CONSTANTS, PatchConstants
from .patch import Patch


class RangeKind(Enum):
    """Role of a range for the current direction of patching."""

    PATCH = "patch"  # bytes to write
    BASELINE = "baseline"  # bytes that must be present before writing

    def swapped(self) -> "RangeKind":
        return RangeKind.BASELINE if self is RangeKind.PATCH else RangeKind.PATCH


@dataclass(frozen=True)
class PatchRange:
    kind: RangeKind
    start_address: int
    content: bytes

    @property
    def next_address(self) -> int:
        return self.start_address + len(self.content)

    @property
    def end_address(self) -> int:
        return self.next_address - 1

    def contains(self, address: int, length: int) -> bool:
        return self.start_address <= address and address + length <= self.next_address

    def slice(self, address: int, length: int) -> bytes:
        offset = address - self.start_address
        return self.content[offset:offset + length]

    def swapped(self) -> "PatchRange":
        return PatchRange(self.kind.swapped(), self.start_address, self.content)

    def __str__(self) -> str:
        return (
            f"{self.kind.value.capitalize()} range start: {self.start_address:08X}, "
            f"end: {self.end_address:08X}, length: {len(self.content):08X}"
        )


class RangeTable:
    """Ordered collection of tagged ranges; lookups return the first match."""

    def __init__(self, ranges: Iterable[PatchRange] = ()):
        self._ranges: List[PatchRange] = list(ranges)

    @classmethod
    def from_blobs(cls, blobs: Iterable[Blob],
                   constants: PatchConstants = DEFAULT_CONSTANTS) -> "RangeTable":
        """Translate aggregated blobs, stripping the baseline offset."""
        table = cls()
        for blob in blobs:
            if constants.is_baseline_address(blob.start_address):
                table.add(PatchRange(
                    RangeKind.BASELINE,
                    constants.from_baseline_address(blob.start_address),
                    blob.content,
                ))
            else:
                table.add(PatchRange(RangeKind.PATCH, blob.start_address, blob.content))
        return table

    def add(self, patch_range: PatchRange) -> None:
        self._ranges.append(patch_range)

    def extend(self, ranges: Iterable[PatchRange]) -> None:
        self._ranges.extend(ranges)

    def __iter__(self) -> Iterator[PatchRange]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def find(self, kind: RangeKind, address: int, length: int) -> Optional[PatchRange]:
        for patch_range in self._ranges:
            if patch_range.kind is kind and patch_range.contains(address, length):
                return patch_range
        return None

    def find_start(self, kind: RangeKind, address: int) -> Optional[PatchRange]:
        """First range of ``kind`` that contains ``address`` at all."""
        for patch_range in self._ranges:
            if patch_range.kind is kind and patch_range.contains(address, 1):
                return patch_range
        return None

    def require(self, kind: RangeKind, patch: Patch) -> PatchRange:
        found = self.find(kind, patch.start_address, patch.length)
        if found is None:
            raise CoverageError(
                f"Patch file does not contain {_describe(kind)} data for patch "
                f"starting at {patch.start_address:08X}",
                address=patch.start_address,
                kind=kind.value,
            )
        return found

    def reversed_for(self, patches: Iterable[Patch]) -> "RangeTable":
        """Swap roles of the ranges covering ``patches``.

        Only ranges that cover a patch are carried over. Raises CoverageError
        before building anything when either side is missing.
        """
        swapped = RangeTable()
        for patch in patches:
            baseline = self.require(RangeKind.BASELINE, patch)
            modified = self.require(RangeKind.PATCH, patch)
            swapped.add(baseline.swapped())
            swapped.add(modified.swapped())
        return swapped


def _describe(kind: RangeKind) -> str:
    return "baseline" if kind is RangeKind.BASELINE else "modified"
