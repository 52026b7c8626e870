"""Patch descriptor: the address range a patch overwrites (not its content)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Patch:
    """Inclusive ``[start_address, end_address]`` range to overwrite."""

    start_address: int
    end_address: int

    @property
    def length(self) -> int:
        return (self.end_address + 1) - self.start_address

    def __str__(self) -> str:
        return (
            f"Patch start: {self.start_address:08X}, end: {self.end_address:08X}, "
            f"length: {self.length:08X}"
        )
