"""Random-access view of a ROM image file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..exceptions import ImageIOError, ImageReadError

logger = logging.getLogger(__name__)


class RomImage:
    """A ROM file opened for reading, or for reading and writing.

    Reads never pad: asking for bytes past the end of the image raises
    ImageReadError.
    """

    def __init__(self, path: Union[str, Path], writable: bool = False):
        self.path = Path(path)
        self.writable = writable
        self._file: Optional[BinaryIO] = None

    @classmethod
    def open(cls, path: Union[str, Path], writable: bool = False) -> "RomImage":
        image = cls(path, writable)
        image._open()
        return image

    def _open(self) -> None:
        try:
            self._file = open(self.path, "r+b" if self.writable else "rb")
        except OSError as exc:
            raise ImageIOError(f"Unable to open ROM file: {exc}", file_path=str(self.path)) from exc

    def __enter__(self) -> "RomImage":
        if self._file is None:
            self._open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def closed(self) -> bool:
        return self._file is None

    def _handle(self) -> BinaryIO:
        if self._file is None:
            raise ImageIOError("ROM image is not open.", file_path=str(self.path))
        return self._file

    def read(self, address: int, length: int) -> bytes:
        handle = self._handle()
        handle.seek(address)
        buffer = bytearray()
        while len(buffer) < length:
            chunk = handle.read(length - len(buffer))
            if not chunk:
                missing = length - len(buffer)
                raise ImageReadError(
                    f"Unable to read {missing} bytes starting at position {address + len(buffer):08X}",
                    address + len(buffer), missing, str(self.path),
                )
            buffer.extend(chunk)
        return bytes(buffer)

    def write(self, address: int, data: bytes) -> None:
        if not self.writable:
            raise ImageIOError("ROM image is open read-only.", file_path=str(self.path))
        handle = self._handle()
        handle.seek(address)
        handle.write(data)
        logger.debug("Wrote %d bytes at %08X to %s", len(data), address, self.path)

    def flush(self) -> None:
        self._handle().flush()
