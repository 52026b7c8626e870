"""Reading and writing S-record files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from .record import DEFAULT_MAX_DATA_LENGTH, SRecord, decode_record, iter_encoded_records

logger = logging.getLogger(__name__)


class SRecordReader:
    """Reads records from a patch file, one line at a time.

    Use as a context manager; ``records()`` can be called again after the
    reader is reopened.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file: Optional[TextIO] = None

    def __enter__(self) -> "SRecordReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        self.close()
        # Non-ASCII bytes become U+FFFD and fail the hex check in decode_record.
        self._file = open(self.path, "r", encoding="ascii", errors="replace")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def records(self) -> Iterator[SRecord]:
        """Yield decoded records with 1-based line numbers, skipping blank lines."""
        if self._file is None:
            self.open()
        assert self._file is not None
        self._file.seek(0)
        for line_number, line in enumerate(self._file, start=1):
            if not line.strip():
                continue
            record = decode_record(line, line_number)
            if not record.is_valid:
                logger.debug("Invalid record in %s: %s", self.path, record)
            yield record


class SRecordWriter:
    """Writes S3 data records to a text stream."""

    def __init__(self, stream: TextIO, max_data_length: int = DEFAULT_MAX_DATA_LENGTH,
                 record_type: int = 3):
        self.stream = stream
        self.max_data_length = max_data_length
        self.record_type = record_type

    def write(self, address: int, data: bytes) -> int:
        """Write ``data`` at ``address``; returns the number of lines written."""
        lines = 0
        for line in iter_encoded_records(address, data, self.max_data_length, self.record_type):
            self.stream.write(line + "\n")
            lines += 1
        self.stream.flush()
        return lines
