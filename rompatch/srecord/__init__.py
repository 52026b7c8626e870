"""S-record transport for patch files.

Features:
- Record codec with per-line checksum validation
- Aggregation of data records into contiguous blobs
"""

from .record import (
    DEFAULT_MAX_DATA_LENGTH,
    RecordKind,
    SRecord,
    compute_checksum,
    decode_record,
    encode_records,
    format_record,
)
from .io import SRecordReader, SRecordWriter
from .blobs import Blob, BlobList

__all__ = [
    "DEFAULT_MAX_DATA_LENGTH",
    "RecordKind",
    "SRecord",
    "compute_checksum",
    "decode_record",
    "encode_records",
    "format_record",
    "SRecordReader",
    "SRecordWriter",
    "Blob",
    "BlobList",
]
