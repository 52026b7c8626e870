#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
RomPatch - Consolidated Exception Classes

This module contains all exception classes used in the project,
centralized in one place to avoid duplication and improve consistency.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Transport (S-record) errors
# =====================================================================================================

class TransportError(BaseError):
    """Base class for errors while reading the patch transport file."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code or "TRANSPORT_ERROR", details)


class RecordDecodeError(TransportError):
    """Raised when a line of the patch file is malformed or fails its checksum."""

    def __init__(self, message: str, line_number: int = 0, raw_data: str = "",
                 details: Optional[Dict[str, Any]] = None):
        record_details = details or {}
        record_details['line_number'] = line_number
        record_details['raw_data'] = raw_data
        super().__init__(message, "RECORD_DECODE_ERROR", record_details)
        self.line_number = line_number
        self.raw_data = raw_data


# =====================================================================================================
# Metadata errors
# =====================================================================================================

class MetadataError(BaseError):
    """Base class for structural problems in the patch metadata."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 offset: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        meta_details = details or {}
        if offset is not None:
            meta_details['offset'] = offset
        super().__init__(message, error_code or "METADATA_ERROR", meta_details)
        self.offset = offset


class MissingMetadataError(MetadataError):
    """Raised when the patch file has no metadata blob."""

    def __init__(self, message: str, address: Optional[int] = None):
        details = {'address': address} if address is not None else None
        super().__init__(message, "MISSING_METADATA", None, details)


class UnsupportedVersionError(MetadataError):
    """Raised when the patch requires a different engine version."""

    def __init__(self, message: str, required_version: int, engine_version: int):
        super().__init__(message, "UNSUPPORTED_VERSION", None, {
            'required_version': required_version,
            'engine_version': engine_version,
        })
        self.required_version = required_version
        self.engine_version = engine_version


class TruncatedMetadataError(MetadataError):
    """Raised when the metadata ends in the middle of a field."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message, "TRUNCATED_METADATA", offset)


class UnknownFieldError(MetadataError):
    """Raised for a cookie that names no known metadata field."""

    def __init__(self, message: str, cookie: int, offset: int):
        super().__init__(message, "UNKNOWN_FIELD", offset, {'cookie': f"{cookie:08X}"})
        self.cookie = cookie


class UnexpectedFieldError(MetadataError):
    """Raised for a known field found where it is not allowed."""

    def __init__(self, message: str, cookie: int, offset: int):
        super().__init__(message, "UNEXPECTED_FIELD", offset, {'cookie': f"{cookie:08X}"})
        self.cookie = cookie


class NoPatchesError(MetadataError):
    """Raised when the metadata describes nothing to patch."""

    def __init__(self, message: str):
        super().__init__(message, "NO_PATCHES")


# =====================================================================================================
# Engine errors
# =====================================================================================================

class CoverageError(BaseError):
    """Raised when no range in the patch file covers a patch descriptor."""

    def __init__(self, message: str, address: Optional[int] = None,
                 kind: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        coverage_details = details or {}
        if address is not None:
            coverage_details['address'] = f"{address:08X}"
        if kind:
            coverage_details['kind'] = kind
        super().__init__(message, "COVERAGE_ERROR", coverage_details)
        self.address = address


class ImageIOError(BaseError):
    """Raised when the ROM image cannot be read or written."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        io_details = details or {}
        if file_path:
            io_details['file_path'] = str(file_path)
        super().__init__(message, error_code or "IMAGE_IO_ERROR", io_details)


class ImageReadError(ImageIOError):
    """Raised on a short read from the ROM image."""

    def __init__(self, message: str, address: int, missing: int,
                 file_path: Optional[str] = None):
        super().__init__(message, "IMAGE_READ_ERROR", file_path, {
            'address': f"{address:08X}",
            'missing': missing,
        })
        self.address = address
        self.missing = missing


# =====================================================================================================
# Configuration -related errors
# =====================================================================================================

class ConfigurationError(BaseError):
    """Base class for configuration errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = file_path
        super().__init__(message, error_code or "CONFIG_ERROR", config_details)


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 expected_type: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        validation_details = details or {}
        if field_name:
            validation_details['field_name'] = field_name
        if expected_type:
            validation_details['expected_type'] = expected_type
        super().__init__(message, "VALIDATION_ERROR", None, validation_details)
