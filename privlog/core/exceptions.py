"""
Core exceptions for the privacy logging pipeline.

These exceptions never reach the caller of a logging method. Sinks and
stores raise them internally and the sink boundary converts them into
``SinkResult`` failures that the dispatcher inspects and discards.
"""

from enum import Enum
from typing import Any


class PrivlogErrorCode(str, Enum):
    """Error codes for sink and storage failures."""

    SINK_WRITE_FAILED = "sink_write_failed"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    STORAGE_CORRUPT = "storage_corrupt"
    SERIALIZATION_FAILED = "serialization_failed"


class PrivlogError(Exception):
    """
    Base exception for all logging pipeline errors.

    Attributes:
        message: Human-readable error message (never contains log payloads)
        error_code: Machine-readable error code
        details: Additional error details (optional)
    """

    def __init__(
        self,
        message: str,
        error_code: PrivlogErrorCode = PrivlogErrorCode.SINK_WRITE_FAILED,
        details: dict[str, Any] | None = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for diagnostics."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class SinkWriteError(PrivlogError):
    """Raised when a sink cannot accept a record."""

    def __init__(
        self,
        message: str = "Failed to write log record",
        error_code: PrivlogErrorCode = PrivlogErrorCode.SINK_WRITE_FAILED,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class StorageError(PrivlogError):
    """Raised when the key-value storage scope cannot be read or written."""

    def __init__(
        self,
        message: str = "Log storage unavailable",
        error_code: PrivlogErrorCode = PrivlogErrorCode.STORAGE_UNAVAILABLE,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message=message, error_code=error_code, details=details)
