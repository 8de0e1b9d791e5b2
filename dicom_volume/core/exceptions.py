"""Custom exceptions for volume ingestion.

This module defines the exception hierarchy for loading DICOM series into
volumes. Every error here is terminal for one ingestion attempt; slice-level
anomalies are reported through ``AssemblyReport`` instead.
"""

from typing import Any


class VolumeLoadError(Exception):
    """Base exception for volume ingestion.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for categorization
        context: Additional context information

    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class HeaderUnreadableError(VolumeLoadError):
    """Raised when a slice container cannot be opened."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code="HEADER_UNREADABLE", context=context)


class FieldMissingError(VolumeLoadError):
    """Raised when a required header field is absent or cannot be parsed."""

    def __init__(
        self, field_name: str, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            f"Missing or unreadable field: {field_name}",
            error_code="FIELD_MISSING",
            context=context,
        )
        self.field_name = field_name


class UnsupportedSampleLayoutError(VolumeLoadError):
    """Raised for multi-sample (e.g. RGB) pixels; only single channel is supported."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            message, error_code="UNSUPPORTED_SAMPLE_LAYOUT", context=context
        )


class UnsupportedBitDepthError(VolumeLoadError):
    """Raised when BitsAllocated is not 8, 16 or 32."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code="UNSUPPORTED_BIT_DEPTH", context=context)


class UnsupportedTransferSyntaxError(VolumeLoadError):
    """Raised for compressed or otherwise undecodable transfer syntaxes."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            message, error_code="UNSUPPORTED_TRANSFER_SYNTAX", context=context
        )


class InsufficientSlicesError(VolumeLoadError):
    """Raised when fewer than three distinct slice locations are available."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code="INSUFFICIENT_SLICES", context=context)


class SliceCountMismatchError(VolumeLoadError):
    """Raised when the assembled slice count differs from the declared depth."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code="SLICE_COUNT_MISMATCH", context=context)
