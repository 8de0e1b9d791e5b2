"""Core volume ingestion functionality.

This module contains the descriptor and format types, the series parsing and
assembly pipeline, format conversion, and the windowing bitmask.
"""

from .conversion import FormatConverter
from .exceptions import (
    FieldMissingError,
    HeaderUnreadableError,
    InsufficientSlicesError,
    SliceCountMismatchError,
    UnsupportedBitDepthError,
    UnsupportedSampleLayoutError,
    UnsupportedTransferSyntaxError,
    VolumeLoadError,
)
from .loader import DicomVolumeLoader, LoadedVolume
from .transfer_function import ColorCurve, CurveSampler, LinearColor
from .types import VoxelFormat
from .volume_info import VolumeDescriptor
from .windowing import (
    WindowingTransform,
    compute_window_bitmask,
    generate_window_bitmask,
    pack_bitmask,
    unpack_bitmask,
)

__all__ = [
    # Errors
    "VolumeLoadError",
    "HeaderUnreadableError",
    "FieldMissingError",
    "UnsupportedSampleLayoutError",
    "UnsupportedBitDepthError",
    "UnsupportedTransferSyntaxError",
    "InsufficientSlicesError",
    "SliceCountMismatchError",
    # Volume model
    "VoxelFormat",
    "VolumeDescriptor",
    # Pipeline
    "DicomVolumeLoader",
    "LoadedVolume",
    "FormatConverter",
    # Transfer function
    "ColorCurve",
    "CurveSampler",
    "LinearColor",
    "WindowingTransform",
    "compute_window_bitmask",
    "generate_window_bitmask",
    "pack_bitmask",
    "unpack_bitmask",
]
