"""
dicom-volume - DICOM series ingestion for volume rendering.

Assembles folders of single-slice DICOM files into one contiguous voxel
buffer with validated geometry, converts it for rendering, and computes the
transfer-function visibility bitmask used for empty-space skipping.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from dicom_volume.core.conversion import FormatConverter
from dicom_volume.core.dicom.series_parser import SeriesParser
from dicom_volume.core.loader import DicomVolumeLoader, LoadedVolume
from dicom_volume.core.types import VoxelFormat
from dicom_volume.core.volume_info import VolumeDescriptor
from dicom_volume.core.windowing import WindowingTransform, generate_window_bitmask

__all__ = [
    "__version__",
    "__license__",
    "DicomVolumeLoader",
    "FormatConverter",
    "LoadedVolume",
    "SeriesParser",
    "VolumeDescriptor",
    "VoxelFormat",
    "WindowingTransform",
    "generate_window_bitmask",
]
