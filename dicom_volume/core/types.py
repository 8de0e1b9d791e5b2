"""Voxel sample format definitions.

Shared type definitions used across the ingestion pipeline to avoid circular
imports.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from .exceptions import UnsupportedBitDepthError


class VoxelFormat(Enum):
    """Storage format of a single voxel sample.

    Values are the little-endian numpy dtype strings, so a format can be
    turned straight into an array view.
    """

    UNSIGNED_CHAR = "u1"
    SIGNED_CHAR = "i1"
    UNSIGNED_SHORT = "<u2"
    SIGNED_SHORT = "<i2"
    UNSIGNED_INT = "<u4"
    SIGNED_INT = "<i4"
    FLOAT = "<f4"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def bytes_per_voxel(self) -> int:
        return self.dtype.itemsize

    @property
    def is_float(self) -> bool:
        return self is VoxelFormat.FLOAT

    @property
    def is_signed(self) -> bool:
        """Whether samples are signed. Only meaningful for integer formats."""
        return self.dtype.kind == "i"

    def value_range(self) -> tuple[float, float]:
        """Smallest and largest representable sample value.

        Returns:
            (min, max) tuple; the float range is the finite float32 range

        """
        if self.is_float:
            info = np.finfo(self.dtype)
            return float(info.min), float(info.max)
        iinfo = np.iinfo(self.dtype)
        return float(iinfo.min), float(iinfo.max)

    @classmethod
    def from_bits(cls, bits_allocated: int, signed: bool) -> VoxelFormat:
        """Map DICOM BitsAllocated / PixelRepresentation to an integer format.

        Args:
            bits_allocated: BitsAllocated header value
            signed: True when PixelRepresentation is 1

        Returns:
            Matching integer VoxelFormat

        Raises:
            UnsupportedBitDepthError: If bits_allocated is not 8, 16 or 32

        """
        try:
            return _INTEGER_FORMATS[(bits_allocated, signed)]
        except KeyError:
            raise UnsupportedBitDepthError(
                f"Unsupported BitsAllocated value: {bits_allocated}",
                context={"bits_allocated": bits_allocated},
            ) from None


_INTEGER_FORMATS: dict[tuple[int, bool], VoxelFormat] = {
    (8, False): VoxelFormat.UNSIGNED_CHAR,
    (8, True): VoxelFormat.SIGNED_CHAR,
    (16, False): VoxelFormat.UNSIGNED_SHORT,
    (16, True): VoxelFormat.SIGNED_SHORT,
    (32, False): VoxelFormat.UNSIGNED_INT,
    (32, True): VoxelFormat.SIGNED_INT,
}
