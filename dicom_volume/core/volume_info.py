"""Geometric and sample-format metadata for one volume.

A ``VolumeDescriptor`` starts out empty, is filled in by the series parser as
header fields are validated and only counts as valid once
``parse_was_successful`` is set. Sizes are always derived from dimensions and
the current format, never stored separately.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .serialization import SerializableMixin
from .types import VoxelFormat


@dataclass
class VolumeDescriptor(SerializableMixin):
    """Metadata describing a volume and its voxel buffer.

    Attributes:
        data_file_name: Representative file the descriptor was parsed from
        name: Display name, derived from the containing folder
        dimensions: Voxel counts along x, y, z
        spacing: Physical voxel size along x, y, z (mm)
        original_format: Sample format found in the source files
        actual_format: Sample format of the buffer after conversion
        min_value: Smallest observed source sample
        max_value: Largest observed source sample
        is_normalized: Whether the buffer was rescaled to the full unsigned range
        is_compressed: Whether the source data is compressed
        parse_was_successful: Set once every required header field was read

    """

    data_file_name: str = ""
    name: str = ""
    dimensions: tuple[int, int, int] = (0, 0, 0)
    spacing: tuple[float, float, float] = (0.0, 0.0, 0.0)
    original_format: VoxelFormat = VoxelFormat.UNSIGNED_CHAR
    actual_format: VoxelFormat = VoxelFormat.UNSIGNED_CHAR
    min_value: float = 0.0
    max_value: float = 0.0
    is_normalized: bool = False
    is_compressed: bool = False
    parse_was_successful: bool = False

    @property
    def world_dimensions(self) -> tuple[float, float, float]:
        """Physical extent of the volume: spacing times dimensions per axis."""
        return (
            self.spacing[0] * self.dimensions[0],
            self.spacing[1] * self.dimensions[1],
            self.spacing[2] * self.dimensions[2],
        )

    @property
    def total_voxels(self) -> int:
        x, y, z = self.dimensions
        return x * y * z

    @property
    def bytes_per_voxel(self) -> int:
        return self.actual_format.bytes_per_voxel

    @property
    def byte_size(self) -> int:
        return self.total_voxels * self.bytes_per_voxel

    @property
    def slice_byte_size(self) -> int:
        """Bytes occupied by one xy slice in the current format."""
        return self.dimensions[0] * self.dimensions[1] * self.bytes_per_voxel

    @property
    def is_signed(self) -> bool:
        return self.original_format.is_signed

    def with_slice_spacing(self, thickness: float) -> VolumeDescriptor:
        """Copy of this descriptor with the z spacing replaced."""
        return replace(self, spacing=(self.spacing[0], self.spacing[1], thickness))

    def normalize_value(self, value: float) -> float:
        """Map a raw sample value into [0, 1] using the observed min/max.

        Values outside the observed range fall outside [0, 1]. A constant
        volume maps everything to 0.
        """
        value_range = self.max_value - self.min_value
        if value_range == 0:
            return 0.0
        return (value - self.min_value) / value_range

    def denormalize_value(self, value: float) -> float:
        """Inverse of ``normalize_value``."""
        return self.min_value + value * (self.max_value - self.min_value)

    def normalize_range(self, value_range: float) -> float:
        """Scale a raw-unit width (e.g. a window width) into normalized units."""
        full_range = self.max_value - self.min_value
        if full_range == 0:
            return 0.0
        return value_range / full_range

    def _custom_serialization(self, data: dict[str, Any]) -> dict[str, Any]:
        data["world_dimensions"] = list(self.world_dimensions)
        data["byte_size"] = self.byte_size
        data["bytes_per_voxel"] = self.bytes_per_voxel
        return data
