"""Data types shared by the series parser and the volume assembler.

The non-fatal outcomes of an assembly (dropped slices, uneven spacing, a
corrected slice thickness) are plain records rather than exceptions so
callers can inspect them after a successful load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from dicom_volume.core.serialization import SerializableMixin
from dicom_volume.core.volume_info import VolumeDescriptor


@dataclass
class SliceRecord:
    """One slice read from disk, waiting to be placed in the volume."""

    file_path: Path
    instance_number: int  # 1-based, as declared in the file
    slice_location: float
    pixel_data: bytes

    @property
    def placement(self) -> int:
        """0-based z index derived from the declared instance number."""
        return self.instance_number - 1

    @property
    def byte_length(self) -> int:
        return len(self.pixel_data)


@dataclass
class DroppedSlice(SerializableMixin):
    """A slice left out of the buffer because it did not fit."""

    file_path: Path
    instance_number: int
    reason: str


@dataclass
class SpacingIrregularity(SerializableMixin):
    """A pair of neighbouring slices whose gap differs from the first gap."""

    index: int  # position of the later slice in sorted location order
    expected: float
    actual: float


@dataclass
class ThicknessCorrection(SerializableMixin):
    """Header slice thickness replaced by the value measured from locations."""

    header_thickness: float
    computed_thickness: float


@dataclass
class AssemblyReport(SerializableMixin):
    """Non-fatal findings of one assembly."""

    placed_slices: int = 0
    dropped_slices: list[DroppedSlice] = field(default_factory=list)
    spacing_irregularities: list[SpacingIrregularity] = field(default_factory=list)
    thickness_correction: ThicknessCorrection | None = None

    @property
    def warnings(self) -> list[DroppedSlice | SpacingIrregularity]:
        """Findings that were logged as warnings.

        A thickness correction is applied silently and is not listed here.
        """
        return [*self.dropped_slices, *self.spacing_irregularities]

    @property
    def has_warnings(self) -> bool:
        return bool(self.dropped_slices or self.spacing_irregularities)

    def _custom_serialization(self, data: dict[str, Any]) -> dict[str, Any]:
        data["warning_count"] = len(self.warnings)
        return data


@dataclass
class AssemblyResult:
    """Descriptor, voxel buffer and report handed back by a successful load."""

    descriptor: VolumeDescriptor
    buffer: np.ndarray
    report: AssemblyReport
