"""Series header parsing and slice assembly.

``SeriesParser`` turns one representative slice file into a validated
``VolumeDescriptor`` and then gathers every slice of the same series from the
file's folder into one voxel buffer, checking the slice geometry on the way.

Header problems are fatal and raised as ``VolumeLoadError`` subclasses. Slice
level problems (a slice that does not fit, uneven spacing, a header thickness
that disagrees with the slice locations) are logged, collected in an
``AssemblyReport`` and do not stop the load: real-world series frequently
carry minor metadata inconsistencies.

Note that the slice count is established by a directory scan in
``parse_header`` and re-checked by a second scan in ``load_and_assemble``; the
folder must not change between the two calls.
"""

from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path

from dicom_volume.core.constants import (
    BIG_ENDIAN_TRANSFER_SYNTAX,
    COMPRESSED_TRANSFER_SYNTAXES,
    DICOM_VALUE_SEPARATOR,
    MIN_DISTINCT_SLICE_LOCATIONS,
    SLICE_SPACING_TOLERANCE,
)
from dicom_volume.core.dicom.assembler import VolumeAssembler
from dicom_volume.core.dicom.assembly_types import (
    AssemblyReport,
    AssemblyResult,
    SliceRecord,
    SpacingIrregularity,
    ThicknessCorrection,
)
from dicom_volume.core.dicom.series_discovery import (
    count_series_slices,
    iter_series_slices,
)
from dicom_volume.core.dicom.slice_reader import (
    PydicomSliceReader,
    SliceFile,
    SliceReader,
)
from dicom_volume.core.exceptions import (
    FieldMissingError,
    InsufficientSlicesError,
    SliceCountMismatchError,
    UnsupportedSampleLayoutError,
    UnsupportedTransferSyntaxError,
)
from dicom_volume.core.types import VoxelFormat
from dicom_volume.core.volume_info import VolumeDescriptor
from dicom_volume.utils.logger import get_logger

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_pixel_spacing(text: str) -> tuple[float, float]:
    """Parse a ``row\\column`` PixelSpacing string.

    Components are read left to right until one fails to parse. With a single
    component both axes use it.

    Raises:
        FieldMissingError: If not even the first component is a number

    """
    values: list[float] = []
    for part in text.strip().split(DICOM_VALUE_SEPARATOR)[:2]:
        try:
            values.append(float(part))
        except ValueError:
            break

    if not values:
        raise FieldMissingError("PixelSpacing", context={"value": text})
    if len(values) == 1:
        return values[0], values[0]
    return values[0], values[1]


def parse_instance_number(text: str) -> int:
    """Read the leading integer of an InstanceNumber string.

    Raises:
        FieldMissingError: If the string does not start with an integer

    """
    match = _LEADING_INT.match(text)
    if match is None:
        raise FieldMissingError("InstanceNumber", context={"value": text})
    return int(match.group(1))


def volume_name_from_path(file_path: Path) -> str:
    """Name a volume after the folder holding its slices."""
    name = file_path.parent.name or file_path.stem
    return name.replace(".", "_").replace(" ", "_")


class SeriesParser:
    """Parses and assembles a single-slice-per-file DICOM series.

    Attributes:
        reader: Capability used to open slice files

    """

    def __init__(self, reader: SliceReader | None = None) -> None:
        self.reader = reader or PydicomSliceReader()

    def parse_header(self, file_path: str | Path) -> VolumeDescriptor:
        """Build a validated descriptor from one representative slice.

        The slice count is not taken from any header field: every file with
        the same extension in the folder is opened and those sharing the
        representative's SeriesInstanceUID are counted.

        Args:
            file_path: Any slice file of the series

        Returns:
            Descriptor with ``parse_was_successful`` set

        Raises:
            HeaderUnreadableError: If the file cannot be opened
            FieldMissingError: If a required header field is missing
            UnsupportedSampleLayoutError: For multi-sample pixels
            UnsupportedBitDepthError: If BitsAllocated is not 8, 16 or 32
            UnsupportedTransferSyntaxError: For compressed pixel data

        """
        path = Path(file_path)
        descriptor = VolumeDescriptor(
            data_file_name=str(path), name=volume_name_from_path(path)
        )

        slice_file = self.reader.open(path, with_pixels=False)
        series_uid = slice_file.series_instance_uid

        slice_count = count_series_slices(path.parent, path.suffix, series_uid, self.reader)

        rows, columns = slice_file.rows, slice_file.columns
        descriptor.dimensions = (columns, rows, slice_count)

        spacing_x, spacing_y = parse_pixel_spacing(slice_file.pixel_spacing)
        descriptor.spacing = (spacing_x, spacing_y, slice_file.slice_thickness)

        bits_allocated = slice_file.bits_allocated
        pixel_representation = slice_file.pixel_representation
        samples_per_pixel = slice_file.samples_per_pixel

        if samples_per_pixel == 3:
            raise UnsupportedSampleLayoutError(
                "RGB DICOM files are not supported",
                context={"file_path": str(path), "samples_per_pixel": 3},
            )
        if samples_per_pixel != 1:
            raise UnsupportedSampleLayoutError(
                f"Unsupported SamplesPerPixel value: {samples_per_pixel}",
                context={"file_path": str(path), "samples_per_pixel": samples_per_pixel},
            )

        descriptor.original_format = VoxelFormat.from_bits(
            bits_allocated, signed=pixel_representation == 1
        )
        descriptor.actual_format = descriptor.original_format

        self._check_transfer_syntax(slice_file)

        descriptor.is_compressed = False
        descriptor.parse_was_successful = True

        logger.debug(
            "header_parsed",
            file_path=str(path),
            dimensions=descriptor.dimensions,
            spacing=descriptor.spacing,
            voxel_format=descriptor.original_format.name,
        )
        return descriptor

    @staticmethod
    def _check_transfer_syntax(slice_file: SliceFile) -> None:
        transfer_syntax = slice_file.transfer_syntax_uid
        if transfer_syntax in COMPRESSED_TRANSFER_SYNTAXES:
            raise UnsupportedTransferSyntaxError(
                f"Compressed transfer syntax is not supported: {transfer_syntax}",
                context={"file_path": str(slice_file.path)},
            )
        if transfer_syntax == BIG_ENDIAN_TRANSFER_SYNTAX:
            raise UnsupportedTransferSyntaxError(
                "Explicit VR Big Endian is not supported",
                context={"file_path": str(slice_file.path)},
            )

    def load_and_assemble(
        self, file_path: str | Path, descriptor: VolumeDescriptor
    ) -> AssemblyResult:
        """Read every slice of the series into one contiguous buffer.

        Args:
            file_path: Any slice file of the series
            descriptor: Result of ``parse_header`` for the same file

        Returns:
            Corrected copy of the descriptor, the raw buffer (source format)
            and the report of non-fatal findings

        Raises:
            HeaderUnreadableError: If the representative file cannot be opened
            FieldMissingError: If a slice lacks InstanceNumber or SliceLocation
            InsufficientSlicesError: If fewer than 3 distinct locations exist
            SliceCountMismatchError: If the slice count differs from the depth

        """
        path = Path(file_path)
        series_uid = self.reader.open(path, with_pixels=False).series_instance_uid

        assembler = VolumeAssembler(descriptor)
        slice_locations: list[float] = []
        for slice_file in iter_series_slices(
            path.parent, path.suffix, series_uid, self.reader, with_pixels=True
        ):
            record = SliceRecord(
                file_path=slice_file.path,
                instance_number=parse_instance_number(slice_file.instance_number),
                slice_location=slice_file.slice_location,
                pixel_data=slice_file.pixel_data,
            )
            slice_locations.append(record.slice_location)
            assembler.place(record)

        buffer = assembler.finish()
        report = AssemblyReport(
            placed_slices=assembler.placed_count,
            dropped_slices=assembler.dropped,
        )

        slice_locations.sort()
        thickness = self._measure_slice_thickness(slice_locations, report)

        declared_depth = descriptor.dimensions[2]
        if len(slice_locations) != declared_depth:
            raise SliceCountMismatchError(
                f"Number of slices in the folder {len(slice_locations)} differs "
                f"from the volume depth {declared_depth}",
                context={"found": len(slice_locations), "expected": declared_depth},
            )

        header_thickness = descriptor.spacing[2]
        if abs(header_thickness - thickness) > SLICE_SPACING_TOLERANCE:
            logger.info(
                "slice_thickness_corrected",
                header_thickness=header_thickness,
                computed_thickness=thickness,
            )
            report.thickness_correction = ThicknessCorrection(
                header_thickness=header_thickness, computed_thickness=thickness
            )
            result_descriptor = descriptor.with_slice_spacing(thickness)
        else:
            result_descriptor = replace(descriptor)

        return AssemblyResult(descriptor=result_descriptor, buffer=buffer, report=report)

    @staticmethod
    def _measure_slice_thickness(
        sorted_locations: list[float], report: AssemblyReport
    ) -> float:
        """Slice gap measured from the first two sorted locations.

        Every later gap is compared against that first one; a mismatch is
        logged and recorded but never fatal.
        """
        distinct = len(set(sorted_locations))
        if distinct < MIN_DISTINCT_SLICE_LOCATIONS:
            raise InsufficientSlicesError(
                f"At least {MIN_DISTINCT_SLICE_LOCATIONS} distinct slice locations "
                f"are needed, found {distinct}",
                context={"distinct_locations": distinct},
            )

        thickness = abs(sorted_locations[1] - sorted_locations[0])
        for index in range(2, len(sorted_locations)):
            gap = abs(sorted_locations[index] - sorted_locations[index - 1])
            if abs(gap - thickness) > SLICE_SPACING_TOLERANCE:
                logger.warning(
                    "slice_spacing_irregular",
                    index=index,
                    expected=thickness,
                    actual=gap,
                )
                report.spacing_irregularities.append(
                    SpacingIrregularity(index=index, expected=thickness, actual=gap)
                )
        return thickness
