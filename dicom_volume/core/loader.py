"""Volume loading facade.

``DicomVolumeLoader`` runs the whole ingestion chain for one series:
header parsing, slice assembly and format conversion. It accepts either a
slice file or the folder that holds the series.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from dicom_volume.core.config import Settings, get_settings
from dicom_volume.core.conversion import FormatConverter
from dicom_volume.core.dicom.assembly_types import AssemblyReport
from dicom_volume.core.dicom.series_discovery import list_files
from dicom_volume.core.dicom.series_parser import SeriesParser
from dicom_volume.core.dicom.slice_reader import PydicomSliceReader, SliceReader
from dicom_volume.core.exceptions import HeaderUnreadableError
from dicom_volume.core.volume_info import VolumeDescriptor
from dicom_volume.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LoadedVolume:
    """A fully ingested volume, owned by the caller."""

    descriptor: VolumeDescriptor
    buffer: np.ndarray
    report: AssemblyReport

    def as_array(self) -> np.ndarray:
        """View the buffer as a (z, y, x) array in the actual format."""
        x, y, z = self.descriptor.dimensions
        return self.buffer.view(self.descriptor.actual_format.dtype).reshape(z, y, x)


class DicomVolumeLoader:
    """Loads a DICOM series into a single voxel buffer.

    Attributes:
        settings: Loader defaults (extension, conversion flags, size limit)
        parser: Series parser used for header and slice work
        converter: Format converter applied after assembly

    """

    def __init__(
        self,
        reader: SliceReader | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if reader is None:
            reader = PydicomSliceReader(max_file_size=self.settings.max_file_size_bytes)
        self.parser = SeriesParser(reader)
        self.converter = FormatConverter()

    def resolve_slice_file(self, path: str | Path) -> Path:
        """Return ``path`` itself, or the first slice file when given a folder.

        Raises:
            HeaderUnreadableError: If a folder holds no file with the configured extension

        """
        path = Path(path)
        if not path.is_dir():
            return path

        names = list_files(path, self.settings.loader.file_extension)
        if not names:
            raise HeaderUnreadableError(
                f"No '{self.settings.loader.file_extension}' files in {path}",
                context={"directory": str(path)},
            )
        return path / names[0]

    def parse_header(self, path: str | Path) -> VolumeDescriptor:
        return self.parser.parse_header(self.resolve_slice_file(path))

    def load(
        self,
        path: str | Path,
        normalize: bool | None = None,
        convert_to_float: bool | None = None,
    ) -> LoadedVolume:
        """Ingest a series.

        Args:
            path: A slice file of the series or the folder holding it
            normalize: Override the configured normalize flag
            convert_to_float: Override the configured float conversion flag

        Returns:
            The converted volume with its descriptor and assembly report

        Raises:
            VolumeLoadError: Any terminal ingestion failure

        """
        if normalize is None:
            normalize = self.settings.loader.normalize
        if convert_to_float is None:
            convert_to_float = self.settings.loader.convert_to_float

        slice_file = self.resolve_slice_file(path)
        descriptor = self.parser.parse_header(slice_file)
        assembled = self.parser.load_and_assemble(slice_file, descriptor)
        descriptor, buffer = self.converter.convert(
            assembled.buffer, assembled.descriptor, normalize, convert_to_float
        )

        logger.info(
            "volume_loaded",
            name=descriptor.name,
            dimensions=descriptor.dimensions,
            spacing=descriptor.spacing,
            original_format=descriptor.original_format.name,
            actual_format=descriptor.actual_format.name,
            dropped_slices=len(assembled.report.dropped_slices),
        )
        return LoadedVolume(descriptor=descriptor, buffer=buffer, report=assembled.report)
