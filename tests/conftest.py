"""
Pytest configuration and shared fixtures for dicom-volume tests.

The series fixtures write real single-slice DICOM files with pydicom into a
temporary directory, so the parser is exercised end to end.
"""

import tempfile
from collections.abc import Callable, Generator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pydicom
import pytest
import structlog
from pydicom.dataset import FileDataset
from pydicom.uid import ExplicitVRLittleEndian, generate_uid
from structlog.testing import capture_logs as capture_structlog

CT_IMAGE_STORAGE = "1.2.840.10008.5.1.4.1.1.2"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def write_slice(
    path: Path,
    series_uid: str,
    instance_number: int | str | None,
    slice_location: float | None,
    pixels: np.ndarray | None,
    pixel_spacing: Sequence[float] | None = (0.5, 0.5),
    slice_thickness: float | None = 1.0,
    samples_per_pixel: int = 1,
    bits_allocated: int | None = None,
    transfer_syntax: str = ExplicitVRLittleEndian,
) -> Path:
    """Write one single-slice DICOM file.

    ``pixels`` is a (rows, columns) array whose dtype decides BitsAllocated
    and PixelRepresentation. Passing None for an optional field leaves the
    element out of the file.
    """
    file_meta = pydicom.dataset.FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = CT_IMAGE_STORAGE
    file_meta.MediaStorageSOPInstanceUID = generate_uid()
    file_meta.TransferSyntaxUID = transfer_syntax

    dataset = FileDataset(str(path), {}, file_meta=file_meta, preamble=b"\x00" * 128)
    dataset.SOPClassUID = CT_IMAGE_STORAGE
    dataset.SOPInstanceUID = file_meta.MediaStorageSOPInstanceUID
    dataset.StudyInstanceUID = generate_uid()
    dataset.SeriesInstanceUID = series_uid
    dataset.Modality = "CT"
    dataset.PatientName = "Test^Patient"
    dataset.PatientID = "TEST123"

    if instance_number is not None:
        dataset.InstanceNumber = str(instance_number)
    if slice_location is not None:
        dataset.SliceLocation = slice_location
    if pixel_spacing is not None:
        dataset.PixelSpacing = list(pixel_spacing)
    if slice_thickness is not None:
        dataset.SliceThickness = slice_thickness

    dataset.SamplesPerPixel = samples_per_pixel
    dataset.PhotometricInterpretation = "MONOCHROME2"
    if pixels is not None:
        dataset.Rows, dataset.Columns = pixels.shape
        dataset.BitsAllocated = bits_allocated or pixels.dtype.itemsize * 8
        dataset.BitsStored = dataset.BitsAllocated
        dataset.HighBit = dataset.BitsAllocated - 1
        dataset.PixelRepresentation = 1 if pixels.dtype.kind == "i" else 0
        dataset.PixelData = pixels.astype(pixels.dtype.newbyteorder("<")).tobytes()

    dataset.save_as(str(path), enforce_file_format=True)
    return path


@dataclass
class SeriesOnDisk:
    """A series written by the ``series_factory`` fixture."""

    directory: Path
    series_uid: str
    files: list[Path]
    slices: dict[int, np.ndarray] = field(default_factory=dict)  # by instance number

    @property
    def first_file(self) -> Path:
        return self.files[0]


def slice_pixels(instance_number: int, rows: int, columns: int, dtype) -> np.ndarray:
    """Distinct, recognizable pixel values per slice."""
    values = np.arange(rows * columns) + 100 * instance_number
    return values.reshape(rows, columns).astype(dtype)


@pytest.fixture
def slice_writer() -> Callable[..., Path]:
    """Expose ``write_slice`` to tests that need hand-made slices."""
    return write_slice


@pytest.fixture
def series_factory(temp_dir: Path) -> Callable[..., SeriesOnDisk]:
    """Factory writing a series folder.

    Slices are written in the order given; ``instance_numbers`` defaults to
    1..n in that order.
    """

    def _create(
        locations: Sequence[float] = (0.0, 2.0, 4.0),
        instance_numbers: Sequence[int] | None = None,
        rows: int = 2,
        columns: int = 2,
        dtype=np.uint16,
        slice_thickness: float = 1.0,
        directory_name: str = "series",
        series_uid: str | None = None,
    ) -> SeriesOnDisk:
        directory = temp_dir / directory_name
        directory.mkdir(parents=True, exist_ok=True)
        series_uid = series_uid or generate_uid()
        if instance_numbers is None:
            instance_numbers = list(range(1, len(locations) + 1))

        series = SeriesOnDisk(directory=directory, series_uid=series_uid, files=[])
        for index, (location, number) in enumerate(zip(locations, instance_numbers)):
            pixels = slice_pixels(number, rows, columns, dtype)
            path = directory / f"slice{index:03d}.dcm"
            write_slice(
                path,
                series_uid=series_uid,
                instance_number=number,
                slice_location=location,
                pixels=pixels,
                slice_thickness=slice_thickness,
            )
            series.files.append(path)
            series.slices[number] = pixels
        return series

    return _create


@pytest.fixture
def reset_structlog():
    """Reset structlog configuration after a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def capture_logs(reset_structlog):
    """Capture structlog event dicts emitted during a test."""
    with capture_structlog() as captured:
        yield captured
