"""Slice file reading -- the capability the series parser is written against.

``SliceReader`` and ``SliceFile`` describe what ingestion needs from a
single-slice container. ``PydicomSliceReader`` is the concrete implementation
backed by pydicom; tests or other decoders can plug in anything with the same
shape.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import pydicom
from pydicom.dataset import Dataset
from pydicom.multival import MultiValue
from pydicom.tag import Tag

from dicom_volume.core.constants import DICOM_VALUE_SEPARATOR
from dicom_volume.core.exceptions import FieldMissingError, HeaderUnreadableError
from dicom_volume.utils.logger import get_logger

logger = get_logger(__name__)

#: Elements every readable DICOM instance carries; a forced read of a
#: non-DICOM file lacks them
REQUIRED_ELEMENTS = (
    Tag(0x0008, 0x0016),  # SOPClassUID
    Tag(0x0008, 0x0018),  # SOPInstanceUID
)


class SliceFile(Protocol):
    """Header fields and pixel payload of one opened slice."""

    path: Path

    @property
    def series_instance_uid(self) -> str: ...

    @property
    def rows(self) -> int: ...

    @property
    def columns(self) -> int: ...

    @property
    def pixel_spacing(self) -> str: ...

    @property
    def slice_thickness(self) -> float: ...

    @property
    def bits_allocated(self) -> int: ...

    @property
    def pixel_representation(self) -> int: ...

    @property
    def samples_per_pixel(self) -> int: ...

    @property
    def instance_number(self) -> str: ...

    @property
    def slice_location(self) -> float: ...

    @property
    def transfer_syntax_uid(self) -> str | None: ...

    @property
    def pixel_data(self) -> bytes: ...


class SliceReader(Protocol):
    """Opens slice containers."""

    def open(self, path: Path, with_pixels: bool = True) -> SliceFile: ...


class PydicomSliceFile:
    """``SliceFile`` over a pydicom Dataset.

    Every accessor raises ``FieldMissingError`` naming the DICOM keyword when
    the element is absent, empty or cannot be converted.
    """

    def __init__(self, dataset: Dataset, path: Path) -> None:
        self.dataset = dataset
        self.path = path

    def _require(self, keyword: str) -> Any:
        try:
            value = self.dataset.get(keyword)
        except (ValueError, TypeError, OverflowError) as e:
            raise FieldMissingError(keyword, context={"file_path": str(self.path)}) from e
        if value is None or value == "":
            raise FieldMissingError(keyword, context={"file_path": str(self.path)})
        return value

    def _require_int(self, keyword: str) -> int:
        value = self._require(keyword)
        try:
            return int(value)
        except (ValueError, TypeError) as e:
            raise FieldMissingError(keyword, context={"file_path": str(self.path)}) from e

    def _require_float(self, keyword: str) -> float:
        value = self._require(keyword)
        try:
            return float(value)
        except (ValueError, TypeError) as e:
            raise FieldMissingError(keyword, context={"file_path": str(self.path)}) from e

    @property
    def series_instance_uid(self) -> str:
        return str(self._require("SeriesInstanceUID")).strip()

    @property
    def rows(self) -> int:
        return self._require_int("Rows")

    @property
    def columns(self) -> int:
        return self._require_int("Columns")

    @property
    def pixel_spacing(self) -> str:
        """PixelSpacing as the backslash-delimited string stored in the file."""
        value = self._require("PixelSpacing")
        if isinstance(value, (MultiValue, list, tuple)):
            return DICOM_VALUE_SEPARATOR.join(str(v) for v in value)
        return str(value)

    @property
    def slice_thickness(self) -> float:
        return self._require_float("SliceThickness")

    @property
    def bits_allocated(self) -> int:
        return self._require_int("BitsAllocated")

    @property
    def pixel_representation(self) -> int:
        return self._require_int("PixelRepresentation")

    @property
    def samples_per_pixel(self) -> int:
        return self._require_int("SamplesPerPixel")

    @property
    def instance_number(self) -> str:
        return str(self._require("InstanceNumber")).strip()

    @property
    def slice_location(self) -> float:
        return self._require_float("SliceLocation")

    @property
    def transfer_syntax_uid(self) -> str | None:
        file_meta = getattr(self.dataset, "file_meta", None)
        if file_meta is None:
            return None
        uid = file_meta.get("TransferSyntaxUID")
        return str(uid) if uid else None

    @property
    def pixel_data(self) -> bytes:
        return bytes(self._require("PixelData"))


class PydicomSliceReader:
    """Opens slice files with ``pydicom.dcmread``.

    Attributes:
        max_file_size: Files larger than this many bytes are refused

    """

    def __init__(self, max_file_size: int | None = None) -> None:
        self.max_file_size = max_file_size

    def open(self, path: Path, with_pixels: bool = True) -> PydicomSliceFile:
        """Open a slice file.

        Args:
            path: Slice file to open
            with_pixels: Read PixelData too; headers-only reads are much faster

        Returns:
            Opened slice

        Raises:
            HeaderUnreadableError: If the file is missing, too large or not parseable

        """
        path = Path(path)
        if not path.is_file():
            raise HeaderUnreadableError(
                f"File does not exist: {path}", context={"file_path": str(path)}
            )

        if self.max_file_size is not None:
            file_size = path.stat().st_size
            if file_size > self.max_file_size:
                raise HeaderUnreadableError(
                    f"File size {file_size} exceeds maximum {self.max_file_size}",
                    context={"file_path": str(path), "file_size": file_size},
                )

        try:
            dataset = pydicom.dcmread(
                str(path), force=True, stop_before_pixels=not with_pixels
            )
        except Exception as e:
            logger.debug("slice_unreadable", file_path=str(path), error=str(e))
            raise HeaderUnreadableError(
                f"Failed to read DICOM file: {e}", context={"file_path": str(path)}
            ) from e

        missing_elements = [str(tag) for tag in REQUIRED_ELEMENTS if tag not in dataset]
        if missing_elements:
            logger.debug(
                "slice_unreadable", file_path=str(path), missing_elements=missing_elements
            )
            raise HeaderUnreadableError(
                f"Not a DICOM instance, missing required elements: {missing_elements}",
                context={"file_path": str(path), "missing_elements": missing_elements},
            )

        return PydicomSliceFile(dataset, path)
