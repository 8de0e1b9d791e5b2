"""Directory scanning for slice files of one series."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from dicom_volume.core.dicom.slice_reader import SliceFile, SliceReader
from dicom_volume.core.exceptions import VolumeLoadError
from dicom_volume.utils.logger import get_logger

logger = get_logger(__name__)


def list_files(directory: str | Path, extension: str) -> list[str]:
    """List file names in ``directory`` with the given extension.

    Not recursive. The match is case-insensitive and ``extension`` may be given
    with or without its leading dot; an empty extension matches every file.

    Args:
        directory: Folder to scan
        extension: Extension such as ".dcm"

    Returns:
        Sorted file names (not paths); empty when the directory does not exist

    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    suffix = extension.lower()
    if suffix and not suffix.startswith("."):
        suffix = f".{suffix}"

    return sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.is_file() and (not suffix or entry.suffix.lower() == suffix)
    )


def iter_series_slices(
    directory: str | Path,
    extension: str,
    series_uid: str,
    reader: SliceReader,
    with_pixels: bool = False,
) -> Iterator[SliceFile]:
    """Yield opened slices in ``directory`` that belong to ``series_uid``.

    Files that cannot be opened or carry no series identifier are skipped, as
    are files of other series.
    """
    directory = Path(directory)
    for file_name in list_files(directory, extension):
        path = directory / file_name
        try:
            slice_file = reader.open(path, with_pixels=with_pixels)
            file_series_uid = slice_file.series_instance_uid
        except VolumeLoadError as e:
            logger.debug("slice_skipped", file_path=str(path), reason=e.message)
            continue

        if file_series_uid == series_uid:
            yield slice_file


def count_series_slices(
    directory: str | Path, extension: str, series_uid: str, reader: SliceReader
) -> int:
    """Count files in ``directory`` sharing ``series_uid``. Full O(n) scan."""
    return sum(1 for _ in iter_series_slices(directory, extension, series_uid, reader))
