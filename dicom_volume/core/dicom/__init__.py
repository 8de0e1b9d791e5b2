"""DICOM series I/O -- Discovery, Reading, Parsing and Assembly.

Exports:
- list_files: non-recursive extension-filtered directory listing
- PydicomSliceReader: open single-slice files with pydicom
- SeriesParser: validate a series header and assemble its slices
- VolumeAssembler: place slice payloads into one contiguous buffer
- AssemblyReport: non-fatal findings of an assembly
"""

from .assembler import VolumeAssembler
from .assembly_types import (
    AssemblyReport,
    AssemblyResult,
    DroppedSlice,
    SliceRecord,
    SpacingIrregularity,
    ThicknessCorrection,
)
from .series_discovery import count_series_slices, iter_series_slices, list_files
from .series_parser import SeriesParser
from .slice_reader import PydicomSliceFile, PydicomSliceReader, SliceFile, SliceReader

__all__ = [
    "AssemblyReport",
    "AssemblyResult",
    "DroppedSlice",
    "PydicomSliceFile",
    "PydicomSliceReader",
    "SeriesParser",
    "SliceFile",
    "SliceReader",
    "SliceRecord",
    "SpacingIrregularity",
    "ThicknessCorrection",
    "VolumeAssembler",
    "count_series_slices",
    "iter_series_slices",
    "list_files",
]
