"""Tests for VolumeAssembler."""

from pathlib import Path

import numpy as np
import pytest

from dicom_volume.core.dicom.assembler import VolumeAssembler
from dicom_volume.core.dicom.assembly_types import AssemblyReport, SliceRecord
from dicom_volume.core.types import VoxelFormat
from dicom_volume.core.volume_info import VolumeDescriptor


def make_descriptor(x=2, y=2, z=3, voxel_format=VoxelFormat.UNSIGNED_SHORT):
    return VolumeDescriptor(
        dimensions=(x, y, z),
        spacing=(1.0, 1.0, 1.0),
        original_format=voxel_format,
        actual_format=voxel_format,
        parse_was_successful=True,
    )


def record(instance_number: int, payload: bytes) -> SliceRecord:
    return SliceRecord(
        file_path=Path(f"slice{instance_number}.dcm"),
        instance_number=instance_number,
        slice_location=float(instance_number),
        pixel_data=payload,
    )


class TestPlace:
    """Placement by declared instance number."""

    def test_offsets_follow_instance_numbers(self):
        assembler = VolumeAssembler(make_descriptor())
        for number in (3, 1, 2):
            assert assembler.place(record(number, bytes([number]) * 8))

        buffer = assembler.finish()

        assert buffer.size == 24
        assert buffer.tolist() == [1] * 8 + [2] * 8 + [3] * 8
        assert assembler.placed_count == 3

    def test_missing_slice_stays_zero(self):
        assembler = VolumeAssembler(make_descriptor())
        assembler.place(record(1, b"\x01" * 8))
        assembler.place(record(3, b"\x03" * 8))

        buffer = assembler.finish()

        assert not buffer[8:16].any()

    def test_past_the_end_is_dropped(self, capture_logs):
        assembler = VolumeAssembler(make_descriptor())

        assert not assembler.place(record(4, b"\x04" * 8))
        assert assembler.dropped[0].instance_number == 4
        assert assembler.dropped[0].reason == "slice data exceeds volume buffer"
        assert not assembler.finish().any()
        assert capture_logs[0]["event"] == "slice_dropped"
        assert capture_logs[0]["log_level"] == "warning"

    def test_oversized_last_slice_is_dropped(self):
        assembler = VolumeAssembler(make_descriptor())

        assert not assembler.place(record(3, b"\x03" * 12))
        assert len(assembler.dropped) == 1

    def test_instance_zero_is_dropped(self):
        assembler = VolumeAssembler(make_descriptor())

        assert not assembler.place(record(0, b"\x00" * 8))
        assert assembler.dropped[0].reason == "instance number below 1"
        assert assembler.placed_count == 0

    def test_padding_byte_stripped(self):
        descriptor = make_descriptor(x=3, y=1, z=3, voxel_format=VoxelFormat.UNSIGNED_CHAR)
        assembler = VolumeAssembler(descriptor)
        for number in (1, 2, 3):
            assert assembler.place(record(number, bytes([number] * 3) + b"\x00"))

        assert assembler.finish().tolist() == [1, 1, 1, 2, 2, 2, 3, 3, 3]

    def test_short_slice_fills_its_prefix(self):
        assembler = VolumeAssembler(make_descriptor())
        assembler.place(record(2, b"\x07" * 4))

        buffer = assembler.finish()

        assert buffer[8:12].tolist() == [7] * 4
        assert not buffer[12:].any()


class TestFinish:
    """Buffer handoff."""

    def test_finish_twice_raises(self):
        assembler = VolumeAssembler(make_descriptor())
        assembler.finish()

        with pytest.raises(RuntimeError):
            assembler.finish()

    def test_place_after_finish_raises(self):
        assembler = VolumeAssembler(make_descriptor())
        assembler.finish()

        with pytest.raises(RuntimeError):
            assembler.place(record(1, b"\x00" * 8))

    def test_buffer_is_owned_uint8(self):
        buffer = VolumeAssembler(make_descriptor()).finish()

        assert buffer.dtype == np.uint8
        assert buffer.flags.owndata


class TestAssemblyReport:
    """Report helpers."""

    def test_empty_report(self):
        report = AssemblyReport()

        assert not report.has_warnings
        assert report.to_dict()["warning_count"] == 0

    def test_dropped_slices_are_warnings(self):
        assembler = VolumeAssembler(make_descriptor())
        assembler.place(record(9, b"\x00" * 8))
        report = AssemblyReport(placed_slices=0, dropped_slices=assembler.dropped)

        assert report.has_warnings
        data = report.to_dict()
        assert data["warning_count"] == 1
        assert data["dropped_slices"][0]["file_path"] == "slice9.dcm"
