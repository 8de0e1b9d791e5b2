"""Copies slice payloads into one contiguous voxel buffer.

The assembler owns the buffer while slices are being placed. ``finish()``
hands it to the caller and drops the assembler's reference, so at no point do
two owners hold it.
"""

from __future__ import annotations

import numpy as np

from dicom_volume.core.dicom.assembly_types import DroppedSlice, SliceRecord
from dicom_volume.core.volume_info import VolumeDescriptor
from dicom_volume.utils.logger import get_logger

logger = get_logger(__name__)


class VolumeAssembler:
    """Places slices at ``(instance_number - 1) * slice_byte_size``.

    Slices are positioned by their declared instance number, never by the
    order in which they were read. A slice that would land before the start
    or past the end of the buffer is dropped and recorded in ``dropped``.

    Attributes:
        descriptor: Geometry and source format of the volume being built
        dropped: Slices that were rejected
        placed_count: Number of slices copied into the buffer

    """

    def __init__(self, descriptor: VolumeDescriptor) -> None:
        self.descriptor = descriptor
        self.dropped: list[DroppedSlice] = []
        self.placed_count = 0
        self._buffer: np.ndarray | None = np.zeros(descriptor.byte_size, dtype=np.uint8)

    def place(self, record: SliceRecord) -> bool:
        """Copy one slice into the buffer.

        Args:
            record: Slice to place

        Returns:
            True when placed, False when dropped

        Raises:
            RuntimeError: If called after ``finish()``

        """
        if self._buffer is None:
            raise RuntimeError("Volume buffer was already handed off")

        slice_bytes = self.descriptor.slice_byte_size
        payload = record.pixel_data
        # PixelData is padded to an even length
        if slice_bytes % 2 == 1 and len(payload) == slice_bytes + 1:
            payload = payload[:slice_bytes]

        offset = record.placement * slice_bytes
        if record.placement < 0:
            return self._drop(record, "instance number below 1")
        if offset + len(payload) > self._buffer.size:
            return self._drop(record, "slice data exceeds volume buffer")

        self._buffer[offset : offset + len(payload)] = np.frombuffer(payload, dtype=np.uint8)
        self.placed_count += 1
        return True

    def _drop(self, record: SliceRecord, reason: str) -> bool:
        logger.warning(
            "slice_dropped",
            file_path=str(record.file_path),
            instance_number=record.instance_number,
            byte_length=record.byte_length,
            buffer_size=self.descriptor.byte_size,
            reason=reason,
        )
        self.dropped.append(
            DroppedSlice(
                file_path=record.file_path,
                instance_number=record.instance_number,
                reason=reason,
            )
        )
        return False

    def finish(self) -> np.ndarray:
        """Hand the assembled buffer to the caller.

        Raises:
            RuntimeError: If the buffer was already handed off

        """
        if self._buffer is None:
            raise RuntimeError("Volume buffer was already handed off")
        buffer, self._buffer = self._buffer, None
        return buffer
