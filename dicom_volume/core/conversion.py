"""Voxel buffer format conversion.

Turns the raw assembled buffer into what the renderer wants: normalized
unsigned integers, float32, or the source format unchanged. The input buffer
is consumed; callers must only use the buffer returned.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np

from dicom_volume.core.types import VoxelFormat
from dicom_volume.core.volume_info import VolumeDescriptor
from dicom_volume.utils.logger import get_logger

logger = get_logger(__name__)


class FormatConverter:
    """Normalizes or widens voxel buffers.

    Exactly one branch runs per call, picked by two flags:

    - ``normalize``: rescale [min, max] to the full uint8 range (1-byte
      sources) or uint16 range (wider sources)
    - ``convert_to_float``: widen to float32, unless the source already is float
    - neither: pass the buffer through untouched

    ``normalize`` wins when both are set.

    Attributes:
        chunk_size: Samples rescaled per step; bounds the float64 temporaries

    """

    def __init__(self, chunk_size: int = 1 << 20) -> None:
        self.chunk_size = chunk_size

    def convert(
        self,
        buffer: np.ndarray,
        descriptor: VolumeDescriptor,
        normalize: bool,
        convert_to_float: bool,
    ) -> tuple[VolumeDescriptor, np.ndarray]:
        """Convert an assembled buffer.

        Args:
            buffer: 1-D uint8 buffer in ``descriptor.original_format``
            descriptor: Descriptor of the buffer
            normalize: Rescale to the full unsigned integer range
            convert_to_float: Widen to float32 when not normalizing

        Returns:
            Updated copy of the descriptor and the resulting 1-D uint8 buffer

        """
        source_format = descriptor.original_format
        samples = buffer.view(source_format.dtype)

        if samples.size:
            min_value, max_value = float(samples.min()), float(samples.max())
        else:
            min_value = max_value = 0.0

        result = replace(
            descriptor,
            min_value=min_value,
            max_value=max_value,
            is_normalized=normalize,
        )

        if normalize:
            out_format = (
                VoxelFormat.UNSIGNED_SHORT
                if source_format.bytes_per_voxel > 1
                else VoxelFormat.UNSIGNED_CHAR
            )
            converted = self._normalize(samples, min_value, max_value, out_format)
            result.actual_format = out_format
        elif convert_to_float and not source_format.is_float:
            converted = samples.astype(VoxelFormat.FLOAT.dtype)
            result.actual_format = VoxelFormat.FLOAT
        else:
            result.actual_format = source_format
            logger.debug("conversion_skipped", voxel_format=source_format.name)
            return result, buffer

        logger.debug(
            "volume_converted",
            source_format=source_format.name,
            actual_format=result.actual_format.name,
            min_value=min_value,
            max_value=max_value,
        )
        return result, converted.view(np.uint8)

    def _normalize(
        self,
        samples: np.ndarray,
        min_value: float,
        max_value: float,
        out_format: VoxelFormat,
    ) -> np.ndarray:
        """``round((s - min) / (max - min) * out_max)`` clamped to [0, out_max].

        A constant volume (max == min) maps to all zeros.
        """
        out_max = out_format.value_range()[1]
        value_range = max_value - min_value
        out = np.zeros(samples.size, dtype=out_format.dtype)
        if value_range == 0:
            return out

        for start in range(0, samples.size, self.chunk_size):
            stop = start + self.chunk_size
            chunk = samples[start:stop].astype(np.float64)
            chunk -= min_value
            chunk /= value_range
            chunk *= out_max
            np.rint(chunk, out=chunk)
            np.clip(chunk, 0, out_max, out=chunk)
            out[start:stop] = chunk
        return out
