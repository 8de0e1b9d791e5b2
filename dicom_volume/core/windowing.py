"""Windowing transforms and the transfer-function visibility bitmask.

The intensity range [0, 1] is split into 31 equal buckets. The bitmask flags
the buckets that can produce a visible sample under the current window and
transfer function, so the renderer can skip bricks whose values only fall in
unflagged buckets. The 31-bit mask travels to the shader as the bit pattern of
a float32.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from dicom_volume.core.constants import (
    BITMASK_BUCKET_COUNT,
    BITMASK_FULL,
    BITMASK_SAMPLES_PER_BUCKET,
    OPACITY_THRESHOLD,
)
from dicom_volume.core.transfer_function import CurveSampler
from dicom_volume.core.volume_info import VolumeDescriptor


@dataclass(frozen=True)
class WindowingTransform:
    """Center/width window over normalized intensities.

    Window position 0 sits at ``center - width / 2`` and position 1 at
    ``center + width / 2``. A negative width inverts the window.

    Attributes:
        center: Normalized intensity at window position 0.5
        width: Normalized intensity span of the window
        low_cutoff: Values below the window are transparent instead of clamped
        high_cutoff: Values above the window are transparent instead of clamped

    """

    center: float = 0.5
    width: float = 1.0
    low_cutoff: bool = False
    high_cutoff: bool = False

    @classmethod
    def from_raw(
        cls,
        center: float,
        width: float,
        descriptor: VolumeDescriptor,
        low_cutoff: bool = False,
        high_cutoff: bool = False,
    ) -> WindowingTransform:
        """Build a transform from a window in raw sample units (e.g. HU)."""
        return cls(
            center=descriptor.normalize_value(center),
            width=descriptor.normalize_range(width),
            low_cutoff=low_cutoff,
            high_cutoff=high_cutoff,
        )

    def to_intensity(self, position: float) -> float:
        return self.center + (position - 0.5) * self.width

    def to_position(self, intensity: float) -> float:
        if self.width == 0:
            return 0.0 if intensity < self.center else 1.0
        return (intensity - self.center) / self.width + 0.5


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp into [low, high]; NaN maps to ``low``."""
    if math.isnan(value):
        return low
    return min(max(value, low), high)


def _bucket_index(intensity: float) -> int:
    return min(int(intensity * BITMASK_BUCKET_COUNT), BITMASK_BUCKET_COUNT - 1)


def _is_visible(curve: CurveSampler, position: float) -> bool:
    return curve.sample(position).a > OPACITY_THRESHOLD


def compute_window_bitmask(
    transform: WindowingTransform, edge_bits: int, curve: CurveSampler
) -> int:
    """Compute the visibility mask as a plain integer.

    Args:
        transform: Current window
        edge_bits: Rounds of growing every set run by one bucket each side
        curve: Transfer function sampled at window positions

    Returns:
        Mask with bit ``i`` set when bucket ``i`` may be visible

    """
    low_bucket = _bucket_index(_clamp(transform.to_intensity(0.0)))
    high_bucket = _bucket_index(_clamp(transform.to_intensity(1.0)))
    if low_bucket > high_bucket:
        low_bucket, high_bucket = high_bucket, low_bucket

    mask = 0

    # Outside a non-clipping window values render with the boundary color.
    if not transform.low_cutoff and _is_visible(curve, 0.0):
        mask |= (1 << low_bucket) - 1
    if not transform.high_cutoff and _is_visible(curve, 1.0):
        mask |= BITMASK_FULL & ~((1 << high_bucket) - 1)

    last_step = BITMASK_SAMPLES_PER_BUCKET - 1
    for bucket in range(low_bucket, high_bucket + 1):
        for step in range(BITMASK_SAMPLES_PER_BUCKET):
            intensity = (bucket + step / last_step) / BITMASK_BUCKET_COUNT
            if _is_visible(curve, _clamp(transform.to_position(intensity))):
                mask |= 1 << bucket
                break

    for _ in range(max(edge_bits, 0)):
        grown = (mask | (mask << 1) | (mask >> 1)) & BITMASK_FULL
        if grown == mask:
            break
        mask = grown

    return mask


def pack_bitmask(mask: int) -> np.float32:
    """Reinterpret a mask's bits as a float32 (no numeric conversion)."""
    return np.array([mask & 0xFFFFFFFF], dtype=np.uint32).view(np.float32)[0]


def unpack_bitmask(value: np.float32) -> int:
    """Reinterpret a float32 produced by ``pack_bitmask`` back into the mask."""
    return int(np.asarray(value, dtype=np.float32).view(np.uint32))


def generate_window_bitmask(
    transform: WindowingTransform, edge_bits: int, curve: CurveSampler
) -> np.float32:
    """Compute the visibility mask packed for the shading stage.

    Keep the result as ``numpy.float32``; converting it to a Python float can
    rewrite NaN bit patterns.
    """
    return pack_bitmask(compute_window_bitmask(transform, edge_bits, curve))
