"""Transfer-function curves.

A transfer function maps a normalized window position in [0, 1] to a color
with opacity. ``CurveSampler`` is everything the bitmask generator needs;
``ColorCurve`` is a piecewise-linear implementation that can also be baked
into a lookup table for the renderer.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NamedTuple, Protocol

import numpy as np

from dicom_volume.core.constants import TRANSFER_FUNCTION_SAMPLE_COUNT


class LinearColor(NamedTuple):
    """RGBA color with float components, alpha being opacity."""

    r: float
    g: float
    b: float
    a: float


class CurveSampler(Protocol):
    """Anything that can be sampled for a color at a position in [0, 1]."""

    def sample(self, position: float) -> LinearColor: ...


class ColorCurve:
    """Piecewise-linear RGBA curve.

    Keys are (position, color) pairs. Sampling interpolates linearly between
    neighbouring keys and holds the first/last key's color outside them.

    Example:
        >>> curve = ColorCurve([(0.0, (0, 0, 0, 0)), (1.0, (1, 1, 1, 1))])
        >>> curve.sample(0.5).a
        0.5

    """

    def __init__(
        self, keys: Iterable[tuple[float, Sequence[float]]]
    ) -> None:
        ordered = sorted(((float(p), tuple(c)) for p, c in keys), key=lambda k: k[0])
        if not ordered:
            raise ValueError("ColorCurve needs at least one key")
        for _, color in ordered:
            if len(color) != 4:
                raise ValueError(f"Curve colors must have 4 components, got {color}")

        self._positions = np.array([p for p, _ in ordered], dtype=np.float64)
        self._colors = np.array([c for _, c in ordered], dtype=np.float64)

    @classmethod
    def default(cls) -> ColorCurve:
        """Grey ramp from black to white, fully opaque everywhere."""
        return cls([(0.0, (0.0, 0.0, 0.0, 1.0)), (1.0, (1.0, 1.0, 1.0, 1.0))])

    @classmethod
    def constant(cls, color: Sequence[float]) -> ColorCurve:
        return cls([(0.0, color)])

    def sample(self, position: float) -> LinearColor:
        channels = [
            float(np.interp(position, self._positions, self._colors[:, channel]))
            for channel in range(4)
        ]
        return LinearColor(*channels)

    def to_texture(
        self, sample_count: int = TRANSFER_FUNCTION_SAMPLE_COUNT, height: int = 1
    ) -> np.ndarray:
        """Bake the curve into a half-float RGBA lookup table.

        Sample ``i`` is taken at ``i / (sample_count - 1)``; rows are copies
        of each other.

        Returns:
            Array of shape (height, sample_count, 4), dtype float16

        """
        if sample_count < 2:
            raise ValueError("sample_count must be at least 2")
        positions = np.linspace(0.0, 1.0, sample_count)
        row = np.stack(
            [np.interp(positions, self._positions, self._colors[:, c]) for c in range(4)],
            axis=-1,
        ).astype(np.float16)
        return np.repeat(row[np.newaxis, :, :], height, axis=0)
