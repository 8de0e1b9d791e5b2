"""Shared constants for volume ingestion and transfer-function masking.

Values here are fixed by the rendering side (bucket count, opacity threshold)
or by the DICOM standard (transfer syntax UIDs) and are intentionally not
exposed through configuration.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Series Geometry
# =============================================================================

#: Absolute tolerance when comparing slice spacings (same unit as the source, mm)
SLICE_SPACING_TOLERANCE: Final[float] = 0.0001

#: Distinct slice locations needed before thickness can be estimated
MIN_DISTINCT_SLICE_LOCATIONS: Final[int] = 3

#: Separator between multi-valued DICOM string components (e.g. PixelSpacing)
DICOM_VALUE_SEPARATOR: Final[str] = "\\"

# =============================================================================
# Transfer Function Bitmask
# =============================================================================

#: Number of coarse intensity buckets encoded in the mask (bit 31 unused)
BITMASK_BUCKET_COUNT: Final[int] = 31

#: Mask covering every valid bucket bit
BITMASK_FULL: Final[int] = (1 << BITMASK_BUCKET_COUNT) - 1

#: Curve samples taken per bucket before declaring it transparent
BITMASK_SAMPLES_PER_BUCKET: Final[int] = 8

#: Alpha above which a curve sample counts as visible
OPACITY_THRESHOLD: Final[float] = 0.001

#: Samples baked into a transfer-function lookup texture
TRANSFER_FUNCTION_SAMPLE_COUNT: Final[int] = 256

# =============================================================================
# Transfer Syntaxes
# =============================================================================

#: Transfer syntaxes whose pixel data is stored uncompressed, little endian
UNCOMPRESSED_TRANSFER_SYNTAXES: Final[frozenset[str]] = frozenset(
    {
        "1.2.840.10008.1.2",  # Implicit VR Little Endian
        "1.2.840.10008.1.2.1",  # Explicit VR Little Endian
    }
)

#: Compressed or encapsulated transfer syntaxes that are rejected
COMPRESSED_TRANSFER_SYNTAXES: Final[frozenset[str]] = frozenset(
    {
        "1.2.840.10008.1.2.1.99",  # Deflated Explicit VR Little Endian
        "1.2.840.10008.1.2.4.50",  # JPEG Baseline
        "1.2.840.10008.1.2.4.51",  # JPEG Extended
        "1.2.840.10008.1.2.4.57",  # JPEG Lossless
        "1.2.840.10008.1.2.4.70",  # JPEG Lossless SV1
        "1.2.840.10008.1.2.4.80",  # JPEG-LS Lossless
        "1.2.840.10008.1.2.4.81",  # JPEG-LS Lossy
        "1.2.840.10008.1.2.4.90",  # JPEG 2000 Lossless
        "1.2.840.10008.1.2.4.91",  # JPEG 2000
        "1.2.840.10008.1.2.5",  # RLE Lossless
    }
)

#: Explicit VR Big Endian (retired); pixel bytes would need swapping
BIG_ENDIAN_TRANSFER_SYNTAX: Final[str] = "1.2.840.10008.1.2.2"
