"""Color quantization module using fixed-step color binning."""

import logging
from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from .svg import format_rgb
from .types import ColorKey, PixelCoord, Raster

logger = logging.getLogger(__name__)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer with halves going toward +infinity."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


@dataclass
class ColorBucket:
    """Pixels sharing one quantized color."""

    key: ColorKey
    pixels: np.ndarray  # (N, 2) int array of (x, y), row-major order

    @property
    def color(self) -> str:
        return format_rgb(self.key)

    def coords(self) -> List[PixelCoord]:
        return [(int(x), int(y)) for x, y in self.pixels]

    def __len__(self) -> int:
        return len(self.pixels)


def quantize_colors(
    raster: Raster, color_precision: int, alpha_threshold: int = 128
) -> Dict[ColorKey, ColorBucket]:
    """Bucket opaque pixels into a bounded palette.

    Each channel is snapped to the nearest multiple of 256 / color_precision.
    Pixels with alpha below the threshold are dropped and belong to no
    bucket.

    Args:
        raster: Input raster
        color_precision: Quantization steps per channel (must be >= 2)
        alpha_threshold: Minimum alpha for a pixel to count as opaque

    Returns:
        Dict mapping quantized (r, g, b) to its bucket, in order of the
        first pixel seen for each color

    Raises:
        ValueError: If color_precision < 2
    """
    if color_precision < 2:
        raise ValueError(f"color_precision must be >= 2, got {color_precision}")

    step = 256 / color_precision
    opaque = raster.pixels[..., 3] >= alpha_threshold
    ys, xs = np.nonzero(opaque)

    if len(ys) == 0:
        return {}

    rgb = raster.pixels[ys, xs, :3].astype(np.float64)
    quantized = round_half_up(rgb / step) * step

    keys, first_index, inverse = np.unique(
        quantized, axis=0, return_index=True, return_inverse=True
    )
    inverse = inverse.reshape(-1)

    # Group pixel indices per key, keeping row-major order within each group
    order = np.argsort(inverse, kind="stable")
    counts = np.bincount(inverse, minlength=len(keys))
    groups = np.split(order, np.cumsum(counts)[:-1])

    buckets: Dict[ColorKey, ColorBucket] = {}
    for key_idx in np.argsort(first_index, kind="stable"):
        members = groups[key_idx]
        key = tuple(float(c) for c in keys[key_idx])
        buckets[key] = ColorBucket(
            key=key,
            pixels=np.column_stack([xs[members], ys[members]]).astype(np.int64),
        )

    logger.debug(f"Quantized {len(ys)} opaque pixels into {len(buckets)} buckets")
    return buckets


def count_raw_colors(raster: Raster, alpha_threshold: int = 128) -> int:
    """Count distinct RGB triples among opaque pixels."""
    opaque = raster.pixels[..., 3] >= alpha_threshold
    rgb = raster.pixels[opaque][:, :3]
    if len(rgb) == 0:
        return 0
    return int(len(np.unique(rgb, axis=0)))
