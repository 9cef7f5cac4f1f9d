"""Reconstruction fidelity scoring for offline quality checks."""

import numpy as np
from skimage.metrics import structural_similarity as ssim

from .types import DimensionMismatchError, Raster

# SSIM stabilizing constants for 8-bit data
_C1 = (0.01 * 255) ** 2
_C2 = (0.03 * 255) ** 2


def to_grayscale(raster: Raster) -> np.ndarray:
    """Luma (0.3R + 0.59G + 0.11B) rounded to integers, as float64."""
    rgb = raster.pixels[..., :3].astype(np.float64)
    gray = 0.3 * rgb[..., 0] + 0.59 * rgb[..., 1] + 0.11 * rgb[..., 2]
    return np.floor(gray + 0.5)


def _global_ssim(img1: np.ndarray, img2: np.ndarray) -> float:
    """Single-window SSIM over the whole image."""
    mu1, mu2 = img1.mean(), img2.mean()
    var1 = img1.var()
    var2 = img2.var()
    cov = ((img1 - mu1) * (img2 - mu2)).mean()
    return float(
        ((2 * mu1 * mu2 + _C1) * (2 * cov + _C2))
        / ((mu1 * mu1 + mu2 * mu2 + _C1) * (var1 + var2 + _C2))
    )


def compute_ssim(original: Raster, converted: Raster, win_size: int = 7) -> float:
    """
    Compute Structural Similarity Index (SSIM) between two rasters.

    Both rasters are reduced to grayscale and compared with uniform
    windows. Images smaller than the window fall back to a single window.

    Args:
        original: Source raster
        converted: Re-rendered raster, same size as the source
        win_size: Odd window side length

    Returns:
        SSIM score, 1.0 for identical images

    Raises:
        DimensionMismatchError: If the rasters differ in size
    """
    if (original.width, original.height) != (converted.width, converted.height):
        raise DimensionMismatchError(
            f"Size mismatch: {original.width}x{original.height} vs "
            f"{converted.width}x{converted.height}"
        )
    if original.width == 0 or original.height == 0:
        return 1.0

    img1 = to_grayscale(original)
    img2 = to_grayscale(converted)

    side = min(win_size, original.width, original.height)
    if side % 2 == 0:
        side -= 1
    if side < 3:
        return _global_ssim(img1, img2)

    score = ssim(
        img1,
        img2,
        win_size=side,
        data_range=255,
        gaussian_weights=False,
        use_sample_covariance=False,
    )
    return float(score)
