"""Image analysis heuristics that recommend processing options."""

import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np
from scipy.ndimage import correlate

from .types import PathSmoothing, ProcessingOptions, Raster

logger = logging.getLogger(__name__)

# Practical ceiling of per-channel entropy for 8-bit samples
MAX_ENTROPY = 8.0

# Gradient magnitude above which a cell counts as an edge
EDGE_THRESHOLD = 30.0

# Column and row difference kernels, averaged over the 3 rows/columns
_KERNEL_X = np.array([[1, 0, -1], [1, 0, -1], [1, 0, -1]], dtype=np.float64)
_KERNEL_Y = np.array([[1, 1, 1], [0, 0, 0], [-1, -1, -1]], dtype=np.float64)


class SuggestedMode(str, Enum):
    PRECISE = "precise"
    BALANCED = "balanced"
    FAST = "fast"


@dataclass
class ImageAnalysis:
    """Result of analyzing a raster."""

    options: ProcessingOptions
    has_text: bool
    complexity: float
    entropy: float
    suggested_mode: SuggestedMode


def _round(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def calculate_image_entropy(raster: Raster) -> float:
    """
    Average Shannon entropy of the R, G and B histograms.

    Only opaque pixels (alpha >= 128) are counted in the histograms;
    probabilities are taken over the full pixel count.

    Args:
        raster: Input raster

    Returns:
        Mean channel entropy in bits (0 for a single flat color)
    """
    total = raster.width * raster.height
    if total == 0:
        return 0.0

    opaque = raster.pixels[raster.opaque_mask]
    entropies = []
    for channel in range(3):
        counts = np.bincount(opaque[:, channel], minlength=256)
        probabilities = counts[counts > 0] / total
        entropies.append(float(-np.sum(probabilities * np.log2(probabilities))))

    return sum(entropies) / 3


def color_precision_for_entropy(entropy: float) -> int:
    """Recommend color_precision from image entropy.

    Busier images get more colors.
    """
    if entropy > 7.5:
        return int(_clamp(_round(entropy * 1.8), 16, 24))
    elif entropy > 6:
        return int(_clamp(_round(entropy * 1.5), 12, 16))
    elif entropy > 4.5:
        return int(_clamp(_round(entropy * 1.2), 8, 12))
    else:
        return int(_clamp(_round(entropy), 4, 8))


def options_for_entropy(entropy: float) -> ProcessingOptions:
    """Recommend a full option set from image entropy."""
    complexity = entropy / MAX_ENTROPY

    if complexity > 0.7:
        path_precision, line_threshold, smoothing = 2.5, 0.05, PathSmoothing.MINIMAL
    elif complexity > 0.5:
        path_precision, line_threshold, smoothing = 2.0, 0.08, PathSmoothing.BALANCED
    else:
        path_precision, line_threshold, smoothing = 1.5, 0.1, PathSmoothing.HIGH

    return ProcessingOptions(
        color_precision=color_precision_for_entropy(entropy),
        path_precision=path_precision,
        line_threshold=line_threshold,
        path_smoothing=smoothing,
        # Complex images are more likely to contain gradients
        gradient_optimization=complexity > 0.4,
    )


def detect_text_content(raster: Raster) -> bool:
    """
    Guess whether the raster is dominated by text.

    Builds an edge map from the red-channel gradient of interior pixels,
    then looks at edge density and at how many edge cells have horizontal
    versus vertical edge neighbours. Text has a moderate density and a
    balanced direction ratio.

    Args:
        raster: Input raster

    Returns:
        True if the image looks text-like
    """
    h, w = raster.height, raster.width
    if h < 3 or w < 3:
        return False

    red = raster.pixels[..., 0].astype(np.float64)
    gx = np.abs(correlate(red, _KERNEL_X, mode="nearest")) / 3
    gy = np.abs(correlate(red, _KERNEL_Y, mode="nearest")) / 3
    magnitude = np.sqrt(gx * gx + gy * gy)

    edges = np.zeros((h, w), dtype=bool)
    edges[1:-1, 1:-1] = magnitude[1:-1, 1:-1] > EDGE_THRESHOLD

    edge_density = np.count_nonzero(edges) / (w * h)

    left = np.zeros_like(edges)
    left[:, 1:] = edges[:, :-1]
    right = np.zeros_like(edges)
    right[:, :-1] = edges[:, 1:]
    up = np.zeros_like(edges)
    up[1:, :] = edges[:-1, :]
    down = np.zeros_like(edges)
    down[:-1, :] = edges[1:, :]

    horizontal_edges = np.count_nonzero(edges & (left | right))
    vertical_edges = np.count_nonzero(edges & (up | down))
    direction_ratio = horizontal_edges / (vertical_edges or 1)

    logger.debug(
        f"Edge density {edge_density:.3f}, direction ratio {direction_ratio:.3f}"
    )
    return bool(0.05 < edge_density < 0.3 and 0.7 < direction_ratio < 1.5)


def analyze_image(raster: Raster) -> ImageAnalysis:
    """
    Analyze a raster and recommend a processing strategy.

    Args:
        raster: Input raster

    Returns:
        ImageAnalysis with recommended options, text flag, complexity
        (entropy / 8) and suggested mode
    """
    entropy = calculate_image_entropy(raster)
    has_text = detect_text_content(raster)
    complexity = entropy / MAX_ENTROPY

    if has_text or complexity > 0.7:
        suggested_mode = SuggestedMode.PRECISE
    elif complexity > 0.4:
        suggested_mode = SuggestedMode.BALANCED
    else:
        suggested_mode = SuggestedMode.FAST

    options = options_for_entropy(entropy)

    # Text needs crisper outlines and no color merging
    if has_text:
        options.path_precision = min(options.path_precision + 0.5, 5)
        options.line_threshold = max(options.line_threshold - 0.02, 0.01)
        options.path_smoothing = PathSmoothing.MINIMAL
        options.gradient_optimization = False

    logger.info(
        f"Analysis: entropy={entropy:.2f}, complexity={complexity:.2f}, "
        f"text={has_text}, mode={suggested_mode.value}"
    )

    return ImageAnalysis(
        options=options,
        has_text=has_text,
        complexity=complexity,
        entropy=entropy,
        suggested_mode=suggested_mode,
    )
