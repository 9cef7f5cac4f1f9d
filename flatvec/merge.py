"""Merging of layers whose fill colors are perceptually close."""

import logging
import math
import re
from typing import List, Tuple

from .types import ColorLayer

logger = logging.getLogger(__name__)

# sqrt(255^2 * 3), the largest possible RGB distance
MAX_RGB_DISTANCE = 441.67

_RGB_RE = re.compile(r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)")
_HEX_RE = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})\b")


def parse_color(color: str) -> Tuple[float, float, float]:
    """Parse an rgb()/rgba() or #hex color string.

    Unparseable strings are treated as black.
    """
    match = _RGB_RE.search(color)
    if match:
        return tuple(float(c) for c in match.groups())

    match = _HEX_RE.search(color)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return tuple(float(int(digits[i:i + 2], 16)) for i in (0, 2, 4))

    return (0.0, 0.0, 0.0)


def color_similarity(color1: str, color2: str) -> float:
    """Similarity in [0, 1] from normalized inverse Euclidean RGB distance."""
    r1, g1, b1 = parse_color(color1)
    r2, g2, b2 = parse_color(color2)
    distance = math.sqrt((r1 - r2) ** 2 + (g1 - g2) ** 2 + (b1 - b2) ** 2)
    return 1 - min(distance / MAX_RGB_DISTANCE, 1)


def merge_similar_layers(layers: List[ColorLayer], threshold: float = 0.9) -> List[ColorLayer]:
    """
    Coalesce layers with near-identical colors.

    Each layer joins the first group whose representative (first member)
    scores above the threshold, otherwise it starts a new group. A group of
    several layers becomes one layer with the representative's color and a
    single path made of every member path joined by spaces.

    Args:
        layers: Colored layers in drawing order
        threshold: Similarity above which two colors are grouped

    Returns:
        Merged layers; never more than the input
    """
    groups: List[List[ColorLayer]] = []

    for layer in layers:
        for group in groups:
            if color_similarity(layer.color, group[0].color) > threshold:
                group.append(layer)
                break
        else:
            groups.append([layer])

    merged = []
    for group in groups:
        if len(group) == 1:
            merged.append(group[0])
            continue

        combined = " ".join(path for member in group for path in member.paths if path)
        merged.append(ColorLayer(color=group[0].color, paths=[combined] if combined else []))

    if len(merged) < len(layers):
        logger.info(f"Merged {len(layers)} layers into {len(merged)}")
    return merged
