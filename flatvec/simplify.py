"""Curve simplification module using Douglas-Peucker algorithm."""

from typing import List, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]


def tolerance_for(path_precision: float) -> float:
    """Simplification tolerance for a path precision setting.

    Higher precision gives a lower tolerance and keeps more detail.
    """
    return 6.0 - float(path_precision)


def point_to_segment_distance(point: Sequence[float], start: Sequence[float], end: Sequence[float]) -> float:
    """Distance from a point to the segment start-end.

    The projection parameter is clamped to [0, 1], so points beyond either
    end measure to the nearest endpoint. A zero-length segment measures to
    its single point.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy

    if length_sq == 0:
        return float(np.hypot(point[0] - start[0], point[1] - start[1]))

    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return float(np.hypot(point[0] - (start[0] + t * dx), point[1] - (start[1] + t * dy)))


def _segment_distances(points: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    """Vectorized point_to_segment_distance for an (N, 2) array."""
    delta = end - start
    length_sq = float(delta @ delta)
    offsets = points - start

    if length_sq == 0:
        return np.hypot(offsets[:, 0], offsets[:, 1])

    t = np.clip((offsets @ delta) / length_sq, 0.0, 1.0)
    projected = start + t[:, None] * delta
    diff = points - projected
    return np.hypot(diff[:, 0], diff[:, 1])


def simplify_path(points: Sequence[Point], tolerance: float) -> List[Point]:
    """Simplify an ordered point sequence using Douglas-Peucker.

    Raw contours follow every boundary pixel. This keeps only the points
    that deviate from the chord by at least the tolerance, removing
    redundant points on straight runs.

    Args:
        points: Ordered (x, y) points
        tolerance: Maximum perpendicular deviation allowed when collapsing
                   a run of points to its endpoints

    Returns:
        Simplified point list; first and last points are always kept.
        Equivalent to the recursive split-at-farthest-point formulation.
    """
    points = [tuple(p) for p in points]
    if len(points) <= 2:
        return points

    coords = np.asarray(points, dtype=np.float64)
    keep = np.zeros(len(points), dtype=bool)
    keep[0] = keep[-1] = True

    # Explicit stack of (first, last) slices in place of recursion
    stack = [(0, len(points) - 1)]
    while stack:
        lo, hi = stack.pop()
        if hi - lo < 2:
            continue

        # Coincident endpoints cannot form a segment
        if points[lo] == points[hi]:
            continue

        distances = _segment_distances(coords[lo + 1:hi], coords[lo], coords[hi])
        offset = int(np.argmax(distances))
        max_distance = float(distances[offset])

        # Zero deviation always collapses, whatever the tolerance
        if max_distance < tolerance or max_distance <= 0:
            continue

        index = lo + 1 + offset
        keep[index] = True
        stack.append((index, hi))
        stack.append((lo, index))

    return [p for p, kept in zip(points, keep) if kept]


def simplify_contours(contours: List[List[Point]], path_precision: float) -> List[List[Point]]:
    """Simplify multiple ordered contours with the tolerance for path_precision."""
    tolerance = tolerance_for(path_precision)
    return [simplify_path(c, tolerance) for c in contours]
