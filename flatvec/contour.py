"""Contour tracing and ordering over boundary maps."""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .quantize import round_half_up
from .types import Contour, PixelCoord

logger = logging.getLogger(__name__)

# (dx, dy) push order; the stack pops them in reverse
NEIGHBOR_OFFSETS: Tuple[PixelCoord, ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


def trace_contour(
    boundary: np.ndarray,
    start: PixelCoord,
    visited: Optional[np.ndarray] = None,
) -> Contour:
    """Collect the connected boundary cells reachable from start.

    Depth-first traversal with an explicit stack. Neighbours are pushed
    unconditionally and validated when popped, so the same coordinate may
    be pushed several times; the visited grid deduplicates them.

    Args:
        boundary: Boolean boundary map (H, W)
        start: (x, y) cell to start from
        visited: Shared visited grid, updated in place. A fresh one is
            used when None.

    Returns:
        Contour points in traversal order (not geometrically ordered)
    """
    h, w = boundary.shape
    if visited is None:
        visited = np.zeros((h, w), dtype=bool)

    contour: Contour = []
    stack: List[PixelCoord] = [start]

    while stack:
        x, y = stack.pop()
        if x < 0 or x >= w or y < 0 or y >= h:
            continue
        if visited[y, x] or not boundary[y, x]:
            continue

        visited[y, x] = True
        contour.append((x, y))

        for dx, dy in NEIGHBOR_OFFSETS:
            stack.append((x + dx, y + dy))

    return contour


def find_contours(boundary: np.ndarray, min_points: int = 3) -> List[Contour]:
    """Find every connected component of a boundary map.

    Cells are scanned row-major; each unvisited boundary cell starts a new
    trace.

    Args:
        boundary: Boolean boundary map (H, W)
        min_points: Contours with fewer points are discarded

    Returns:
        List of raw contours
    """
    boundary = np.asarray(boundary, dtype=bool)
    visited = np.zeros(boundary.shape, dtype=bool)
    contours: List[Contour] = []
    discarded = 0

    for y, x in zip(*np.nonzero(boundary)):
        if visited[y, x]:
            continue
        contour = trace_contour(boundary, (int(x), int(y)), visited)
        if len(contour) >= min_points:
            contours.append(contour)
        else:
            discarded += 1

    if discarded:
        logger.debug(f"Discarded {discarded} contours shorter than {min_points} points")
    return contours


def order_contour(contour: Contour, stitch_distance: float = 2.5) -> Contour:
    """Arrange a raw contour into a travel-ordered sequence.

    Greedy nearest-neighbour tour from the first point. When the nearest
    unvisited point is farther than stitch_distance, the rounded midpoint
    is inserted first so the outline has no long jumps.

    Args:
        contour: Raw contour points
        stitch_distance: Gap length above which a midpoint is inserted

    Returns:
        Ordered points starting at contour[0], plus any stitch midpoints
    """
    if len(contour) <= 2:
        return list(contour)

    points = np.asarray(contour, dtype=np.float64)
    remaining = np.ones(len(points), dtype=bool)
    remaining[0] = False

    result: Contour = [tuple(contour[0])]
    cx, cy = points[0]

    for _ in range(len(points) - 1):
        dx = points[:, 0] - cx
        dy = points[:, 1] - cy
        distances = np.sqrt(dx * dx + dy * dy)
        distances[~remaining] = np.inf

        # argmin keeps the earliest point on ties
        nearest = int(np.argmin(distances))
        min_distance = distances[nearest]
        if not np.isfinite(min_distance):
            break

        nx, ny = points[nearest]
        if min_distance > stitch_distance:
            mid = round_half_up([cx + (nx - cx) / 2, cy + (ny - cy) / 2])
            result.append((int(mid[0]), int(mid[1])))

        result.append(tuple(contour[nearest]))
        remaining[nearest] = False
        cx, cy = nx, ny

    return result
