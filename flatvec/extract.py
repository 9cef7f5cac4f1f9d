"""Layer rasterization and boundary extraction."""

import numpy as np
from scipy.ndimage import binary_erosion

from .quantize import ColorBucket
from .types import EmptyLayerError

# 8-neighbourhood including the center cell
_NEIGHBORHOOD = np.ones((3, 3), dtype=bool)


def build_bitmap(bucket: ColorBucket, width: int, height: int) -> np.ndarray:
    """Create the occupancy grid for one color bucket.

    Args:
        bucket: Color bucket whose pixels are marked
        width: Raster width
        height: Raster height

    Returns:
        Boolean array (height, width), True where the pixel belongs to the bucket

    Raises:
        EmptyLayerError: If the bucket has no pixels
    """
    if len(bucket) == 0:
        raise EmptyLayerError(f"Bucket {bucket.color} has no pixels")

    bitmap = np.zeros((height, width), dtype=bool)
    bitmap[bucket.pixels[:, 1], bucket.pixels[:, 0]] = True
    return bitmap


def find_boundaries(bitmap: np.ndarray, include_border: bool = False) -> np.ndarray:
    """Mark occupied cells that touch empty space.

    A cell is a boundary cell when it is occupied and at least one of its 8
    neighbours is not. Only interior cells (1 <= y <= h-2, 1 <= x <= w-2)
    are evaluated; the outermost rows and columns always stay False.

    With include_border=True the edge rows and columns are evaluated as
    well, counting out-of-range neighbours as empty.

    Args:
        bitmap: Boolean occupancy grid (H, W)
        include_border: Evaluate edge cells too

    Returns:
        Boolean boundary map (H, W)
    """
    bitmap = np.asarray(bitmap, dtype=bool)
    h, w = bitmap.shape
    boundary = np.zeros((h, w), dtype=bool)

    if bitmap.size == 0:
        return boundary
    if not include_border and (h < 3 or w < 3):
        return boundary

    # A cell survives erosion only if all of its neighbours are occupied
    eroded = binary_erosion(
        bitmap,
        structure=_NEIGHBORHOOD,
        border_value=0 if include_border else 1,
    )
    boundary = bitmap & ~eroded

    if not include_border:
        boundary[0, :] = False
        boundary[-1, :] = False
        boundary[:, 0] = False
        boundary[:, -1] = False

    return boundary
