"""Raster image ingestion: decode image files into RGBA rasters."""
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from flatvec.types import Raster, VectorizationError


def raster_from_image(img: Image.Image) -> Raster:
    """
    Convert a Pillow image to a Raster.

    Args:
        img: Pillow image in any mode

    Returns:
        Raster with RGBA samples
    """
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return Raster.from_array(np.array(img, dtype=np.uint8))


def load_raster(path: Union[str, Path]) -> Raster:
    """
    Load a raster image file.

    Args:
        path: Path to image file

    Returns:
        Raster with RGBA samples, EXIF orientation applied

    Raises:
        FileNotFoundError: If file doesn't exist
        VectorizationError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise VectorizationError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            return raster_from_image(img)

    except (IOError, OSError) as e:
        raise VectorizationError(f"Failed to load image {path}: {e}")


def raster_to_image(raster: Raster) -> Image.Image:
    """Convert a Raster back to an RGBA Pillow image."""
    return Image.fromarray(np.array(raster.pixels))
