"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from flatvec.types import Raster


def solid_image(height: int, width: int, color, alpha: int = 255) -> np.ndarray:
    """RGBA array filled with one color."""
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[..., :3] = color
    image[..., 3] = alpha
    return image


@pytest.fixture
def make_raster():
    """Factory for solid-color rasters."""

    def _make(height: int, width: int, color=(255, 255, 255), alpha: int = 255) -> Raster:
        return Raster.from_array(solid_image(height, width, color, alpha))

    return _make


@pytest.fixture
def square_raster():
    """30x30 white raster with a black 10x10 square at rows/cols 10-19."""
    image = solid_image(30, 30, (255, 255, 255))
    image[10:20, 10:20, :3] = 0
    return Raster.from_array(image)


@pytest.fixture
def near_black_raster():
    """30x30 raster: light top band, two near-black halves below."""
    image = solid_image(30, 30, (250, 250, 250))
    image[10:, :15, :3] = (10, 10, 10)
    image[10:, 15:, :3] = (12, 11, 9)
    return Raster.from_array(image)


@pytest.fixture
def noise_raster():
    """Seeded random RGBA noise, fully opaque."""
    rng = np.random.default_rng(42)
    image = rng.integers(0, 256, (40, 40, 4), dtype=np.uint8)
    image[..., 3] = 255
    return Raster.from_array(image)
