"""Tests for SSIM fidelity scoring."""

import numpy as np
import pytest

from flatvec.quality import compute_ssim, to_grayscale
from flatvec.types import DimensionMismatchError, Raster


class TestComputeSsim:
    """Test cases for compute_ssim function."""

    def test_identical_images(self, noise_raster):
        assert compute_ssim(noise_raster, noise_raster) == pytest.approx(1.0)

    def test_identical_flat_images(self, make_raster):
        raster = make_raster(20, 20, (120, 30, 200))

        assert compute_ssim(raster, raster) == pytest.approx(1.0)

    def test_different_images(self, noise_raster, make_raster):
        score = compute_ssim(noise_raster, make_raster(40, 40, (128, 128, 128)))

        assert score < 0.5

    def test_inverted_image(self, square_raster):
        inverted = square_raster.pixels.copy()
        inverted[..., :3] = 255 - inverted[..., :3]

        score = compute_ssim(square_raster, Raster.from_array(inverted))

        assert score < 0

    def test_size_mismatch(self, make_raster):
        with pytest.raises(DimensionMismatchError):
            compute_ssim(make_raster(10, 10), make_raster(10, 12))

    def test_tiny_images(self, make_raster):
        """Test that images smaller than a window use a single global window."""
        raster = make_raster(2, 2, (10, 20, 30))

        assert compute_ssim(raster, raster) == pytest.approx(1.0)
        assert compute_ssim(make_raster(2, 2, (0, 0, 0)), make_raster(2, 2)) < 0.01


class TestGrayscale:
    """Test cases for to_grayscale function."""

    def test_luma_weights(self):
        raster = Raster.from_array(np.array([[[100, 0, 0], [0, 100, 0], [0, 0, 100]]], dtype=np.uint8))

        np.testing.assert_array_equal(to_grayscale(raster), [[30.0, 59.0, 11.0]])
