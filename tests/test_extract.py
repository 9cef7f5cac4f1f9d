"""Tests for layer rasterization and boundary extraction."""

import numpy as np
import pytest

from flatvec.extract import build_bitmap, find_boundaries
from flatvec.quantize import ColorBucket, quantize_colors
from flatvec.types import EmptyLayerError


class TestBuildBitmap:
    """Test cases for build_bitmap function."""

    def test_marks_bucket_pixels(self):
        """Test that only the bucket's pixels are set."""
        bucket = ColorBucket(key=(0.0, 0.0, 0.0), pixels=np.array([[0, 0], [2, 1]]))

        bitmap = build_bitmap(bucket, width=3, height=2)

        expected = np.array([[True, False, False], [False, False, True]])
        np.testing.assert_array_equal(bitmap, expected)

    def test_empty_bucket(self):
        """Test that a bucket without pixels raises EmptyLayerError."""
        bucket = ColorBucket(key=(0.0, 0.0, 0.0), pixels=np.zeros((0, 2), dtype=np.int64))

        with pytest.raises(EmptyLayerError):
            build_bitmap(bucket, 4, 4)


class TestFindBoundaries:
    """Test cases for find_boundaries function."""

    def test_flat_4x4_has_no_boundary(self, make_raster):
        """Test the 4x4 single-color case: interior cells see only occupied neighbours."""
        raster = make_raster(4, 4, (200, 50, 50))
        bucket = next(iter(quantize_colors(raster, 8).values()))

        bitmap = build_bitmap(bucket, 4, 4)
        boundary = find_boundaries(bitmap)

        assert bitmap.all()
        assert not boundary.any()

    def test_square_ring(self):
        """Test that a filled square yields its one-pixel outline."""
        bitmap = np.zeros((12, 12), dtype=bool)
        bitmap[3:9, 3:9] = True

        boundary = find_boundaries(bitmap)

        expected = bitmap.copy()
        expected[4:8, 4:8] = False
        np.testing.assert_array_equal(boundary, expected)

    def test_hole_outline(self):
        """Test that cells around a hole are boundary cells."""
        bitmap = np.ones((5, 5), dtype=bool)
        bitmap[2, 2] = False

        boundary = find_boundaries(bitmap)

        expected = np.zeros((5, 5), dtype=bool)
        expected[1:4, 1:4] = True
        expected[2, 2] = False
        np.testing.assert_array_equal(boundary, expected)

    def test_border_cells_never_marked(self):
        """Test that a region touching the image edge keeps its edge cells out."""
        bitmap = np.zeros((6, 6), dtype=bool)
        bitmap[:, :3] = True

        boundary = find_boundaries(bitmap)

        assert not boundary[0, :].any()
        assert not boundary[-1, :].any()
        assert not boundary[:, 0].any()
        np.testing.assert_array_equal(np.nonzero(boundary[:, 2])[0], [1, 2, 3, 4])

    @pytest.mark.parametrize("shape", [(2, 10), (10, 2), (1, 1), (2, 2)])
    def test_small_rasters(self, shape):
        """Test that rasters under 3 cells in either dimension have no boundary."""
        bitmap = np.zeros(shape, dtype=bool)
        bitmap[0, 0] = True

        assert not find_boundaries(bitmap).any()

    def test_include_border(self):
        """Test the border-inclusive policy treats out-of-range cells as empty."""
        bitmap = np.ones((4, 4), dtype=bool)

        boundary = find_boundaries(bitmap, include_border=True)

        expected = np.ones((4, 4), dtype=bool)
        expected[1:3, 1:3] = False
        np.testing.assert_array_equal(boundary, expected)

    def test_include_border_small(self):
        """Test the border-inclusive policy on a raster with no interior."""
        bitmap = np.ones((2, 2), dtype=bool)

        assert find_boundaries(bitmap, include_border=True).all()
