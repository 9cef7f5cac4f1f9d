"""Tests for core types and raster ingestion."""

import numpy as np
import pytest
from PIL import Image

from flatvec.raster_ingest import load_raster, raster_from_image, raster_to_image
from flatvec.types import (
    InvalidRasterError,
    MalformedPathError,
    PathSmoothing,
    ProcessingOptions,
    Raster,
    VectorizationError,
)


class TestRaster:
    """Test cases for Raster class."""

    def test_from_bytes(self):
        data = bytes([255, 0, 0, 255, 0, 255, 0, 128])

        raster = Raster.from_bytes(2, 1, data)

        assert (raster.width, raster.height) == (2, 1)
        assert raster.pixels[0, 1].tolist() == [0, 255, 0, 128]

    def test_from_bytes_wrong_length(self):
        with pytest.raises(InvalidRasterError):
            Raster.from_bytes(2, 2, bytes(15))

    def test_shape_mismatch(self):
        with pytest.raises(InvalidRasterError):
            Raster(width=3, height=2, pixels=np.zeros((3, 2, 4), dtype=np.uint8))

    def test_from_rgb_array(self):
        """Test that RGB input gets an opaque alpha channel."""
        raster = Raster.from_array(np.zeros((4, 5, 3), dtype=np.uint8))

        assert raster.pixels.shape == (4, 5, 4)
        assert raster.opaque_mask.all()

    def test_pixels_read_only(self, make_raster):
        raster = make_raster(3, 3)

        with pytest.raises(ValueError):
            raster.pixels[0, 0, 0] = 1

    def test_opaque_mask_threshold(self):
        image = np.zeros((1, 2, 4), dtype=np.uint8)
        image[0, :, 3] = (127, 128)

        np.testing.assert_array_equal(Raster.from_array(image).opaque_mask, [[False, True]])


class TestProcessingOptions:
    """Test cases for ProcessingOptions class."""

    def test_defaults(self):
        options = ProcessingOptions()

        assert options.to_dict() == {
            "color_precision": 8,
            "path_precision": 2.0,
            "line_threshold": 0.1,
            "path_smoothing": "balanced",
            "gradient_optimization": True,
        }

    def test_coercion(self):
        options = ProcessingOptions(color_precision=12.0, path_precision=3, path_smoothing="high")

        assert options.color_precision == 12
        assert isinstance(options.path_precision, float)
        assert options.path_smoothing is PathSmoothing.HIGH

    @pytest.mark.parametrize("value", [1, 0, -4, 2.5])
    def test_invalid_color_precision(self, value):
        with pytest.raises(ValueError):
            ProcessingOptions(color_precision=value)

    def test_invalid_smoothing(self):
        with pytest.raises(ValueError):
            ProcessingOptions(path_smoothing="extreme")


class TestExceptions:
    def test_malformed_path_error(self):
        error = MalformedPathError(["a", "b"])

        assert isinstance(error, VectorizationError)
        assert error.diagnostics == ["a", "b"]
        assert "2 path problem(s)" in str(error)


class TestRasterIngest:
    """Test cases for image file loading."""

    def test_round_trip_png(self, square_raster, tmp_path):
        path = tmp_path / "square.png"
        raster_to_image(square_raster).save(path)

        loaded = load_raster(path)

        np.testing.assert_array_equal(loaded.pixels, square_raster.pixels)

    def test_palette_image_converted(self):
        img = Image.new("P", (3, 2), color=1)

        raster = raster_from_image(img)

        assert raster.pixels.shape == (2, 3, 4)
        assert raster.opaque_mask.all()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_raster(tmp_path / "nope.png")

    def test_directory(self, tmp_path):
        with pytest.raises(VectorizationError):
            load_raster(tmp_path)

    def test_undecodable(self, tmp_path):
        path = tmp_path / "bad.png"
        path.write_bytes(b"\x00" * 16)

        with pytest.raises(VectorizationError):
            load_raster(path)
