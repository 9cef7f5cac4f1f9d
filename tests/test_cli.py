"""Tests for the command-line interface."""

import pytest

from flatvec.cli import create_parser, main
from flatvec.raster_ingest import raster_to_image


@pytest.fixture
def square_png(square_raster, tmp_path):
    path = tmp_path / "square.png"
    raster_to_image(square_raster).save(path)
    return path


class TestParser:
    """Test cases for argument parsing."""

    def test_defaults(self):
        parsed = create_parser().parse_args(["in.png"])

        assert parsed.colors == 8
        assert parsed.path_precision == 2.0
        assert parsed.smoothing == "balanced"
        assert parsed.workers == -1
        assert not parsed.auto

    def test_invalid_smoothing(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["in.png", "--smoothing", "extreme"])


class TestMain:
    """Test cases for main function."""

    def test_convert(self, square_png, tmp_path, capsys):
        output = tmp_path / "out" / "square.svg"

        exit_code = main([str(square_png), "-o", str(output), "--colors", "12"])

        assert exit_code == 0
        assert output.read_text(encoding="utf-8").count("<path") == 2
        assert "Colors: 12" in capsys.readouterr().out

    def test_default_output_path(self, square_png):
        assert main([str(square_png), "--workers", "1"]) == 0
        assert square_png.with_suffix(".svg").exists()

    def test_analyze_only(self, square_png, capsys):
        exit_code = main([str(square_png), "--analyze"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Text-like: True" in out
        assert "color_precision: 4" in out
        assert not square_png.with_suffix(".svg").exists()

    def test_auto(self, square_png, capsys):
        exit_code = main([str(square_png), "--auto", "--colors", "30"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Suggested mode: precise" in out
        assert "Colors: 4" in out

    def test_strict(self, square_png):
        assert main([str(square_png), "--strict", "--no-merge"]) == 0

    def test_compare(self, square_png, capsys):
        exit_code = main([str(square_png), "--compare", str(square_png)])

        assert exit_code == 0
        assert "SSIM: 1.0000" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        exit_code = main([str(tmp_path / "missing.png")])

        assert exit_code == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_color_precision(self, square_png, capsys):
        exit_code = main([str(square_png), "--colors", "1"])

        assert exit_code == 1
        assert "color_precision" in capsys.readouterr().err

    def test_undecodable_file(self, tmp_path):
        bogus = tmp_path / "bogus.png"
        bogus.write_bytes(b"not an image")

        assert main([str(bogus)]) == 1
