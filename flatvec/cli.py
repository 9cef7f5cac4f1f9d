"""Command-line interface for flatvec."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .analyze import analyze_image
from .pipeline import Pipeline
from .quality import compute_ssim
from .raster_ingest import load_raster
from .svg import layers_to_svg, save_svg
from .types import MalformedPathError, PathSmoothing, PipelineConfig, ProcessingOptions
from .validate import assert_valid_paths


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="flatvec",
        description="Convert raster images to flat-colored SVG outlines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Manual options
  flatvec input.png -o output.svg --colors 12 --path-precision 3

  # Options recommended by image analysis
  flatvec input.png --auto

  # Only print the analysis
  flatvec input.png --analyze
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output SVG file path (default: input name with .svg extension)",
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Derive all options from image analysis (manual option flags are ignored)",
    )

    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Print the image analysis and exit",
    )

    parser.add_argument(
        "--colors",
        "-c",
        type=int,
        default=8,
        help="Color precision: quantization steps per channel (default: 8)",
    )

    parser.add_argument(
        "--path-precision",
        "-p",
        type=float,
        default=2.0,
        help="Path precision; simplification tolerance is 6 minus this (default: 2.0)",
    )

    parser.add_argument(
        "--line-threshold",
        type=float,
        default=0.1,
        help="Line threshold, recorded in metadata (default: 0.1)",
    )

    parser.add_argument(
        "--smoothing",
        choices=[s.value for s in PathSmoothing],
        default=PathSmoothing.BALANCED.value,
        help="Path smoothing level, recorded in metadata (default: balanced)",
    )

    parser.add_argument(
        "--no-merge",
        action="store_true",
        help="Keep layers with near-identical colors separate",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=-1,
        help="Worker threads for per-color tracing (-1 = auto, 1 = serial)",
    )

    parser.add_argument(
        "--include-border",
        action="store_true",
        help="Trace boundaries on the outermost image rows and columns too",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any output path is still malformed after repair",
    )

    parser.add_argument(
        "--compare",
        default=None,
        help="Rendered image of the output to score against the input (SSIM)",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(parsed.input)
    output_path = parsed.output or str(input_path.with_suffix(".svg"))

    try:
        print(f"Processing: {parsed.input}")
        raster = load_raster(input_path)
        print(f"  Size: {raster.width}x{raster.height}")

        if parsed.analyze or parsed.auto:
            analysis = analyze_image(raster)
            print(f"  Entropy: {analysis.entropy:.3f}")
            print(f"  Complexity: {analysis.complexity:.3f}")
            print(f"  Text-like: {analysis.has_text}")
            print(f"  Suggested mode: {analysis.suggested_mode.value}")
            if parsed.analyze:
                for key, value in analysis.options.to_dict().items():
                    print(f"  {key}: {value}")
                return 0
            options = analysis.options
        else:
            options = ProcessingOptions(
                color_precision=parsed.colors,
                path_precision=parsed.path_precision,
                line_threshold=parsed.line_threshold,
                path_smoothing=parsed.smoothing,
                gradient_optimization=not parsed.no_merge,
            )

        config = PipelineConfig(
            parallel_workers=parsed.workers,
            include_border=parsed.include_border,
        )

        print(f"  Colors: {options.color_precision}")
        print(f"  Path precision: {options.path_precision}")

        result = Pipeline(config).process(raster, options)

        if parsed.strict:
            assert_valid_paths(result.paths)

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        save_svg(layers_to_svg(result), output_path)
        print(f"  Layers: {len(result.layers)}, paths: {len(result.paths)}")
        print(f"  Output saved: {output_path}")

        if parsed.compare:
            score = compute_ssim(raster, load_raster(parsed.compare))
            print(f"  SSIM: {score:.4f}")

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except MalformedPathError as e:
        print(f"Error: output paths are malformed: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: invalid option: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error processing image: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
