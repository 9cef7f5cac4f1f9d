"""flatvec: flat-color raster to vector outline conversion.

Quantizes pixel colors into a small palette, traces the boundary of each
color layer, and emits simplified closed SVG path strings per layer.
"""

from flatvec.types import (
    ColorLayer,
    DimensionMismatchError,
    EmptyLayerError,
    InvalidRasterError,
    MalformedPathError,
    PathSmoothing,
    PipelineConfig,
    ProcessingOptions,
    ProcessingResult,
    Raster,
    RunSupersededError,
    VectorizationError,
)

__version__ = "0.1.0"
__all__ = [
    "ColorLayer",
    "DimensionMismatchError",
    "EmptyLayerError",
    "InvalidRasterError",
    "MalformedPathError",
    "PathSmoothing",
    "PipelineConfig",
    "ProcessingOptions",
    "ProcessingResult",
    "Raster",
    "RunSupersededError",
    "VectorizationError",
]
