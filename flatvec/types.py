"""Common types and exceptions for flatvec."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

import numpy as np

# Type aliases
PixelCoord = Tuple[int, int]
Contour = List[PixelCoord]
ColorKey = Tuple[float, float, float]
PathData = str


class VectorizationError(Exception):
    """Base exception for vectorization errors."""

    pass


class InvalidRasterError(VectorizationError):
    """Exception raised when raster samples do not match the declared size."""

    pass


class DimensionMismatchError(VectorizationError):
    """Exception raised when two rasters that must match differ in size."""

    pass


class EmptyLayerError(VectorizationError):
    """Exception raised when a color layer has no pixels."""

    pass


class MalformedPathError(VectorizationError):
    """Exception raised when path strings still fail validation."""

    def __init__(self, diagnostics: List[str]):
        self.diagnostics = list(diagnostics)
        super().__init__(
            f"{len(self.diagnostics)} path problem(s): " + "; ".join(self.diagnostics[:3])
        )


class RunSupersededError(VectorizationError):
    """Exception raised when a newer run makes an in-flight run stale."""

    pass


@dataclass(frozen=True)
class Raster:
    """Decoded image: row-major RGBA samples, one byte per channel."""

    width: int
    height: int
    pixels: np.ndarray  # (height, width, 4) uint8

    def __post_init__(self):
        if self.pixels.shape != (self.height, self.width, 4):
            raise InvalidRasterError(
                f"Expected pixels of shape {(self.height, self.width, 4)}, "
                f"got {self.pixels.shape}"
            )
        if self.pixels.dtype != np.uint8:
            raise InvalidRasterError(f"Expected uint8 samples, got {self.pixels.dtype}")
        self.pixels.setflags(write=False)

    @classmethod
    def from_array(cls, image: np.ndarray) -> "Raster":
        """Create a raster from an (H, W, 3) or (H, W, 4) array.

        RGB input gets a fully opaque alpha channel.
        """
        image = np.asarray(image)
        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise InvalidRasterError(f"Expected (H, W, 3) or (H, W, 4) array, got {image.shape}")

        if image.dtype != np.uint8:
            image = np.clip(image, 0, 255).astype(np.uint8)

        if image.shape[2] == 3:
            alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
            image = np.concatenate([image, alpha], axis=2)
        else:
            image = image.copy()

        height, width = image.shape[:2]
        return cls(width=width, height=height, pixels=image)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: Union[bytes, bytearray]) -> "Raster":
        """Create a raster from flat row-major RGBA bytes."""
        if width < 0 or height < 0:
            raise InvalidRasterError(f"Invalid raster size {width}x{height}")
        expected = width * height * 4
        if len(data) != expected:
            raise InvalidRasterError(
                f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}"
            )
        pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4).copy()
        return cls(width=width, height=height, pixels=pixels)

    @property
    def opaque_mask(self) -> np.ndarray:
        """(H, W) mask of pixels with alpha >= 128."""
        return self.pixels[..., 3] >= 128


class PathSmoothing(str, Enum):
    """Advisory smoothing level carried in the option set."""

    HIGH = "high"
    BALANCED = "balanced"
    MINIMAL = "minimal"


@dataclass
class ProcessingOptions:
    """Option set driving one vectorization run."""

    # Number of quantization steps per channel
    color_precision: int = 8

    # Higher precision means lower simplification tolerance
    path_precision: float = 2.0

    # Advisory only in the contour backend
    line_threshold: float = 0.1
    path_smoothing: PathSmoothing = PathSmoothing.BALANCED

    # Gates merging of perceptually close layers
    gradient_optimization: bool = True

    def __post_init__(self):
        if int(self.color_precision) != self.color_precision:
            raise ValueError(f"color_precision must be an integer, got {self.color_precision}")
        self.color_precision = int(self.color_precision)
        if self.color_precision < 2:
            raise ValueError(f"color_precision must be >= 2, got {self.color_precision}")
        self.path_precision = float(self.path_precision)
        self.line_threshold = float(self.line_threshold)
        self.path_smoothing = PathSmoothing(self.path_smoothing)
        self.gradient_optimization = bool(self.gradient_optimization)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color_precision": self.color_precision,
            "path_precision": self.path_precision,
            "line_threshold": self.line_threshold,
            "path_smoothing": self.path_smoothing.value,
            "gradient_optimization": self.gradient_optimization,
        }


@dataclass
class PipelineConfig:
    """Runtime configuration for the vectorization pipeline."""

    # Performance
    parallel_workers: int = -1  # -1 = auto, 1 = serial

    # Quantization
    alpha_threshold: int = 128

    # Contour ordering / filtering
    stitch_distance: float = 2.5
    min_contour_points: int = 3

    # Boundary policy: False keeps edge rows/columns out of the boundary map
    include_border: bool = False

    # Post-processing
    merge_threshold: float = 0.9
    repair_paths: bool = True


@dataclass
class ColorLayer:
    """One flat fill color and its closed outline paths."""

    color: str
    paths: List[PathData] = field(default_factory=list)


@dataclass
class ProcessingResult:
    """Output of one vectorization run."""

    layers: List[ColorLayer] = field(default_factory=list)
    gradients: List[Any] = field(default_factory=list)  # always empty
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def paths(self) -> List[PathData]:
        return [path for layer in self.layers for path in layer.paths]
