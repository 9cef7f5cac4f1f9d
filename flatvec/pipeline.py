"""Main pipeline orchestrator for flatvec."""

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .analyze import ImageAnalysis, analyze_image
from .contour import find_contours, order_contour
from .extract import build_bitmap, find_boundaries
from .merge import merge_similar_layers
from .quantize import ColorBucket, count_raw_colors, quantize_colors
from .simplify import simplify_path, tolerance_for
from .svg import layers_to_svg, points_to_path, save_svg
from .types import (
    ColorLayer,
    PipelineConfig,
    ProcessingOptions,
    ProcessingResult,
    Raster,
    RunSupersededError,
    VectorizationError,
)
from .validate import fix_paths, validate_paths

logger = logging.getLogger(__name__)

CurrentCheck = Callable[[], bool]


def _always_current() -> bool:
    return True


class TracingBackend(ABC):
    """Turns a raster into colored layers of closed path strings."""

    name = "backend"

    @abstractmethod
    def trace(
        self,
        raster: Raster,
        options: ProcessingOptions,
        is_current: Optional[CurrentCheck] = None,
    ) -> List[ColorLayer]:
        """Trace the raster.

        Args:
            raster: Input raster
            options: Option set for this run
            is_current: Returns False once the run has been superseded.
                Backends that cannot stop early may ignore it.

        Returns:
            Colored layers in drawing order
        """


class ContourTracingBackend(TracingBackend):
    """Quantize, extract boundaries, trace, order, simplify and emit.

    Buckets share no mutable state, so each one is traced as an independent
    task; the results are joined before returning.
    """

    name = "contour"

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def trace(
        self,
        raster: Raster,
        options: ProcessingOptions,
        is_current: Optional[CurrentCheck] = None,
    ) -> List[ColorLayer]:
        is_current = is_current or _always_current

        buckets = list(
            quantize_colors(raster, options.color_precision, self.config.alpha_threshold).values()
        )
        logger.info(f"Quantized to {len(buckets)} color buckets")

        if not is_current():
            raise RunSupersededError("Run superseded before tracing")

        workers = self._resolve_workers(len(buckets))
        if workers <= 1:
            layers = []
            for bucket in buckets:
                layers.append(self._trace_bucket(bucket, raster.width, raster.height, options))
                if not is_current():
                    raise RunSupersededError("Run superseded while tracing")
        else:
            layers = self._trace_parallel(buckets, raster, options, workers, is_current)

        return [layer for layer in layers if layer is not None]

    def _resolve_workers(self, n_tasks: int) -> int:
        if n_tasks == 0:
            return 1
        if self.config.parallel_workers == -1:
            return min(os.cpu_count() or 1, n_tasks)
        return max(1, min(self.config.parallel_workers, n_tasks))

    def _trace_parallel(
        self,
        buckets: List[ColorBucket],
        raster: Raster,
        options: ProcessingOptions,
        workers: int,
        is_current: CurrentCheck,
    ) -> List[Optional[ColorLayer]]:
        layers: List[Optional[ColorLayer]] = [None] * len(buckets)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(
                    self._trace_bucket, bucket, raster.width, raster.height, options
                ): i
                for i, bucket in enumerate(buckets)
            }

            for future in as_completed(future_to_index):
                if not is_current():
                    for pending in future_to_index:
                        pending.cancel()
                    raise RunSupersededError("Run superseded while tracing")
                layers[future_to_index[future]] = future.result()

        return layers

    def _trace_bucket(
        self, bucket: ColorBucket, width: int, height: int, options: ProcessingOptions
    ) -> Optional[ColorLayer]:
        """Run steps 2-7 for one bucket; None when it yields no path."""
        bitmap = build_bitmap(bucket, width, height)
        boundary = find_boundaries(bitmap, include_border=self.config.include_border)
        contours = find_contours(boundary, min_points=self.config.min_contour_points)

        tolerance = tolerance_for(options.path_precision)
        paths = []
        for contour in contours:
            ordered = order_contour(contour, self.config.stitch_distance)
            simplified = simplify_path(ordered, tolerance)
            path = points_to_path(simplified)
            if path:
                paths.append(path)

        logger.debug(f"Bucket {bucket.color}: {len(bucket)} pixels, {len(paths)} paths")

        if not paths:
            return None
        return ColorLayer(color=bucket.color, paths=paths)


class Pipeline:
    """Main vectorization pipeline."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        backend: Optional[TracingBackend] = None,
    ):
        """Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
            backend: Tracing backend. Uses ContourTracingBackend if None.
        """
        self.config = config or PipelineConfig()
        self.backend = backend or ContourTracingBackend(self.config)

    def process(
        self,
        raster: Raster,
        options: Optional[ProcessingOptions] = None,
        is_current: Optional[CurrentCheck] = None,
    ) -> ProcessingResult:
        """Vectorize a raster.

        Args:
            raster: Decoded input raster
            options: Option set; defaults if None
            is_current: Returns False once this run is stale

        Returns:
            ProcessingResult with colored layers

        Raises:
            RunSupersededError: If is_current turned False during the run
            VectorizationError: If processing fails
        """
        options = options or ProcessingOptions()
        is_current = is_current or _always_current
        start_time = time.time()

        try:
            logger.info(
                f"Processing {raster.width}x{raster.height} raster with "
                f"{self.backend.name} backend, {options.color_precision} color steps"
            )

            layers = self.backend.trace(raster, options, is_current)
            layers = self._validate_and_repair(layers)

            if options.gradient_optimization:
                layers = merge_similar_layers(layers, self.config.merge_threshold)

            if not is_current():
                raise RunSupersededError("Run superseded before publishing")

        except VectorizationError:
            raise
        except Exception as e:
            raise VectorizationError(f"Pipeline processing failed: {e}") from e

        metadata: Dict[str, object] = {
            "width": raster.width,
            "height": raster.height,
            **options.to_dict(),
            "distinct_colors": count_raw_colors(raster, self.config.alpha_threshold),
        }

        logger.info(
            f"Produced {len(layers)} layers in {time.time() - start_time:.2f}s"
        )
        return ProcessingResult(layers=layers, gradients=[], metadata=metadata)

    def _validate_and_repair(self, layers: List[ColorLayer]) -> List[ColorLayer]:
        """Repair every path when any path fails validation."""
        errors = validate_paths(path for layer in layers for path in layer.paths)
        if not errors:
            return layers

        logger.warning(f"{len(errors)} path problems found, e.g. {errors[0]}")
        if not self.config.repair_paths:
            return layers

        return [ColorLayer(color=layer.color, paths=fix_paths(layer.paths)) for layer in layers]


class ResultSlot:
    """Single-writer result handoff guarded by a run generation counter.

    Every run takes a new generation; only the newest generation may
    publish, so a slow stale run can never overwrite a newer result.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0
        self._published_generation = 0
        self._result: Optional[ProcessingResult] = None

    def begin(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def publish(self, generation: int, result: ProcessingResult) -> bool:
        with self._lock:
            if generation != self._generation:
                return False
            self._result = result
            self._published_generation = generation
            return True

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def published_generation(self) -> int:
        with self._lock:
            return self._published_generation

    @property
    def result(self) -> Optional[ProcessingResult]:
        with self._lock:
            return self._result


class ImageSession:
    """Holds the current raster and options and re-runs the pipeline.

    Automatic mode derives the options from image analysis; manual mode
    keeps whatever options the caller set. Runs may overlap when options
    change quickly; only the newest run's result is published.
    """

    def __init__(
        self,
        pipeline: Optional[Pipeline] = None,
        options: Optional[ProcessingOptions] = None,
        automatic: bool = True,
    ):
        self.pipeline = pipeline or Pipeline()
        self.automatic = automatic
        self.raster: Optional[Raster] = None
        self.analysis: Optional[ImageAnalysis] = None
        self._options = options or ProcessingOptions()
        self._lock = threading.Lock()
        self._slot = ResultSlot()

    @property
    def options(self) -> ProcessingOptions:
        with self._lock:
            return replace(self._options)

    @property
    def result(self) -> Optional[ProcessingResult]:
        return self._slot.result

    def load(self, raster: Raster) -> Optional[ProcessingResult]:
        """Load a new raster and run; automatic mode analyzes it first."""
        self.raster = raster
        if self.automatic:
            self._apply_analysis()
        return self.run()

    def set_options(self, **changes) -> Optional[ProcessingResult]:
        """Change options, switching to manual mode, and re-run."""
        with self._lock:
            self._options = replace(self._options, **changes)
            self.automatic = False
        if self.raster is None:
            return None
        return self.run()

    def use_automatic(self) -> Optional[ProcessingResult]:
        """Switch back to automatic mode and re-run with analyzed options."""
        self.automatic = True
        if self.raster is None:
            return None
        self._apply_analysis()
        return self.run()

    def run(self) -> Optional[ProcessingResult]:
        """Run the pipeline on the current raster.

        Returns:
            The published result, or None if a newer run superseded this one

        Raises:
            VectorizationError: If no raster is loaded or processing fails
        """
        if self.raster is None:
            raise VectorizationError("No raster loaded")

        generation = self._slot.begin()
        options = self.options

        try:
            result = self.pipeline.process(
                self.raster,
                options,
                is_current=lambda: self._slot.is_current(generation),
            )
        except RunSupersededError:
            logger.debug(f"Run {generation} superseded, result dropped")
            return None

        if not self._slot.publish(generation, result):
            logger.debug(f"Run {generation} finished after a newer run, result dropped")
            return None
        return result

    def _apply_analysis(self) -> None:
        self.analysis = analyze_image(self.raster)
        with self._lock:
            self._options = replace(self.analysis.options)


def process_raster(
    raster: Raster,
    options: Optional[ProcessingOptions] = None,
    config: Optional[PipelineConfig] = None,
) -> ProcessingResult:
    """Vectorize a raster with a one-off pipeline."""
    return Pipeline(config).process(raster, options)


def process_image(
    image_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    options: Optional[ProcessingOptions] = None,
    config: Optional[PipelineConfig] = None,
    automatic: bool = False,
) -> str:
    """Process an image file into an SVG document.

    Convenience function for one-off processing.

    Args:
        image_path: Path to input image (PNG/JPG/...)
        output_path: Optional path to save SVG output
        options: Option set (ignored when automatic is True)
        config: Optional pipeline configuration
        automatic: Derive options from image analysis

    Returns:
        SVG string

    Example:
        >>> svg = process_image("input.png", "output.svg")
        >>> svg = process_image("input.png", options=ProcessingOptions(color_precision=12))
    """
    from .raster_ingest import load_raster

    raster = load_raster(image_path)
    if automatic:
        options = analyze_image(raster).options

    result = Pipeline(config).process(raster, options)
    svg = layers_to_svg(result)

    if output_path:
        save_svg(svg, output_path)

    return svg
