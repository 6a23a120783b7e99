"""
Main processor for the Rectification module.

Orchestrates the complete pipeline for one image:
1. Binarization (adaptive threshold on the grayscale view)
2. Corner localization (four corner-directed searches)
3. Output size policy (aspect ratio + resolution cap)
4. Homography solve (regularized least squares)
5. Perspective resampling (bicubic warp)

Implements fail-fast strategy: stops at first failure.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from src.common.types import ImageBuffer
from src.rectification.binarizer import binarize
from src.rectification.config_loader import load_config
from src.rectification.corner_locator import locate_corners
from src.rectification.exceptions import (
    DegenerateGeometryError,
    InvalidGeometryError,
    RectificationError,
    UnusableImageError,
)
from src.rectification.homography import solve_projection
from src.rectification.resampler import warp
from src.rectification.size_policy import compute_output_dimensions
from src.rectification.types import (
    FailureReason,
    JobStatus,
    RectificationConfig,
    RectificationResult,
)

logger = logging.getLogger(__name__)

_FAILURE_REASONS = {
    UnusableImageError: FailureReason.UNUSABLE_IMAGE,
    DegenerateGeometryError: FailureReason.DEGENERATE_GEOMETRY,
    InvalidGeometryError: FailureReason.INVALID_GEOMETRY,
}


def _failure_reason(error: RectificationError) -> FailureReason:
    """
    Map a core exception to its failure reason.

    Raises:
        RectificationError: The original error, if it has no known reason.
    """
    for error_type, reason in _FAILURE_REASONS.items():
        if isinstance(error, error_type):
            return reason
    raise error


class RectificationProcessor:
    """
    Main processor for perspective rectification.

    Holds configuration only; every call is independent, so one processor
    can be shared by concurrent jobs.

    Example:
        >>> processor = RectificationProcessor()
        >>> image = cv2.imread("photo.jpg")
        >>> gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        >>> output = processor.correct(image, gray)
        >>> cv2.imwrite("photo.webp", output)
    """

    def __init__(
        self,
        config: Optional[RectificationConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the rectification processor.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

    def correct(self, source: np.ndarray, grayscale: np.ndarray) -> np.ndarray:
        """
        Rectify one image.

        Args:
            source: Colour image (H, W, 3), uint8.
            grayscale: Grayscale rendering of the same image (H, W), uint8.

        Returns:
            Rectified colour image sized by the size policy.

        Raises:
            ValueError: If the inputs are malformed or their sizes differ.
            UnusableImageError: If no content pixel can be found.
            DegenerateGeometryError: If the corners cannot define a projection.
            InvalidGeometryError: If the output size comes out non-positive.
        """
        return self._run_stages(source, grayscale)

    def process(self, source: np.ndarray, grayscale: np.ndarray) -> RectificationResult:
        """
        Rectify one image and report diagnostics instead of raising.

        Core failures become a FAILED result carrying the reason and message.
        Malformed inputs still raise ValueError, and a RectificationError
        subclass with no known failure reason is re-raised.

        Args:
            source: Colour image (H, W, 3), uint8.
            grayscale: Grayscale rendering of the same image (H, W), uint8.

        Returns:
            RectificationResult with the output image, located corners,
            output dimensions and projection (as far as the pipeline got).
        """
        result = RectificationResult(
            status=JobStatus.FAILED,
            output_image=None,
            failure_reason=FailureReason.NONE,
        )
        try:
            result.output_image = self._run_stages(source, grayscale, result)
        except RectificationError as e:
            result.failure_reason = _failure_reason(e)
            result.error_message = str(e)
            logger.warning(
                f"Pipeline FAILED: {result.failure_reason.value} ({result.error_message})"
            )
            return result

        result.status = JobStatus.SUCCESS
        return result

    def _run_stages(
        self,
        source: np.ndarray,
        grayscale: np.ndarray,
        trace: Optional[RectificationResult] = None,
    ) -> np.ndarray:
        """
        Run the five stages, recording intermediate results on ``trace``
        when one is given.
        """
        source_buffer = ImageBuffer(data=source)
        gray_buffer = ImageBuffer(data=grayscale)
        if not source_buffer.is_color:
            raise ValueError(f"Expected a colour source image, got shape {source.shape}")
        if not gray_buffer.is_grayscale:
            raise ValueError(f"Expected a 2D grayscale image, got shape {grayscale.shape}")
        if source_buffer.shape[:2] != gray_buffer.shape:
            raise ValueError(
                f"Source {source_buffer.shape[:2]} and grayscale "
                f"{gray_buffer.shape} sizes differ"
            )

        logger.info(
            f"Starting rectification of {source_buffer.width}x{source_buffer.height} image"
        )

        # Stage 1: Binarization
        logger.debug("[Stage 1/5] Binarization")
        mask = binarize(gray_buffer.to_numpy(), self.config.threshold.block_radius)

        # Stage 2: Corner localization
        logger.debug("[Stage 2/5] Corner Localization")
        corners = locate_corners(mask)
        if trace is not None:
            trace.corners = corners

        # Stage 3: Output size policy
        logger.debug("[Stage 3/5] Size Policy")
        policy = self.config.size_policy
        dims = compute_output_dimensions(
            corners,
            aspect=(policy.aspect_width, policy.aspect_height),
            max_height=policy.max_height,
        )
        if trace is not None:
            trace.dimensions = dims

        # Stage 4: Homography solve
        logger.debug("[Stage 4/5] Homography Solve")
        solver = self.config.solver
        projection = solve_projection(
            corners,
            dims,
            singular_value_tolerance=solver.singular_value_tolerance,
            reprojection_tolerance=solver.reprojection_tolerance,
            collinearity_tolerance=solver.collinearity_tolerance,
        )
        if trace is not None:
            trace.projection = projection

        # Stage 5: Resampling
        logger.debug("[Stage 5/5] Resampling")
        output = warp(
            source_buffer.to_numpy(),
            projection,
            dims,
            fill=self.config.resampling.fill_color,
            interpolation=self.config.resampling.interpolation,
        )

        logger.info(
            f"Rectified to {dims.width}x{dims.height} "
            f"from corners {[p.to_tuple() for p in corners]}"
        )

        return output


def correct(
    source: np.ndarray,
    grayscale: np.ndarray,
    config: Optional[RectificationConfig] = None,
) -> np.ndarray:
    """
    Convenience function for one-shot rectification.

    Args:
        source: Colour image (H, W, 3), uint8.
        grayscale: Grayscale rendering of the same image.
        config: Optional custom configuration. Uses default if None.

    Returns:
        Rectified colour image.

    Example:
        >>> image = cv2.imread("photo.jpg")
        >>> output = correct(image, cv2.cvtColor(image, cv2.COLOR_BGR2GRAY))
    """
    processor = RectificationProcessor(config=config)
    return processor.correct(source, grayscale)
