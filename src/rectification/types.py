"""
Data types and structures for the Rectification module.

Provides type-safe containers for configuration, corner selectors,
projections and per-job results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from src.common.types import Point


class Corner(Enum):
    """
    Image corner a search starts from.

    The value is the ``(flip_x, flip_y)`` pair that mirrors the search
    origin from the top-left corner to the selected one.
    """

    TOP_LEFT = (False, False)
    TOP_RIGHT = (True, False)
    BOTTOM_RIGHT = (True, True)
    BOTTOM_LEFT = (False, True)

    @property
    def flip_x(self) -> bool:
        return self.value[0]

    @property
    def flip_y(self) -> bool:
        return self.value[1]


# Clockwise from top-left; the homography target rectangle uses this order.
CLOCKWISE_CORNERS: Tuple[Corner, ...] = (
    Corner.TOP_LEFT,
    Corner.TOP_RIGHT,
    Corner.BOTTOM_RIGHT,
    Corner.BOTTOM_LEFT,
)


class JobStatus(Enum):
    """Outcome of a single rectification job."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class FailureReason(Enum):
    """Pipeline stage-specific failure causes."""

    UNUSABLE_IMAGE = "Unusable Image"  # No dark pixel for a corner
    DEGENERATE_GEOMETRY = "Degenerate Geometry"  # Collinear points or unstable solve
    INVALID_GEOMETRY = "Invalid Geometry"  # Non-positive output dimensions
    NONE = "None"


@dataclass(frozen=True)
class OutputDimensions:
    """Target size of the rectified image in pixels."""

    width: int
    height: int

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Output dimensions must be positive, got {self.width}x{self.height}"
            )

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class Projection:
    """
    Planar projective transform from output space to source space.

    Attributes:
        matrix: 3x3 float64 matrix, normalised so ``matrix[2, 2] == 1``.
    """

    matrix: np.ndarray

    def __post_init__(self):
        matrix = np.array(self.matrix, dtype=np.float64)
        if matrix.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {matrix.shape}")
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    def __call__(self, x: float, y: float) -> Tuple[float, float]:
        """Map a single output-space point to source space."""
        mapped = self.map_points(np.array([[x, y]], dtype=np.float64))
        return float(mapped[0, 0]), float(mapped[0, 1])

    def map_points(self, points: np.ndarray) -> np.ndarray:
        """
        Map an array of points through the projection.

        Args:
            points: Array of shape (N, 2) holding [x, y] rows.

        Returns:
            Array of shape (N, 2) with the mapped coordinates.
        """
        points = np.asarray(points, dtype=np.float64)
        homogeneous = points @ self.matrix[:, :2].T + self.matrix[:, 2]
        return homogeneous[:, :2] / homogeneous[:, 2:3]


@dataclass
class ThresholdConfig:
    """Configuration for adaptive binarization."""

    block_radius: int


@dataclass
class SizePolicyConfig:
    """Configuration for the output size policy."""

    aspect_width: int
    aspect_height: int
    max_height: int


@dataclass
class SolverConfig:
    """Configuration for the homography solve."""

    singular_value_tolerance: float  # Relative to the largest singular value
    reprojection_tolerance: float  # Pixels
    collinearity_tolerance: float  # Minimum sine for any three control points


@dataclass
class ResamplingConfig:
    """Configuration for perspective resampling."""

    interpolation: str
    fill_color: Tuple[int, int, int]


@dataclass
class OutputConfig:
    """Configuration for encoding and batch execution."""

    webp_quality: int
    max_workers: Optional[int]


@dataclass
class RectificationConfig:
    """Complete rectification module configuration."""

    threshold: ThresholdConfig
    size_policy: SizePolicyConfig
    solver: SolverConfig
    resampling: ResamplingConfig
    output: OutputConfig


@dataclass
class RectificationResult:
    """
    Output from the rectification pipeline.

    Attributes:
        status: SUCCESS or FAILED.
        output_image: The rectified image (None if the job failed).
        failure_reason: Specific reason if failed, NONE otherwise.
        corners: Located corner points, clockwise from top-left.
        dimensions: Output size chosen by the size policy.
        projection: Solved output-to-source projection.
        error_message: Message of the exception that failed the job.
    """

    status: JobStatus
    output_image: Optional[np.ndarray]
    failure_reason: FailureReason
    corners: List[Point] = field(default_factory=list)
    dimensions: Optional[OutputDimensions] = None
    projection: Optional[Projection] = None
    error_message: str = ""

    def is_success(self) -> bool:
        """Check if the job produced an output image."""
        return self.status == JobStatus.SUCCESS

    def get_error_message(self) -> str:
        """Get human-readable error message."""
        if self.is_success():
            return "Rectification succeeded"
        if self.error_message:
            return self.error_message
        return f"Failed: {self.failure_reason.value}"
