"""
Perspective rectification of photographed flat rectangles.

Finds the corners of a rectangle photographed at an angle, solves the
projection that straightens it, and resamples the photo into an upright,
cropped image.

Pipeline stages:
1. Adaptive binarization of the grayscale view
2. Corner localization (nearest content pixel to each image corner)
3. Output size policy (16:9, capped at 1024px height)
4. Homography solve (SVD least squares on the normalised DLT system)
5. Bicubic perspective resampling
"""

from src.rectification.binarizer import binarize
from src.rectification.config_loader import load_config
from src.rectification.corner_locator import find_nearest_to_corner, locate, locate_corners
from src.rectification.exceptions import (
    DegenerateGeometryError,
    InvalidGeometryError,
    RectificationError,
    UnusableImageError,
)
from src.rectification.homography import solve_projection
from src.rectification.processor import RectificationProcessor, correct
from src.rectification.resampler import warp
from src.rectification.size_policy import compute_output_dimensions
from src.rectification.types import (
    Corner,
    FailureReason,
    JobStatus,
    OutputDimensions,
    Projection,
    RectificationConfig,
    RectificationResult,
)

__all__ = [
    "RectificationProcessor",
    "correct",
    "load_config",
    "binarize",
    "find_nearest_to_corner",
    "locate",
    "locate_corners",
    "compute_output_dimensions",
    "solve_projection",
    "warp",
    "Corner",
    "FailureReason",
    "JobStatus",
    "OutputDimensions",
    "Projection",
    "RectificationConfig",
    "RectificationResult",
    "RectificationError",
    "UnusableImageError",
    "DegenerateGeometryError",
    "InvalidGeometryError",
]
