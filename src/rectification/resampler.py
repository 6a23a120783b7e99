"""
Perspective resampling of the source image.

Every output pixel is pulled back through the projection into the source
image and sampled there. Pixels that land outside the source get a fixed
fill colour.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from src.rectification.types import OutputDimensions, Projection

logger = logging.getLogger(__name__)

INTERPOLATION_FLAGS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "lanczos": cv2.INTER_LANCZOS4,
}

DEFAULT_FILL = (0, 0, 0)


def build_source_maps(
    projection: Projection, dims: OutputDimensions
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the source coordinate of every output pixel.

    Returns:
        (map_x, map_y), each float64 of shape (height, width).
    """
    xs, ys = np.meshgrid(
        np.arange(dims.width, dtype=np.float64),
        np.arange(dims.height, dtype=np.float64),
    )
    grid = np.stack([xs.ravel(), ys.ravel()], axis=1)
    mapped = projection.map_points(grid)
    map_x = mapped[:, 0].reshape(dims.height, dims.width)
    map_y = mapped[:, 1].reshape(dims.height, dims.width)
    return map_x, map_y


def warp(
    source: np.ndarray,
    projection: Projection,
    dims: OutputDimensions,
    fill: Tuple[int, int, int] = DEFAULT_FILL,
    interpolation: str = "cubic",
) -> np.ndarray:
    """
    Resample the source image through the projection.

    Interpolation reads neighbours clamped to the border, so pixels just
    inside the source edge are not darkened by the fill colour. Pixels whose
    source coordinate falls outside [0, w-1] x [0, h-1] are set to ``fill``.

    Args:
        source: Colour image (H, W, 3), uint8.
        projection: Output-to-source projection.
        dims: Output size.
        fill: Colour written where the source is out of bounds.
        interpolation: One of "nearest", "linear", "cubic", "lanczos".

    Returns:
        Output image of shape (dims.height, dims.width, 3), uint8.

    Raises:
        ValueError: If the source is empty or the interpolation is unknown.
    """
    if source is None or source.size == 0:
        raise ValueError("Invalid source image: image is None or empty")
    if interpolation not in INTERPOLATION_FLAGS:
        raise ValueError(
            f"Invalid interpolation: {interpolation}. "
            f"Must be one of {list(INTERPOLATION_FLAGS)}"
        )

    src_height, src_width = source.shape[:2]
    map_x, map_y = build_source_maps(projection, dims)

    outside = (
        ~np.isfinite(map_x)
        | ~np.isfinite(map_y)
        | (map_x < 0)
        | (map_x > src_width - 1)
        | (map_y < 0)
        | (map_y > src_height - 1)
    )

    # remap needs finite float32 maps; out-of-range pixels are overwritten below
    map_x = np.where(outside, 0.0, map_x).astype(np.float32)
    map_y = np.where(outside, 0.0, map_y).astype(np.float32)

    output = cv2.remap(
        source,
        map_x,
        map_y,
        interpolation=INTERPOLATION_FLAGS[interpolation],
        borderMode=cv2.BORDER_REPLICATE,
    )
    output[outside] = fill

    logger.debug(
        f"Warped {src_width}x{src_height} source to {dims.width}x{dims.height} "
        f"({int(np.count_nonzero(outside))} fill pixels)"
    )

    return output
