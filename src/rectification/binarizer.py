"""
Adaptive binarization of the grayscale view.

Separates content from background by comparing each pixel with the mean of
its local neighbourhood, so uneven lighting across a photograph does not
shift the decision the way a single global threshold would.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

DARK = 0
LIGHT = 255


def binarize(gray: np.ndarray, block_radius: int = 2) -> np.ndarray:
    """
    Build a two-level mask from a grayscale image.

    A pixel is dark when its intensity is strictly below the floored mean of
    the (2r+1) x (2r+1) window centred on it. Windows are clipped at the
    image border rather than padded, so border pixels average fewer
    neighbours.

    Args:
        gray: Grayscale image, uint8 array of shape (H, W).
        block_radius: Window radius r (>= 1).

    Returns:
        uint8 mask of shape (H, W) holding DARK (0) or LIGHT (255).

    Raises:
        ValueError: If the image is empty or not 2D, or the radius is < 1.

    Example:
        >>> gray = np.full((10, 10), 255, dtype=np.uint8)
        >>> gray[4, 4] = 0
        >>> mask = binarize(gray)
        >>> int(mask[4, 4]), int(mask[0, 0])
        (0, 255)
    """
    if gray is None or gray.size == 0:
        raise ValueError("Invalid grayscale image: image is None or empty")
    if gray.ndim != 2:
        raise ValueError(f"Expected 2D grayscale image, got shape {gray.shape}")
    if block_radius < 1:
        raise ValueError(f"block_radius must be at least 1, got {block_radius}")

    height, width = gray.shape

    # (H+1, W+1) summed-area table; float64 keeps large images exact
    integral = cv2.integral(gray, sdepth=cv2.CV_64F)

    rows = np.arange(height)
    cols = np.arange(width)
    y_low = np.maximum(rows - block_radius, 0)
    y_high = np.minimum(rows + block_radius, height - 1) + 1
    x_low = np.maximum(cols - block_radius, 0)
    x_high = np.minimum(cols + block_radius, width - 1) + 1

    window_sum = (
        integral[np.ix_(y_high, x_high)]
        - integral[np.ix_(y_low, x_high)]
        - integral[np.ix_(y_high, x_low)]
        + integral[np.ix_(y_low, x_low)]
    )
    window_area = np.outer(y_high - y_low, x_high - x_low)
    local_mean = np.floor_divide(window_sum, window_area)

    mask = np.where(gray < local_mean, DARK, LIGHT).astype(np.uint8)

    logger.debug(
        f"Binarized {width}x{height} image (radius={block_radius}): "
        f"{int(np.count_nonzero(mask == DARK))} dark pixels"
    )

    return mask
