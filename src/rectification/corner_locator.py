"""
Corner localization on the binary mask.

For each image corner, finds the dark mask pixel with the smallest
Euclidean distance to that corner. The four hits are the control points of
the perspective correction.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from src.common.types import Point
from src.rectification.binarizer import DARK
from src.rectification.exceptions import UnusableImageError
from src.rectification.types import CLOCKWISE_CORNERS, Corner

logger = logging.getLogger(__name__)


def find_nearest_to_corner(
    mask: np.ndarray, flip_x: bool, flip_y: bool
) -> Optional[Tuple[int, int]]:
    """
    Find the dark pixel closest to a corner of the mask.

    The search expands ring by ring from the corner. Ring ``i`` is the row
    at offset ``i`` (columns 0..i) followed by the column at offset ``i``
    (rows 0..i-1), both in the corner's mirrored frame. Once ``i**2``
    exceeds the best squared distance found, no later ring can hold a
    closer pixel and the search stops.

    On exact distance ties the first pixel in scan order wins: earlier
    rings first, row before column, smaller offset first.

    Args:
        mask: Binary mask (H, W) where DARK marks content.
        flip_x: True to search from the right edge.
        flip_y: True to search from the bottom edge.

    Returns:
        (x, y) of the nearest dark pixel in mask coordinates, or None if the
        mask has no dark pixel.
    """
    height, width = mask.shape

    # Mirrored view: the corner under search always sits at (0, 0)
    view = mask[:: -1 if flip_y else 1, :: -1 if flip_x else 1]

    best_distance = None
    best_x = best_y = 0

    for i in range(max(width, height)):
        i_squared = i * i
        if best_distance is not None and best_distance < i_squared:
            break

        if i < height:
            row = view[i, : min(i + 1, width)]
            hits = np.flatnonzero(row == DARK)
            if hits.size:
                x = int(hits[0])
                distance = x * x + i_squared
                if best_distance is None or distance < best_distance:
                    best_distance, best_x, best_y = distance, x, i

        if i < width:
            column = view[: min(i, height), i]
            hits = np.flatnonzero(column == DARK)
            if hits.size:
                y = int(hits[0])
                distance = i_squared + y * y
                if best_distance is None or distance < best_distance:
                    best_distance, best_x, best_y = distance, i, y

    if best_distance is None:
        return None

    real_x = width - 1 - best_x if flip_x else best_x
    real_y = height - 1 - best_y if flip_y else best_y
    return real_x, real_y


def locate(mask: np.ndarray, corner: Corner) -> Optional[Point]:
    """
    Locate the dark pixel nearest to the given image corner.

    Args:
        mask: Binary mask (H, W) where DARK marks content.
        corner: Which image corner to search from.

    Returns:
        The nearest dark pixel, or None if the mask is entirely light.
    """
    found = find_nearest_to_corner(mask, corner.flip_x, corner.flip_y)
    if found is None:
        return None
    return Point(x=found[0], y=found[1])


def locate_corners(mask: np.ndarray) -> List[Point]:
    """
    Locate all four control points, clockwise from top-left.

    Args:
        mask: Binary mask (H, W) where DARK marks content.

    Returns:
        [top-left, top-right, bottom-right, bottom-left] points.

    Raises:
        ValueError: If the mask is empty or not 2D.
        UnusableImageError: If the mask holds no dark pixel.
    """
    if mask is None or mask.size == 0 or mask.ndim != 2:
        raise ValueError("Invalid mask: expected a non-empty 2D array")

    points = []
    for corner in CLOCKWISE_CORNERS:
        point = locate(mask, corner)
        if point is None:
            raise UnusableImageError(
                f"No interesting points: mask has no dark pixel near {corner.name}"
            )
        points.append(point)

    logger.debug(
        "Located corners: "
        + ", ".join(f"{c.name}={p.to_tuple()}" for c, p in zip(CLOCKWISE_CORNERS, points))
    )

    return points
