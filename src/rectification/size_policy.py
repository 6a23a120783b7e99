"""
Output size policy for the rectified image.

Derives the output width and height from the located corners, then snaps
them to a fixed aspect ratio and an absolute resolution cap.
"""

import logging
import math
from typing import Sequence, Tuple

from src.common.types import Point
from src.rectification.exceptions import InvalidGeometryError
from src.rectification.types import OutputDimensions

logger = logging.getLogger(__name__)

DEFAULT_ASPECT = (16, 9)
DEFAULT_MAX_HEIGHT = 1024


def _round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero."""
    return int(math.floor(value + 0.5))


def measure_content_bounds(points: Sequence[Point]) -> Tuple[int, int]:
    """
    Measure the raw content width and height spanned by the corners.

    Takes the larger of the two horizontal spans (top and bottom pairs) and
    of the two vertical spans (left and right pairs), so a single short side
    does not shrink the estimate.

    Args:
        points: [top-left, top-right, bottom-right, bottom-left].

    Returns:
        (width, height) in pixels. Either may be <= 0 for degenerate corners.
    """
    if len(points) != 4:
        raise ValueError(f"Expected exactly 4 corner points, got {len(points)}")

    tl, tr, br, bl = points
    width = max(tr.x - tl.x, br.x - bl.x)
    height = max(bl.y - tl.y, br.y - tr.y)
    return width, height


def fit_dimensions(
    width: float,
    height: float,
    aspect: Tuple[int, int] = DEFAULT_ASPECT,
    max_height: int = DEFAULT_MAX_HEIGHT,
) -> OutputDimensions:
    """
    Apply the aspect ratio and size cap to raw content bounds.

    The aspect step only ever shrinks one side toward the target ratio, so
    the result never exceeds the detected content. The cap then scales both
    sides uniformly by the more restrictive of the height and width limits.

    Args:
        width: Raw content width in pixels.
        height: Raw content height in pixels.
        aspect: Target (width, height) ratio.
        max_height: Height cap; the width cap follows from the aspect.

    Returns:
        Rounded output dimensions.

    Raises:
        InvalidGeometryError: If the bounds are non-positive or round to zero.

    Example:
        >>> fit_dimensions(1600, 1000)
        OutputDimensions(width=1600, height=900)
    """
    if not (width > 0 and height > 0):
        raise InvalidGeometryError(
            f"Content bounds must be positive, got {width}x{height}"
        )

    aspect_w, aspect_h = aspect
    height_by_width = aspect_h * width / aspect_w
    width_by_height = aspect_w * height / aspect_h

    if height_by_width < height:
        width, height = width, height_by_width
    else:
        width, height = width_by_height, height

    max_width = max_height * aspect_w / aspect_h
    height_ratio = max_height / height
    width_ratio = max_width / width

    if height_ratio <= width_ratio and height_ratio < 1.0:
        width, height = width * height_ratio, float(max_height)
    elif width_ratio <= height_ratio and width_ratio < 1.0:
        width, height = max_width, height * width_ratio

    out_width, out_height = _round_half_away(width), _round_half_away(height)

    if out_width < 1 or out_height < 1:
        raise InvalidGeometryError(
            f"Output dimensions {out_width}x{out_height} are not positive"
        )

    return OutputDimensions(width=out_width, height=out_height)


def compute_output_dimensions(
    points: Sequence[Point],
    aspect: Tuple[int, int] = DEFAULT_ASPECT,
    max_height: int = DEFAULT_MAX_HEIGHT,
) -> OutputDimensions:
    """
    Derive the output size from the four located corners.

    Args:
        points: [top-left, top-right, bottom-right, bottom-left].
        aspect: Target (width, height) ratio.
        max_height: Height cap in pixels.

    Returns:
        Output dimensions honouring the aspect ratio and cap.

    Raises:
        InvalidGeometryError: If the corners span no area.
    """
    raw_width, raw_height = measure_content_bounds(points)
    dims = fit_dimensions(raw_width, raw_height, aspect, max_height)

    logger.debug(
        f"Content bounds {raw_width}x{raw_height} -> output {dims.width}x{dims.height}"
    )

    return dims
