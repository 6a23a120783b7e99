"""
I/O Utilities

Image decoding, grayscale derivation and WebP encoding for the batch driver.
The rectification core never touches the filesystem; everything here runs
around it.
"""

import logging
from pathlib import Path
from typing import Tuple

import cv2
import numpy as np

from src.utils.constants import DEFAULT_WEBP_QUALITY

logger = logging.getLogger(__name__)


def load_image(file_path: Path) -> Tuple[np.ndarray, np.ndarray]:
    """
    Decode an image file into a colour array and its grayscale view.

    Args:
        file_path: Path to any format OpenCV can decode.

    Returns:
        (color, gray): BGR uint8 array (H, W, 3) and uint8 array (H, W).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be decoded as an image.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Could not open input: {file_path}")

    # imdecode instead of imread so non-ASCII paths work on every platform
    data = np.fromfile(str(file_path), dtype=np.uint8)
    color = cv2.imdecode(data, cv2.IMREAD_COLOR)
    if color is None:
        raise ValueError(f"Could not decode image: {file_path}")

    return color, to_grayscale(color)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Derive the single-channel rendering of a BGR image."""
    if image.ndim == 2:
        return image
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def encode_webp(image: np.ndarray, quality: int = DEFAULT_WEBP_QUALITY) -> bytes:
    """
    Encode an image as lossy WebP.

    Raises:
        ValueError: If the quality is out of range or encoding fails.
    """
    if not 1 <= quality <= 100:
        raise ValueError(f"WebP quality must be in [1, 100], got {quality}")

    ok, buffer = cv2.imencode(".webp", image, [cv2.IMWRITE_WEBP_QUALITY, quality])
    if not ok:
        raise ValueError("Could not encode output as WebP")
    return buffer.tobytes()


def save_webp(
    image: np.ndarray, file_path: Path, quality: int = DEFAULT_WEBP_QUALITY
) -> None:
    """
    Encode an image as WebP and write it to disk.

    The parent directory must already exist.

    Raises:
        ValueError: If encoding fails.
        OSError: If the file cannot be created or written.
    """
    encoded = encode_webp(image, quality)
    with open(file_path, "wb") as f:
        f.write(encoded)
    logger.debug(f"Wrote {len(encoded)} bytes to {file_path}")
