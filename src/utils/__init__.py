"""
Shared Utilities

Image I/O and constants used by the batch driver.
"""

from src.utils.io import encode_webp, load_image, save_webp, to_grayscale

__all__ = [
    "load_image",
    "to_grayscale",
    "encode_webp",
    "save_webp",
]
