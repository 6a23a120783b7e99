"""
Common type definitions for the qdcrop rectification pipeline.

This module provides Pydantic-based type definitions for the core data
structures passed between pipeline stages: image buffers and pixel points.

These types provide:
- Type validation and conversion
- Consistent interfaces across modules
- Integration with numpy arrays and OpenCV
"""

from typing import Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator


class ImageBuffer(BaseModel):
    """
    Type-safe wrapper for image arrays (numpy.ndarray).

    Used at the pipeline entry to reject malformed inputs before any stage
    runs. Both the colour source and its grayscale view go through it.

    Attributes:
        data: The underlying numpy array containing image data.
            Shape: (H, W, 3) for colour images, (H, W) for grayscale.
            Dtype: uint8 (0-255).

    Example:
        >>> import cv2
        >>> image = cv2.imread("photo.jpg")
        >>> img_buffer = ImageBuffer(data=image)
        >>> print(img_buffer.height, img_buffer.width)  # 480, 640
    """

    data: np.ndarray = Field(..., description="Image data as numpy array")

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a valid image.

        Args:
            v: Numpy array to validate.

        Returns:
            Validated numpy array.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] != 3:
            raise ValueError(
                f"Expected 3 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def is_grayscale(self) -> bool:
        """Check if image is grayscale (single channel)."""
        return len(self.data.shape) == 2

    @property
    def is_color(self) -> bool:
        """Check if image is colour (3 channels)."""
        return len(self.data.shape) == 3

    def to_numpy(self) -> np.ndarray:
        """Get underlying numpy array."""
        return self.data

    def __repr__(self) -> str:
        return f"ImageBuffer(shape={self.shape}, dtype={self.data.dtype})"


class Point(BaseModel):
    """
    Integer pixel coordinate (x, y).

    Corner points located on the binary mask are always whole pixels.

    Attributes:
        x: Column index (0 to image width - 1).
        y: Row index (0 to image height - 1).

    Example:
        >>> point = Point(x=100, y=200)
        >>> point.to_tuple()
        (100, 200)
    """

    x: int = Field(..., description="X-coordinate (column)")
    y: int = Field(..., description="Y-coordinate (row)")

    model_config = {"frozen": True}

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_int(cls, v: Union[int, float, np.integer]) -> int:
        """Convert numpy integers and floats to a plain int, rounding floats."""
        if isinstance(v, (int, np.integer)):
            return int(v)
        if isinstance(v, (float, np.floating)):
            return int(round(v))
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    def to_tuple(self) -> Tuple[int, int]:
        """Convert Point to tuple (x, y)."""
        return (self.x, self.y)

    def to_numpy(self, dtype: type = np.float64) -> np.ndarray:
        """Convert Point to numpy array of shape (2,)."""
        return np.array([self.x, self.y], dtype=dtype)

    def __repr__(self) -> str:
        return f"Point(x={self.x}, y={self.y})"
