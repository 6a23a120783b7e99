"""
Unit tests for binarizer module.
"""

import cv2
import numpy as np
import pytest

from src.rectification.binarizer import DARK, LIGHT, binarize


class TestBinarize:
    """Tests for binarize function."""

    def test_uniform_image_is_all_light(self):
        """A flat image has no pixel below its local mean."""
        gray = np.full((40, 60), 128, dtype=np.uint8)
        mask = binarize(gray)

        assert mask.shape == gray.shape
        assert mask.dtype == np.uint8
        assert np.all(mask == LIGHT)

    def test_single_dark_pixel(self):
        """An isolated dark pixel is dark, its bright neighbours stay light."""
        gray = np.full((10, 10), 255, dtype=np.uint8)
        gray[4, 6] = 0

        mask = binarize(gray)

        assert mask[4, 6] == DARK
        assert np.count_nonzero(mask == DARK) == 1

    def test_rectangle_marks_inner_border_band(self):
        """A filled rectangle is dark along its edge and light deep inside."""
        gray = np.full((100, 100), 255, dtype=np.uint8)
        cv2.rectangle(gray, (20, 30), (79, 69), 0, thickness=-1)

        mask = binarize(gray, block_radius=2)

        # Edge pixels see white in their window
        assert mask[30, 50] == DARK
        assert mask[50, 20] == DARK
        # Interior window is all black: equal to its mean
        assert mask[50, 50] == LIGHT
        # Background never falls below its mean
        assert mask[5, 5] == LIGHT
        assert mask[29, 50] == LIGHT

    def test_windows_are_clipped_at_border(self):
        """Border pixels average only the in-bounds part of their window."""
        gray = (np.arange(10, dtype=np.uint8) * 20).reshape(1, 10)

        mask = binarize(gray, block_radius=2)

        # x=0: mean of [0, 20, 40] is 20 -> 0 is below it
        assert mask[0, 0] == DARK
        # x=9: mean of [140, 160, 180] is 160 -> 180 is not below it
        assert mask[0, 9] == LIGHT

    def test_output_is_two_level(self, rotated_rectangle_image):
        """Mask only ever holds the two levels."""
        image, _ = rotated_rectangle_image
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

        mask = binarize(gray)

        assert set(np.unique(mask)).issubset({DARK, LIGHT})
        assert np.any(mask == DARK)

    def test_empty_image_rejected(self):
        """Empty input raises ValueError."""
        with pytest.raises(ValueError, match="Invalid grayscale image"):
            binarize(np.array([], dtype=np.uint8))

    def test_color_image_rejected(self):
        """3D input raises ValueError."""
        with pytest.raises(ValueError, match="Expected 2D grayscale image"):
            binarize(np.zeros((10, 10, 3), dtype=np.uint8))

    def test_invalid_radius_rejected(self):
        """Radius must be at least 1."""
        with pytest.raises(ValueError, match="block_radius"):
            binarize(np.zeros((10, 10), dtype=np.uint8), block_radius=0)
