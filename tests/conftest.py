"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest


def rotated_rectangle_corners(center, size, angle_deg):
    """Corners of a rotated rectangle, clockwise from top-left, shape (4, 2)."""
    import numpy as np

    cx, cy = center
    half_w, half_h = size[0] / 2.0, size[1] / 2.0
    theta = np.deg2rad(angle_deg)
    rotation = np.array(
        [[np.cos(theta), -np.sin(theta)], [np.sin(theta), np.cos(theta)]]
    )
    offsets = np.array(
        [[-half_w, -half_h], [half_w, -half_h], [half_w, half_h], [-half_w, half_h]]
    )
    return offsets @ rotation.T + np.array([cx, cy])


@pytest.fixture
def rotated_rectangle_image():
    """Fixture providing a black 16:9 rectangle rotated 10 degrees on white."""
    import cv2
    import numpy as np

    image = np.full((600, 800, 3), 255, dtype=np.uint8)
    corners = rotated_rectangle_corners((400, 300), (480, 270), 10)
    cv2.fillPoly(image, [np.round(corners).astype(np.int32)], (0, 0, 0))

    return image, corners


@pytest.fixture
def blank_image():
    """Fixture providing a uniformly white image with no content."""
    import numpy as np

    return np.full((200, 300, 3), 255, dtype=np.uint8)


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing a convex quadrilateral, clockwise from top-left."""
    import numpy as np

    return np.array(
        [
            [120, 80],  # Top-left
            [610, 40],  # Top-right
            [650, 420],  # Bottom-right
            [90, 380],  # Bottom-left
        ],
        dtype=np.float64,
    )
