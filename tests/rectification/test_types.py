"""
Unit tests for rectification and common types.
"""

import numpy as np
import pytest

from src.common.types import ImageBuffer, Point
from src.rectification.types import (
    CLOCKWISE_CORNERS,
    Corner,
    FailureReason,
    JobStatus,
    OutputDimensions,
    Projection,
    RectificationResult,
)


class TestCorner:
    """Tests for the Corner selector."""

    def test_flip_flags(self):
        """Each corner mirrors the search origin on the right axes."""
        assert (Corner.TOP_LEFT.flip_x, Corner.TOP_LEFT.flip_y) == (False, False)
        assert (Corner.TOP_RIGHT.flip_x, Corner.TOP_RIGHT.flip_y) == (True, False)
        assert (Corner.BOTTOM_RIGHT.flip_x, Corner.BOTTOM_RIGHT.flip_y) == (True, True)
        assert (Corner.BOTTOM_LEFT.flip_x, Corner.BOTTOM_LEFT.flip_y) == (False, True)

    def test_clockwise_order(self):
        """Corners run clockwise from top-left."""
        assert CLOCKWISE_CORNERS == (
            Corner.TOP_LEFT,
            Corner.TOP_RIGHT,
            Corner.BOTTOM_RIGHT,
            Corner.BOTTOM_LEFT,
        )


class TestOutputDimensions:
    """Tests for OutputDimensions."""

    def test_valid(self):
        dims = OutputDimensions(width=16, height=9)
        assert dims.as_tuple() == (16, 9)

    @pytest.mark.parametrize("width,height", [(0, 9), (16, 0), (-1, 5)])
    def test_non_positive_rejected(self, width, height):
        with pytest.raises(ValueError, match="must be positive"):
            OutputDimensions(width=width, height=height)


class TestProjection:
    """Tests for Projection."""

    def test_identity_call(self):
        projection = Projection(matrix=np.eye(3))
        assert projection(3, 4) == (3.0, 4.0)

    def test_homogeneous_division(self):
        """Points are divided by the homogeneous coordinate."""
        projection = Projection(matrix=np.diag([1.0, 1.0, 2.0]))
        mapped = projection.map_points(np.array([[4.0, 6.0], [2.0, 0.0]]))
        np.testing.assert_allclose(mapped, [[2.0, 3.0], [1.0, 0.0]])

    def test_matrix_is_read_only_copy(self):
        """The caller's array is copied and the stored one cannot change."""
        source = np.eye(3)
        projection = Projection(matrix=source)

        source[0, 0] = 5.0
        assert projection.matrix[0, 0] == 1.0
        with pytest.raises(ValueError):
            projection.matrix[0, 0] = 2.0

    def test_wrong_shape(self):
        with pytest.raises(ValueError, match="Expected a 3x3 matrix"):
            Projection(matrix=np.eye(2))


class TestRectificationResult:
    """Tests for RectificationResult."""

    def test_success_message(self):
        result = RectificationResult(
            status=JobStatus.SUCCESS,
            output_image=np.zeros((9, 16, 3), dtype=np.uint8),
            failure_reason=FailureReason.NONE,
        )
        assert result.is_success()
        assert "succeeded" in result.get_error_message()

    def test_failure_message_falls_back_to_reason(self):
        result = RectificationResult(
            status=JobStatus.FAILED,
            output_image=None,
            failure_reason=FailureReason.UNUSABLE_IMAGE,
        )
        assert not result.is_success()
        assert result.get_error_message() == "Failed: Unusable Image"


class TestImageBuffer:
    """Tests for ImageBuffer validation."""

    def test_color_image(self):
        buffer = ImageBuffer(data=np.zeros((4, 5, 3), dtype=np.uint8))
        assert (buffer.height, buffer.width) == (4, 5)
        assert buffer.is_color and not buffer.is_grayscale

    def test_grayscale_image(self):
        buffer = ImageBuffer(data=np.zeros((4, 5), dtype=np.uint8))
        assert buffer.is_grayscale

    @pytest.mark.parametrize(
        "data",
        [
            np.array([], dtype=np.uint8),
            np.zeros((4, 5, 4), dtype=np.uint8),
            np.zeros((4, 5, 3), dtype=np.float32),
            np.zeros((2, 2, 2, 2), dtype=np.uint8),
        ],
    )
    def test_invalid_images_rejected(self, data):
        with pytest.raises(ValueError):
            ImageBuffer(data=data)


class TestPoint:
    """Tests for Point."""

    def test_numpy_integers_converted(self):
        point = Point(x=np.int64(3), y=np.int32(4))
        assert point.to_tuple() == (3, 4)
        assert type(point.x) is int

    def test_floats_rounded(self):
        assert Point(x=2.6, y=1.2).to_tuple() == (3, 1)

    def test_equality_and_array_conversion(self):
        point = Point(x=4, y=6)
        assert point == Point(x=4, y=6)
        np.testing.assert_array_equal(point.to_numpy(), [4.0, 6.0])

    def test_non_numeric_rejected(self):
        with pytest.raises(ValueError, match="Coordinate must be numeric"):
            Point(x="a", y=1)
