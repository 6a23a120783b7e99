"""
Unit tests for resampler module.
"""

import numpy as np
import pytest

from src.rectification.resampler import build_source_maps, warp
from src.rectification.types import OutputDimensions, Projection


@pytest.fixture
def gradient_image():
    """Fixture providing a 40x60 colour image with distinct pixel values."""
    ys, xs = np.mgrid[0:40, 0:60]
    image = np.stack([xs * 4, ys * 6, (xs + ys) % 256], axis=2)
    return image.astype(np.uint8)


def _translation(dx, dy):
    return Projection(matrix=np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]]))


class TestWarp:
    """Tests for warp function."""

    @pytest.mark.parametrize("interpolation", ["nearest", "linear", "cubic", "lanczos"])
    def test_identity_reproduces_source(self, gradient_image, interpolation):
        """Sampling exactly on pixel centres returns the source pixels."""
        dims = OutputDimensions(width=60, height=40)

        output = warp(gradient_image, _translation(0, 0), dims, interpolation=interpolation)

        np.testing.assert_array_equal(output, gradient_image)

    def test_output_shape_and_dtype(self, gradient_image):
        """Output is sized by the dimensions, not the source."""
        dims = OutputDimensions(width=25, height=10)

        output = warp(gradient_image, _translation(3, 4), dims)

        assert output.shape == (10, 25, 3)
        assert output.dtype == np.uint8
        np.testing.assert_array_equal(output, gradient_image[4:14, 3:28])

    def test_out_of_bounds_filled(self, gradient_image):
        """Pixels mapped outside the source get the fill colour."""
        dims = OutputDimensions(width=20, height=10)

        output = warp(gradient_image, _translation(1000, 0), dims, fill=(10, 20, 30))

        assert np.all(output == np.array([10, 20, 30], dtype=np.uint8))

    def test_partial_overlap(self, gradient_image):
        """Only the part of the output that lands outside is filled."""
        dims = OutputDimensions(width=60, height=40)

        output = warp(gradient_image, _translation(-5, 0), dims)

        assert np.all(output[:, :5] == 0)
        np.testing.assert_array_equal(output[:, 5:], gradient_image[:, :55])

    def test_scaling_projection(self, gradient_image):
        """A 2x downscale samples every other source pixel."""
        projection = Projection(matrix=np.diag([2.0, 2.0, 1.0]))
        dims = OutputDimensions(width=30, height=20)

        output = warp(gradient_image, projection, dims)

        np.testing.assert_array_equal(output, gradient_image[::2, ::2])

    def test_deterministic(self, gradient_image):
        """Two runs produce identical bytes."""
        projection = Projection(
            matrix=np.array([[0.9, 0.1, 2.5], [-0.05, 1.1, 1.25], [0.0005, 0.0002, 1.0]])
        )
        dims = OutputDimensions(width=50, height=30)

        first = warp(gradient_image, projection, dims)
        second = warp(gradient_image, projection, dims)

        assert first.tobytes() == second.tobytes()

    def test_invalid_interpolation(self, gradient_image):
        """Unknown interpolation names are rejected."""
        with pytest.raises(ValueError, match="Invalid interpolation"):
            warp(gradient_image, _translation(0, 0), OutputDimensions(5, 5), interpolation="area")

    def test_empty_source(self):
        """Empty sources are rejected."""
        with pytest.raises(ValueError, match="Invalid source image"):
            warp(np.array([], dtype=np.uint8), _translation(0, 0), OutputDimensions(5, 5))


class TestBuildSourceMaps:
    """Tests for build_source_maps function."""

    def test_maps_follow_projection(self):
        """Each map entry is the projected output coordinate."""
        maps_x, maps_y = build_source_maps(_translation(1.5, -2), OutputDimensions(4, 3))

        assert maps_x.shape == (3, 4)
        np.testing.assert_allclose(maps_x[0], [1.5, 2.5, 3.5, 4.5])
        np.testing.assert_allclose(maps_y[:, 0], [-2.0, -1.0, 0.0])
