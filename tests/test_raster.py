"""Unit tests for the slice rasterizer."""

import numpy as np
import pytest
from PIL import Image

from nifti2png.errors import RasterRangeError
from nifti2png.raster import (
    gray_to_rgb,
    orient,
    rasterize,
    raster_to_array,
    to_ubyte,
)


class TestGrayToRgb:
    """Tests for gray_to_rgb function."""

    def test_replicates_into_three_channels(self):
        plane = np.array([[0.0, 0.5], [0.25, 1.0]])

        rgb = gray_to_rgb(plane)

        assert rgb.shape == (2, 2, 3)
        for c in range(3):
            np.testing.assert_array_equal(rgb[..., c], plane)

    def test_alpha_channel_is_opaque(self):
        rgba = gray_to_rgb(np.zeros((3, 4)), alpha=True)

        assert rgba.shape == (3, 4, 4)
        assert np.all(rgba[..., 3] == 1.0)

    def test_rejects_non_2d_input(self):
        with pytest.raises(ValueError, match="2D"):
            gray_to_rgb(np.zeros((2, 2, 2)))


class TestToUbyte:
    """Tests for to_ubyte function."""

    def test_all_zero_maps_to_black(self):
        result = to_ubyte(gray_to_rgb(np.zeros((4, 4))))

        assert result.dtype == np.uint8
        assert np.all(result == 0)

    def test_all_one_maps_to_white(self):
        result = to_ubyte(gray_to_rgb(np.ones((4, 4))))

        assert np.all(result == 255)

    def test_rounds_to_nearest(self):
        result = to_ubyte(np.array([0.5, 0.25, 1 / 255, 0.499 / 255]))

        np.testing.assert_array_equal(result, [128, 64, 1, 0])

    def test_out_of_range_is_internal_error(self):
        with pytest.raises(RasterRangeError):
            to_ubyte(np.array([0.0, 1.5]))

        with pytest.raises(RasterRangeError):
            to_ubyte(np.array([-0.1, 0.5]))

    def test_non_finite_is_internal_error(self):
        with pytest.raises(RasterRangeError, match="non-finite"):
            to_ubyte(np.array([0.0, np.nan]))

        with pytest.raises(RasterRangeError, match="non-finite"):
            to_ubyte(np.array([np.inf, 0.5]))


class TestOrient:
    """Tests for orient function."""

    def test_pixel_mapping(self):
        """out[i, j] should equal in[H-1-j, W-1-i]."""
        data = np.arange(6, dtype=np.uint8).reshape(2, 3) * 40
        h, w = data.shape

        result = np.asarray(orient(Image.fromarray(data)))

        assert result.shape == (w, h)
        for i in range(w):
            for j in range(h):
                assert result[i, j] == data[h - 1 - j, w - 1 - i]

    def test_matches_rotate_then_mirror(self):
        """Should equal numpy's counter-clockwise rotation plus left-right flip."""
        data = np.random.randint(0, 255, (5, 7, 3), dtype=np.uint8)

        result = np.asarray(orient(data))

        np.testing.assert_array_equal(result, np.fliplr(np.rot90(data)))

    def test_non_square_is_not_cropped(self):
        result = orient(np.zeros((10, 4, 3), dtype=np.uint8))

        assert result.size == (10, 4)  # PIL size is (width, height)


class TestRasterize:
    """Tests for rasterize function."""

    def test_returns_rgb_image(self):
        image = rasterize(np.zeros((6, 3)))

        assert isinstance(image, Image.Image)
        assert image.mode == "RGB"
        assert image.size == (6, 3)

    def test_returns_rgba_image_with_alpha(self):
        image = rasterize(np.zeros((4, 4)), alpha=True)

        assert image.mode == "RGBA"
        assert np.all(raster_to_array(image)[..., 3] == 255)

    def test_all_ones_rasterize_to_white(self):
        array = raster_to_array(rasterize(np.ones((3, 5))))

        assert array.shape == (5, 3, 3)
        assert np.all(array == 255)

    def test_channels_are_equal(self):
        array = raster_to_array(rasterize(np.random.rand(8, 8)))

        np.testing.assert_array_equal(array[..., 0], array[..., 1])
        np.testing.assert_array_equal(array[..., 1], array[..., 2])

    def test_values_quantized_and_oriented(self):
        plane = np.array([[0.0, 1.0], [0.5, 0.25]])

        array = raster_to_array(rasterize(plane))

        expected = np.rint(np.fliplr(np.rot90(plane)) * 255).astype(np.uint8)
        np.testing.assert_array_equal(array[..., 0], expected)
