"""Unit tests for pixel buffer helpers."""

import numpy as np
import pytest

from qrlocate.utils.image import as_image, resize_nearest, to_gray, to_rgba


class TestAsImage:
    def test_flat_bytes(self):
        data = bytes(range(24))

        image = as_image(data, width=3, height=2)

        assert image.shape == (2, 3, 4)
        assert image[1, 2, 3] == 23

    def test_flat_array(self):
        image = as_image(np.zeros(16, dtype=np.uint8), 2, 2)
        assert image.shape == (2, 2, 4)

    def test_size_mismatch(self):
        with pytest.raises(ValueError, match="expected 24"):
            as_image(bytes(20), width=3, height=2)

    def test_flat_needs_dimensions(self):
        with pytest.raises(ValueError, match="need width and height"):
            as_image(bytes(16))

    def test_empty(self):
        with pytest.raises(ValueError, match="empty"):
            as_image(b"", 0, 0)

    def test_wrong_dtype(self):
        with pytest.raises(ValueError, match="uint8"):
            as_image(np.zeros((4, 4), dtype=np.float32))

    def test_array_passthrough(self):
        image = np.zeros((5, 7, 3), dtype=np.uint8)
        assert as_image(image, 7, 5) is image

    def test_array_dimension_check(self):
        with pytest.raises(ValueError, match="width"):
            as_image(np.zeros((5, 7, 3), dtype=np.uint8), width=8)

    def test_bad_channel_count(self):
        with pytest.raises(ValueError, match="channels"):
            as_image(np.zeros((5, 7, 2), dtype=np.uint8))


class TestConversions:
    def test_gray_passthrough(self):
        gray = np.zeros((3, 3), dtype=np.uint8)
        assert to_gray(gray) is gray

    def test_rgba_to_gray(self):
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)
        rgba[..., 0] = 255
        rgba[..., 3] = 255

        assert to_gray(rgba)[0, 0] == 76

    def test_rgb_channel_order(self):
        """Input is RGB, so pure blue must be dark."""
        rgb = np.zeros((1, 1, 3), dtype=np.uint8)
        rgb[..., 2] = 255
        assert to_gray(rgb)[0, 0] == 29

    def test_gray_to_rgba_opaque(self):
        rgba = to_rgba(np.full((2, 2), 9, dtype=np.uint8))
        assert tuple(rgba[0, 0]) == (9, 9, 9, 255)

    def test_rgba_passthrough(self):
        rgba = np.zeros((2, 2, 4), dtype=np.uint8)
        assert to_rgba(rgba) is rgba


class TestResizeNearest:
    def test_identity(self):
        image = np.zeros((3, 3), dtype=np.uint8)
        assert resize_nearest(image, 1) is image

    def test_integer_upscale_repeats_pixels(self):
        image = np.array([[0, 255]], dtype=np.uint8)
        result = resize_nearest(image, 3)

        np.testing.assert_array_equal(result, [[0, 0, 0, 255, 255, 255]] * 3)
