"""Unit tests for decode variant generators."""

import numpy as np

from qrlocate.decoding.variants import binarization_variants, color_variants


def _red_on_white():
    image = np.full((20, 20, 4), 255, dtype=np.uint8)
    image[5:15, 5:15, :3] = (220, 30, 30)
    return image


class TestColorVariants:
    def test_names_in_order(self):
        names = [name for name, _ in color_variants(_red_on_white())]
        assert names == [
            "gray",
            "gray-otsu",
            "gray-otsu-inv",
            "red",
            "sat",
            "sat-otsu",
            "sat-otsu-inv",
        ]

    def test_single_channel(self):
        for _, image in color_variants(_red_on_white()):
            assert image.shape == (20, 20)
            assert image.dtype == np.uint8

    def test_saturation_exposes_colored_code(self):
        variants = dict(color_variants(_red_on_white()))

        sat_inv = variants["sat-otsu-inv"]
        # Saturated mark turns dark, white background stays light
        assert sat_inv[10, 10] == 0
        assert sat_inv[0, 0] == 255

    def test_lazy(self):
        generator = color_variants(_red_on_white())
        name, _ = next(generator)
        assert name == "gray"


class TestBinarizationVariants:
    def test_names_in_order(self):
        names = [name for name, _ in binarization_variants(_red_on_white())]
        assert names == [
            "raw",
            "gray-otsu",
            "red-otsu",
            "red-otsu-inv",
            "green-otsu",
            "green-otsu-inv",
            "blue-otsu",
            "blue-otsu-inv",
        ]

    def test_raw_is_input(self):
        image = _red_on_white()
        _, raw = next(binarization_variants(image))
        assert raw is image

    def test_inverse_pairs(self):
        variants = dict(binarization_variants(_red_on_white()))
        for name in ("red", "green", "blue"):
            np.testing.assert_array_equal(
                variants[f"{name}-otsu"], 255 - variants[f"{name}-otsu-inv"]
            )
