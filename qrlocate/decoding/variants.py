"""
Decode variants.

Each generator takes an RGBA region and lazily yields ``(name, image)`` pairs
in the order they should be tried, so that a successful early variant saves
the cost of building the rest.
"""

from typing import Callable, Iterator, Tuple

import cv2
import numpy as np

from qrlocate.decoding.binarization import binarize_channel, binarize_luminance

Variant = Tuple[str, np.ndarray]
VariantGenerator = Callable[[np.ndarray], Iterator[Variant]]

RGB_CHANNELS = (("red", 0), ("green", 1), ("blue", 2))


def color_variants(rgba: np.ndarray) -> Iterator[Variant]:
    """
    Single-channel variants that keep coloured codes readable.

    Order: gray, gray-otsu, gray-otsu-inv, red, sat, sat-otsu, sat-otsu-inv.
    """
    gray = cv2.cvtColor(rgba, cv2.COLOR_RGBA2GRAY)
    yield "gray", gray

    _, gray_binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    yield "gray-otsu", gray_binary
    yield "gray-otsu-inv", cv2.bitwise_not(gray_binary)

    yield "red", np.ascontiguousarray(rgba[:, :, 0])

    hsv = cv2.cvtColor(cv2.cvtColor(rgba, cv2.COLOR_RGBA2RGB), cv2.COLOR_RGB2HSV)
    sat = np.ascontiguousarray(hsv[:, :, 1])
    yield "sat", sat

    _, sat_binary = cv2.threshold(sat, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    yield "sat-otsu", sat_binary
    yield "sat-otsu-inv", cv2.bitwise_not(sat_binary)


def binarization_variants(rgba: np.ndarray) -> Iterator[Variant]:
    """
    Raw image followed by Otsu-binarized luminance and per-channel variants.

    Order: raw, gray-otsu, then red/green/blue Otsu each followed by its
    inverse.
    """
    yield "raw", rgba
    yield "gray-otsu", binarize_luminance(rgba)
    for name, index in RGB_CHANNELS:
        yield f"{name}-otsu", binarize_channel(rgba, index)
        yield f"{name}-otsu-inv", binarize_channel(rgba, index, invert=True)
