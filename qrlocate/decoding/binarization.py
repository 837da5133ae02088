"""
Decode-side binarization.

Numpy implementation of Otsu's threshold used to build decode variants. It
works on RGBA pixels so that transparent areas can be forced to background
before the histogram is built.
"""

import numpy as np

ALPHA_OPAQUE_MIN = 128
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def otsu_threshold_value(gray: np.ndarray) -> int:
    """
    Compute Otsu's threshold for an 8-bit single-channel array.

    For each candidate threshold ``t`` the between-class variance
    ``wB * wF * (mB - mF) ** 2`` is evaluated, where ``wB``/``wF`` are the
    pixel counts at or below / above ``t`` and ``mB``/``mF`` their mean
    intensities. The first ``t`` with the largest variance is returned.

    Args:
        gray: uint8 array of any shape.

    Returns:
        Threshold in [0, 255]; 0 for empty or single-valued input.

    Example:
        >>> otsu_threshold_value(np.array([10, 10, 200, 200], dtype=np.uint8))
        10
    """
    values = np.asarray(gray, dtype=np.uint8).ravel()
    total = values.size
    if total == 0:
        return 0

    hist = np.bincount(values, minlength=256).astype(np.float64)
    levels = np.arange(256, dtype=np.float64)

    w_b = np.cumsum(hist)
    w_f = total - w_b
    sum_b = np.cumsum(levels * hist)
    sum_total = sum_b[-1]

    valid = (w_b > 0) & (w_f > 0)
    between = np.zeros(256, dtype=np.float64)
    m_b = np.divide(sum_b, w_b, out=np.zeros_like(sum_b), where=valid)
    m_f = np.divide(sum_total - sum_b, w_f, out=np.zeros_like(sum_b), where=valid)
    between[valid] = w_b[valid] * w_f[valid] * (m_b[valid] - m_f[valid]) ** 2

    if not between.any():
        return 0
    return int(np.argmax(between))


def _alpha_mask(rgba: np.ndarray) -> np.ndarray:
    """True where a pixel counts as transparent background."""
    return rgba[..., 3] < ALPHA_OPAQUE_MIN


def luminance(rgba: np.ndarray) -> np.ndarray:
    """
    Rounded Rec. 601 luminance of an RGBA image; transparent pixels become 255.

    Args:
        rgba: uint8 array of shape (H, W, 4).

    Returns:
        uint8 array of shape (H, W).
    """
    rgb = rgba[..., :3].astype(np.float64)
    lum = rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] + rgb[..., 2] * LUMA_WEIGHTS[2]
    lum = np.clip(np.round(lum), 0, 255).astype(np.uint8)
    lum[_alpha_mask(rgba)] = 255
    return lum


def channel(rgba: np.ndarray, index: int) -> np.ndarray:
    """Single colour channel of an RGBA image; transparent pixels become 255."""
    values = rgba[..., index].copy()
    values[_alpha_mask(rgba)] = 255
    return values


def binarize(values: np.ndarray, invert: bool = False) -> np.ndarray:
    """
    Otsu-binarize a single-channel uint8 image.

    Pixels strictly above the threshold become 255, the rest 0 (swapped when
    ``invert`` is set).
    """
    threshold = otsu_threshold_value(values)
    binary = np.where(values > threshold, 255, 0).astype(np.uint8)
    if invert:
        binary = 255 - binary
    return binary


def binarize_luminance(rgba: np.ndarray, invert: bool = False) -> np.ndarray:
    return binarize(luminance(rgba), invert)


def binarize_channel(rgba: np.ndarray, index: int, invert: bool = False) -> np.ndarray:
    return binarize(channel(rgba, index), invert)
