"""
Image buffer utilities.

Pixel buffers follow canvas conventions: uint8, RGB(A) channel order. These
helpers normalise whatever the caller hands in to the layouts the pipeline
works with.
"""

import logging
from typing import Optional, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

PixelBuffer = Union[np.ndarray, bytes, bytearray, memoryview]


def as_image(
    pixel_buffer: PixelBuffer,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> np.ndarray:
    """
    Interpret a pixel buffer as an image array.

    Flat buffers (bytes or 1-D arrays) must hold ``width * height * 4`` RGBA
    bytes and are reshaped to (H, W, 4). Arrays that already have 2 or 3
    dimensions are returned as-is after a shape check against width/height.

    Raises:
        ValueError: If the buffer is empty, not uint8, or its size does not
            match the given dimensions.
    """
    if isinstance(pixel_buffer, (bytes, bytearray, memoryview)):
        array = np.frombuffer(pixel_buffer, dtype=np.uint8)
    else:
        array = np.asarray(pixel_buffer)

    if array.size == 0:
        raise ValueError("Invalid pixel buffer: empty")
    if array.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixel buffer, got {array.dtype}")

    if array.ndim == 1:
        if width is None or height is None:
            raise ValueError("Flat pixel buffers need width and height")
        expected = int(width) * int(height) * 4
        if array.size != expected:
            raise ValueError(
                f"Pixel buffer has {array.size} bytes, expected {expected} "
                f"for {width}x{height} RGBA"
            )
        return array.reshape(int(height), int(width), 4)

    if array.ndim not in (2, 3):
        raise ValueError(f"Expected 2D or 3D image, got shape {array.shape}")
    if array.ndim == 3 and array.shape[2] not in (1, 3, 4):
        raise ValueError(f"Expected 1, 3 or 4 channels, got {array.shape[2]}")

    if width is not None and array.shape[1] != int(width):
        raise ValueError(f"Image width {array.shape[1]} does not match {width}")
    if height is not None and array.shape[0] != int(height):
        raise ValueError(f"Image height {array.shape[0]} does not match {height}")

    return array


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert a gray, RGB or RGBA image to a single-channel uint8 image."""
    if image.ndim == 2:
        return image
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0]
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Convert a gray, RGB or RGBA image to RGBA (opaque when no alpha)."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    return image


def resize_nearest(image: np.ndarray, scale: float) -> np.ndarray:
    """Resize by ``scale`` without smoothing (module edges stay sharp)."""
    if scale == 1:
        return image
    height, width = image.shape[:2]
    size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
    return cv2.resize(image, size, interpolation=cv2.INTER_NEAREST)
