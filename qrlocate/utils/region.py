"""
Region utilities.

Cropping, margin expansion and canvas composition used before decode
attempts. Boxes are expressed in source-image coordinates.
"""

import logging
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from qrlocate.common.types import BoundingBox
from qrlocate.utils.image import to_rgba

logger = logging.getLogger(__name__)

Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]

# (x, y, width, height) in integer pixels
PixelRect = Tuple[int, int, int, int]


def parse_color(color: Optional[Color]) -> Tuple[int, int, int, int]:
    """
    Convert ``#rgb``/``#rrggbb``/``#rrggbbaa`` strings or RGB(A) tuples to RGBA.

    None means fully transparent.

    Raises:
        ValueError: If the color cannot be parsed.
    """
    if color is None:
        return (0, 0, 0, 0)

    if isinstance(color, str):
        text = color.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(c * 2 for c in text)
        if len(text) not in (6, 8):
            raise ValueError(f"Invalid color: {color!r}")
        try:
            values = [int(text[i : i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError as e:
            raise ValueError(f"Invalid color: {color!r}") from e
    else:
        values = [int(c) for c in color]

    if len(values) == 3:
        values.append(255)
    if len(values) != 4 or any(v < 0 or v > 255 for v in values):
        raise ValueError(f"Invalid color: {color!r}")
    return tuple(values)


def padded_rect(
    box: BoundingBox, ratio: float, surface_width: int, surface_height: int
) -> Optional[PixelRect]:
    """
    Expand ``box`` by ``ratio`` of its own size on every side and clamp it.

    Returns:
        Integer rectangle inside the surface, or None if nothing is left.
    """
    pad_x = box.width * ratio
    pad_y = box.height * ratio

    x = max(0, int(np.floor(box.x - pad_x)))
    y = max(0, int(np.floor(box.y - pad_y)))
    x1 = min(surface_width, int(np.ceil(box.x + box.width + pad_x)))
    y1 = min(surface_height, int(np.ceil(box.y + box.height + pad_y)))
    width = x1 - x
    height = y1 - y

    if width <= 0 or height <= 0:
        return None
    return (x, y, width, height)


def extract_region(
    surface: np.ndarray, bounding_box: BoundingBox, margin_ratio: float = 0.1
) -> Optional[np.ndarray]:
    """
    Crop a margin-expanded region from ``surface``.

    Args:
        surface: Full-resolution image.
        bounding_box: Region in surface coordinates.
        margin_ratio: Margin on each side as a ratio of the box size.

    Returns:
        A copy of the cropped region, or None if the region lies outside
        the surface or has no area.

    Example:
        >>> crop = extract_region(frame, detection.bounding_box, margin_ratio=0.1)
    """
    if surface is None or surface.size == 0:
        logger.warning("extract_region: empty surface")
        return None

    rect = padded_rect(bounding_box, margin_ratio, surface.shape[1], surface.shape[0])
    if rect is None:
        logger.warning(f"extract_region: box {bounding_box.to_tuple()} outside surface")
        return None

    x, y, width, height = rect
    return surface[y : y + height, x : x + width].copy()


def upscale_to_target(image: np.ndarray, target_size: int) -> np.ndarray:
    """
    Upscale (never downscale) so that the longest side approaches ``target_size``.

    Nearest-neighbour interpolation keeps module edges crisp.
    """
    height, width = image.shape[:2]
    max_side = max(width, height)
    scale = max(1.0, target_size / max_side) if max_side > 0 else 1.0
    if scale == 1.0:
        return image

    size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
    logger.debug(f"Upscaling ROI {width}x{height} -> {size[0]}x{size[1]}")
    return cv2.resize(image, size, interpolation=cv2.INTER_NEAREST)


def compose_for_decode(
    image: np.ndarray,
    padding: float = 0,
    background_color: Optional[Color] = "#ffffff",
    target_width: Optional[int] = None,
    target_height: Optional[int] = None,
    smoothing: bool = True,
) -> np.ndarray:
    """
    Place ``image`` on a padded canvas, optionally resized, for decode attempts.

    Args:
        image: Gray, RGB or RGBA image.
        padding: Border in pixels on each side (rounded, never negative).
        background_color: Canvas color; None leaves the border transparent.
        target_width: Width the image is resized to (defaults to its own).
        target_height: Height the image is resized to (defaults to its own).
        smoothing: Interpolate when resizing; nearest-neighbour otherwise.

    Returns:
        RGBA canvas of shape (H + 2 * pad, W + 2 * pad, 4).
    """
    rgba = to_rgba(image)
    src_height, src_width = rgba.shape[:2]

    pad = max(0, int(round(padding)))
    width = max(1, int(round(target_width or src_width)))
    height = max(1, int(round(target_height or src_height)))

    if (width, height) != (src_width, src_height):
        if not smoothing:
            interpolation = cv2.INTER_NEAREST
        elif width < src_width and height < src_height:
            interpolation = cv2.INTER_AREA
        else:
            interpolation = cv2.INTER_CUBIC
        rgba = cv2.resize(rgba, (width, height), interpolation=interpolation)

    canvas = np.empty((height + pad * 2, width + pad * 2, 4), dtype=np.uint8)
    canvas[:, :] = parse_color(background_color)
    canvas[pad : pad + height, pad : pad + width] = rgba
    return canvas
