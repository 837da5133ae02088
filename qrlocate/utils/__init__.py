"""Image buffer and region helpers."""

from qrlocate.utils.image import as_image, resize_nearest, to_gray, to_rgba
from qrlocate.utils.region import (
    compose_for_decode,
    extract_region,
    padded_rect,
    parse_color,
    upscale_to_target,
)

__all__ = [
    "as_image",
    "compose_for_decode",
    "extract_region",
    "padded_rect",
    "parse_color",
    "resize_nearest",
    "to_gray",
    "to_rgba",
    "upscale_to_target",
]
