"""
Package-level entry points.

These functions share one lazily built detector, oracle and waterfall per
process, all configured from the bundled ``config.yaml``. None of them raise
on internal failure; they return None instead and log the reason.
"""

import logging
from typing import Optional, Union

import numpy as np

from qrlocate.common.types import BoundingBox
from qrlocate.config_loader import Config, get_default_config
from qrlocate.decoding.waterfall import DecodeOptions, DecodeWaterfall
from qrlocate.detection.engine import QRDetector
from qrlocate.detection.types import DetectionCandidate, DetectionResult
from qrlocate.exceptions import RuntimeInitError
from qrlocate.runtime import VisionRuntime, get_runtime
from qrlocate.utils.image import PixelBuffer, as_image
from qrlocate.utils.region import Color
from qrlocate.utils.region import compose_for_decode as _compose_for_decode
from qrlocate.utils.region import extract_region as _extract_region
from qrlocate.validation.oracle import ValidationOracle

logger = logging.getLogger(__name__)

_config: Optional[Config] = None
_detector: Optional[QRDetector] = None


def configure(config: Optional[Config] = None) -> None:
    """Use ``config`` for every later call (None goes back to the bundled file)."""
    global _config, _detector
    _config = config
    _detector = None
    if config is not None:
        get_runtime(config.runtime.init_timeout_s)


def get_config() -> Config:
    global _config
    if _config is None:
        _config = get_default_config()
    return _config


def get_detector() -> QRDetector:
    """The shared detector, built on first use."""
    global _detector
    if _detector is None:
        _detector = QRDetector(config=get_config())
    _runtime()
    return _detector


def _runtime() -> VisionRuntime:
    """The shared runtime, carrying the configured init timeout."""
    return get_runtime(get_config().runtime.init_timeout_s)


def _oracle() -> ValidationOracle:
    return get_detector().oracle


def _waterfall() -> DecodeWaterfall:
    return _oracle().waterfall


async def preload() -> bool:
    """Initialize the vision runtime ahead of the first detection."""
    try:
        await _runtime().ensure_ready()
    except RuntimeInitError as e:
        logger.error(f"Preload failed: {e}")
        return False
    return True


def is_ready() -> bool:
    return _runtime().is_ready


async def detect(
    pixel_buffer: PixelBuffer,
    width: Optional[int] = None,
    height: Optional[int] = None,
    source_surface: Optional[np.ndarray] = None,
) -> Optional[DetectionResult]:
    """
    Locate and decode a QR code in an image.

    Args:
        pixel_buffer: RGBA bytes (with width/height) or an image array.
        width: Width of a flat buffer.
        height: Height of a flat buffer.
        source_surface: Full-resolution image used for validation crops.

    Returns:
        A validated detection, or None.

    Example:
        >>> result = await qrlocate.detect(rgba, 640, 480)
        >>> result.decoded_text
        'HELLO'
    """
    return await get_detector().detect(pixel_buffer, width, height, source_surface)


async def decode(region_image: Optional[np.ndarray]) -> Optional[str]:
    """
    Decode a region image without localizing first.

    Returns:
        Payload text, or None.
    """
    try:
        capabilities = await _runtime().ensure_ready()
    except RuntimeInitError as e:
        logger.error(f"Decode aborted: {e}")
        return None

    if region_image is None:
        return None

    try:
        image = as_image(region_image)
        return await _waterfall().decode(
            image, DecodeOptions(label="region", capabilities=capabilities)
        )
    except Exception as e:
        logger.error(f"Decode failed: {type(e).__name__}: {e}")
        return None


async def decode_from_surface(
    surface: np.ndarray,
    detection: Union[DetectionResult, DetectionCandidate, BoundingBox],
    padding_ratio: Optional[float] = None,
    target_size: Optional[int] = None,
) -> Optional[str]:
    """
    Re-decode a known detection from a (possibly higher resolution) surface.

    Args:
        surface: Image the detection's coordinates refer to.
        detection: Detection, candidate or bare bounding box.
        padding_ratio: ROI padding; the validation default when None.
        target_size: ROI upscale target; the validation default when None.
    """
    try:
        capabilities = await _runtime().ensure_ready()
    except RuntimeInitError as e:
        logger.error(f"Decode aborted: {e}")
        return None

    try:
        box = detection if isinstance(detection, BoundingBox) else detection.bounding_box
        image = as_image(surface)
        return await _oracle().decode_roi(
            image, box, padding_ratio, target_size, capabilities=capabilities
        )
    except Exception as e:
        logger.error(f"Decode failed: {type(e).__name__}: {e}")
        return None


def extract_region(
    surface: np.ndarray,
    bounding_box: BoundingBox,
    margin_ratio: Optional[float] = None,
) -> Optional[np.ndarray]:
    """
    Crop a margin-expanded region (``region.extract_margin_ratio`` by default).
    """
    if margin_ratio is None:
        margin_ratio = get_config().region.extract_margin_ratio
    try:
        return _extract_region(surface, bounding_box, margin_ratio)
    except Exception as e:
        logger.error(f"extract_region failed: {type(e).__name__}: {e}")
        return None


def compose_for_decode(
    image: np.ndarray,
    padding: float = 0,
    background_color: Optional[Color] = "#ffffff",
    target_width: Optional[int] = None,
    target_height: Optional[int] = None,
    smoothing: bool = True,
) -> Optional[np.ndarray]:
    """
    Place ``image`` on a padded RGBA canvas for decode attempts.

    See ``qrlocate.utils.region.compose_for_decode``; returns None instead of
    raising on a bad image or color.
    """
    try:
        return _compose_for_decode(
            image,
            padding=padding,
            background_color=background_color,
            target_width=target_width,
            target_height=target_height,
            smoothing=smoothing,
        )
    except Exception as e:
        logger.error(f"compose_for_decode failed: {type(e).__name__}: {e}")
        return None


__all__ = [
    "compose_for_decode",
    "configure",
    "decode",
    "decode_from_surface",
    "detect",
    "extract_region",
    "get_config",
    "get_detector",
    "is_ready",
    "preload",
]
