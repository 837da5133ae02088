"""
qrlocate - multi-strategy QR code detection and decoding.

Example:
    >>> import asyncio, qrlocate
    >>> result = asyncio.run(qrlocate.detect(rgba, width, height))
    >>> result.decoded_text
    'HELLO'
"""

from qrlocate.api import (
    compose_for_decode,
    configure,
    decode,
    decode_from_surface,
    detect,
    extract_region,
    is_ready,
    preload,
)
from qrlocate.common.types import BoundingBox, Point2D, QuadCorners
from qrlocate.decoding.waterfall import DecodeWaterfall
from qrlocate.detection.engine import QRDetector
from qrlocate.detection.types import DetectionCandidate, DetectionResult
from qrlocate.exceptions import RuntimeInitError
from qrlocate.runtime import VisionRuntime
from qrlocate.validation.oracle import ValidationOracle

__version__ = "0.1.0"

__all__ = [
    "BoundingBox",
    "DecodeWaterfall",
    "DetectionCandidate",
    "DetectionResult",
    "Point2D",
    "QRDetector",
    "QuadCorners",
    "RuntimeInitError",
    "ValidationOracle",
    "VisionRuntime",
    "compose_for_decode",
    "configure",
    "decode",
    "decode_from_surface",
    "detect",
    "extract_region",
    "is_ready",
    "preload",
]
