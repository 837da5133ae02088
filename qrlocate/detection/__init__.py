"""QR localization: strategy catalog, coordinate mapping and the detector engine."""

from qrlocate.detection.coordinate_mapper import (
    ScaleAccumulator,
    build_candidate,
    map_to_source,
)
from qrlocate.detection.engine import QRDetector
from qrlocate.detection.localizer import QRLocalizer
from qrlocate.detection.strategies import (
    DEFAULT_STRATEGIES,
    Strategy,
    strategies_from_config,
)
from qrlocate.detection.types import DetectionCandidate, DetectionResult

__all__ = [
    "DEFAULT_STRATEGIES",
    "DetectionCandidate",
    "DetectionResult",
    "QRDetector",
    "QRLocalizer",
    "ScaleAccumulator",
    "Strategy",
    "build_candidate",
    "map_to_source",
    "strategies_from_config",
]
