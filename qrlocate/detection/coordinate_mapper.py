"""
Coordinate Mapper

Converts corner coordinates reported in a strategy's processed space back to
source-image space. Only ``SCALE_BY`` operations change the geometry of the
working image, so a single cumulative factor describes the whole chain no
matter how many resizes it contains.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from qrlocate.common.types import QuadCorners, order_points_clockwise
from qrlocate.detection.types import DetectionCandidate
from qrlocate.preprocessing.operations import Operation, OperationKind

logger = logging.getLogger(__name__)

CORNER_VALUES = 8
MIN_SCALE = 1e-6


class ScaleAccumulator:
    """
    Multiplicative scale factor of one strategy run.

    Starts at 1; only ``SCALE_BY`` operations change it.

    Example:
        >>> acc = ScaleAccumulator()
        >>> acc.apply(Operation.scale(2))
        >>> acc.apply(Operation.scale(1.5))
        >>> acc.factor
        3.0
    """

    def __init__(self):
        self.factor = 1.0

    def reset(self) -> None:
        self.factor = 1.0

    def apply(self, operation: Operation) -> None:
        if operation.kind is OperationKind.SCALE_BY:
            self.factor *= operation.factor


def safe_divisor(scale: float) -> float:
    """The scale itself, or 1 when it is zero or too close to zero."""
    if not np.isfinite(scale) or abs(scale) < MIN_SCALE:
        logger.warning(f"Invalid cumulative scale {scale}, treating as 1")
        return 1.0
    return float(scale)


def map_to_source(points: Sequence[float], scale: float) -> Optional[QuadCorners]:
    """
    Map raw localizer output to source-space corners.

    Args:
        points: Exactly 8 floats (4 x/y pairs), or an array reshapeable to that.
        scale: Cumulative scale factor of the strategy.

    Returns:
        Corners clockwise from top-left, or None for a wrong corner count or
        non-finite values.
    """
    raw = np.asarray(points, dtype=np.float64).ravel()
    if raw.size != CORNER_VALUES:
        logger.debug(f"Rejected localization with {raw.size} values (need {CORNER_VALUES})")
        return None
    if not np.all(np.isfinite(raw)):
        logger.debug("Rejected localization with non-finite coordinates")
        return None

    mapped = raw.reshape(4, 2) / safe_divisor(scale)
    return QuadCorners.from_points(order_points_clockwise(mapped))


def build_candidate(
    points: Sequence[float],
    scale: float,
    strategy_name: str,
    min_area: float = 1.0,
) -> Optional[DetectionCandidate]:
    """
    Build a candidate from a successful localization.

    Returns:
        The candidate, or None if the corners are invalid or enclose less
        than ``min_area`` square pixels.
    """
    corners = map_to_source(points, scale)
    if corners is None:
        return None

    area = corners.area()
    if area < min_area:
        logger.debug(f"Rejected degenerate quad from '{strategy_name}' (area={area:.2f})")
        return None

    return DetectionCandidate(corners=corners, strategy=strategy_name)
