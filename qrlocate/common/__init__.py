"""Shared geometry types and resource scopes."""

from qrlocate.common.resources import ImageLedger, ImageScope, get_shared_ledger
from qrlocate.common.types import (
    BoundingBox,
    Point2D,
    QuadCorners,
    order_points_clockwise,
)

__all__ = [
    "BoundingBox",
    "ImageLedger",
    "ImageScope",
    "Point2D",
    "QuadCorners",
    "get_shared_ledger",
    "order_points_clockwise",
]
