"""
Detection data types.

Defines the candidate produced by a localization attempt and the validated
result returned to callers.
"""

from dataclasses import dataclass
from typing import Any, Dict

from qrlocate.common.types import BoundingBox, Point2D, QuadCorners


@dataclass(frozen=True)
class DetectionCandidate:
    """
    A geometrically localized code that has not been decoded yet.

    Attributes:
        corners: Quad in source-image coordinates, clockwise from top-left.
        strategy: Name of the strategy whose localization produced it.
    """

    corners: QuadCorners
    strategy: str

    @property
    def bounding_box(self) -> BoundingBox:
        return self.corners.bounding_box

    @property
    def center(self) -> Point2D:
        return self.corners.center


@dataclass(frozen=True)
class DetectionResult:
    """
    A candidate whose region decoded to a non-empty payload.

    Attributes:
        corners: Quad in source-image coordinates, clockwise from top-left.
        strategy: Strategy that localized the code.
        decoded_text: Payload text (never empty).
    """

    corners: QuadCorners
    strategy: str
    decoded_text: str

    def __post_init__(self):
        if not self.decoded_text:
            raise ValueError("DetectionResult requires a non-empty decoded_text")

    @classmethod
    def from_candidate(
        cls, candidate: DetectionCandidate, decoded_text: str
    ) -> "DetectionResult":
        return cls(
            corners=candidate.corners,
            strategy=candidate.strategy,
            decoded_text=decoded_text,
        )

    @property
    def bounding_box(self) -> BoundingBox:
        return self.corners.bounding_box

    @property
    def center(self) -> Point2D:
        return self.corners.center

    @property
    def top_left(self) -> Point2D:
        return self.corners.top_left

    @property
    def top_right(self) -> Point2D:
        return self.corners.top_right

    @property
    def bottom_right(self) -> Point2D:
        return self.corners.bottom_right

    @property
    def bottom_left(self) -> Point2D:
        return self.corners.bottom_left

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation."""
        box = self.bounding_box
        return {
            "decoded_text": self.decoded_text,
            "strategy": self.strategy,
            "corners": {
                "top_left": self.top_left.model_dump(),
                "top_right": self.top_right.model_dump(),
                "bottom_right": self.bottom_right.model_dump(),
                "bottom_left": self.bottom_left.model_dump(),
            },
            "bounding_box": box.model_dump(),
            "center": self.center.model_dump(),
        }
