"""
Common geometry types for the detection pipeline.

Pydantic-based definitions for points, quadrilaterals and bounding boxes.
Coordinates are floats; whether they live in processed space or source space
is up to the caller, and the two are never mixed without an explicit mapping
(see ``qrlocate.detection.coordinate_mapper``).
"""

from typing import List, Tuple

import numpy as np
from pydantic import BaseModel, Field, field_validator


class Point2D(BaseModel):
    """
    A 2D point with float coordinates.

    Example:
        >>> p = Point2D(x=10.5, y=20)
        >>> p.to_tuple()
        (10.5, 20.0)
    """

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    model_config = {"frozen": True}

    @field_validator("x", "y", mode="before")
    @classmethod
    def _must_be_finite(cls, v):
        v = float(v)
        if not np.isfinite(v):
            raise ValueError(f"Coordinate must be finite, got {v}")
        return v

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point2D":
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


class BoundingBox(BaseModel):
    """
    Axis-aligned envelope ``(x, y, width, height)``.

    Always derived from a ``QuadCorners``; never stored on its own.
    """

    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    model_config = {"frozen": True}

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


class QuadCorners(BaseModel):
    """
    Four corners ordered clockwise from the top-left.

    Attributes:
        top_left, top_right, bottom_right, bottom_left: Corner points.
    """

    top_left: Point2D
    top_right: Point2D
    bottom_right: Point2D
    bottom_left: Point2D

    model_config = {"frozen": True}

    @classmethod
    def from_points(cls, points) -> "QuadCorners":
        """
        Build corners from 4 points already in clockwise-from-top-left order.

        Args:
            points: Anything convertible to an array of shape (4, 2).

        Raises:
            ValueError: If there are not exactly 4 points.
        """
        pts = np.asarray(points, dtype=np.float64)
        if pts.shape != (4, 2):
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
            )
        return cls(
            top_left=Point2D.from_numpy(pts[0]),
            top_right=Point2D.from_numpy(pts[1]),
            bottom_right=Point2D.from_numpy(pts[2]),
            bottom_left=Point2D.from_numpy(pts[3]),
        )

    @property
    def points(self) -> List[Point2D]:
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def to_numpy(self) -> np.ndarray:
        """Corners as a float32 array of shape (4, 2) in [TL, TR, BR, BL] order."""
        return np.array([p.to_tuple() for p in self.points], dtype=np.float32)

    @property
    def bounding_box(self) -> BoundingBox:
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return BoundingBox(
            x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys)
        )

    @property
    def center(self) -> Point2D:
        return Point2D(
            x=sum(p.x for p in self.points) / 4.0,
            y=sum(p.y for p in self.points) / 4.0,
        )

    def side_lengths(self) -> List[float]:
        """Lengths of the sides TL→TR, TR→BR, BR→BL, BL→TL."""
        pts = self.to_numpy().astype(np.float64)
        return [
            float(np.linalg.norm(pts[(i + 1) % 4] - pts[i])) for i in range(4)
        ]

    def area(self) -> float:
        """Absolute area (shoelace formula)."""
        pts = self.to_numpy().astype(np.float64)
        x, y = pts[:, 0], pts[:, 1]
        return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def order_points_clockwise(pts) -> np.ndarray:
    """
    Order 4 points clockwise (in image coordinates) starting at the top-left.

    Points are sorted by their angle around the centroid, which stays stable
    for rotated squares where sum/difference heuristics tie. The start is the
    point with the smallest ``x + y``.

    Args:
        pts: Array-like of shape (4, 2).

    Returns:
        float32 array of shape (4, 2) in [TL, TR, BR, BL] order.

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> order_points_clockwise([[10, 10], [0, 10], [10, 0], [0, 0]])
        array([[ 0.,  0.],
               [10.,  0.],
               [10., 10.],
               [ 0., 10.]], dtype=float32)
    """
    pts = np.asarray(pts, dtype=np.float32)
    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    centroid = pts.mean(axis=0)
    # y grows downward, so ascending atan2 is clockwise on screen
    angles = np.arctan2(pts[:, 1] - centroid[1], pts[:, 0] - centroid[0])
    ordered = pts[np.argsort(angles, kind="stable")]

    start = int(np.argmin(ordered.sum(axis=1)))
    return np.roll(ordered, -start, axis=0)
