"""Unit tests for geometry types and corner ordering."""

import numpy as np
import pytest
from pydantic import ValidationError

from qrlocate.common.types import BoundingBox, Point2D, QuadCorners, order_points_clockwise


@pytest.fixture
def square():
    return QuadCorners.from_points([[10, 20], [110, 20], [110, 120], [10, 120]])


class TestPoint2D:
    def test_rejects_nan(self):
        with pytest.raises(ValidationError):
            Point2D(x=float("nan"), y=0)

    def test_frozen(self):
        p = Point2D(x=1, y=2)
        with pytest.raises(ValidationError):
            p.x = 5

    def test_from_numpy_shape(self):
        with pytest.raises(ValueError, match="shape"):
            Point2D.from_numpy(np.zeros(3))


class TestQuadCorners:
    def test_bounding_box(self, square):
        assert square.bounding_box == BoundingBox(x=10, y=20, width=100, height=100)

    def test_center(self, square):
        assert square.center.to_tuple() == (60.0, 70.0)

    def test_area(self, square):
        assert square.area() == pytest.approx(10000.0)

    def test_side_lengths(self, square):
        assert square.side_lengths() == pytest.approx([100.0, 100.0, 100.0, 100.0])

    def test_to_numpy_order(self, square):
        pts = square.to_numpy()
        assert pts.dtype == np.float32
        np.testing.assert_array_equal(pts[0], [10, 20])
        np.testing.assert_array_equal(pts[2], [110, 120])

    def test_from_points_wrong_count(self):
        with pytest.raises(ValueError, match="Expected exactly 4 points"):
            QuadCorners.from_points([[0, 0], [1, 1]])

    def test_collinear_area_is_zero(self):
        quad = QuadCorners.from_points([[0, 0], [5, 0], [10, 0], [15, 0]])
        assert quad.area() == 0.0


class TestOrderPointsClockwise:
    def test_scrambled_input(self, sample_quadrilateral_points):
        ordered = order_points_clockwise(sample_quadrilateral_points)

        np.testing.assert_array_equal(ordered[0], [100, 200])  # TL
        np.testing.assert_array_equal(ordered[1], [300, 150])  # TR
        np.testing.assert_array_equal(ordered[2], [320, 400])  # BR
        np.testing.assert_array_equal(ordered[3], [80, 380])  # BL

    def test_already_ordered(self):
        pts = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float32)
        np.testing.assert_array_equal(order_points_clockwise(pts), pts)

    def test_counter_clockwise_input(self):
        pts = [[0, 0], [0, 10], [10, 10], [10, 0]]
        ordered = order_points_clockwise(pts)
        np.testing.assert_array_equal(ordered, [[0, 0], [10, 0], [10, 10], [0, 10]])

    def test_rotated_square(self):
        """Diamond shape: the start is still the point with the smallest x + y."""
        pts = [[50, 0], [100, 50], [50, 100], [0, 50]]
        ordered = order_points_clockwise(pts)

        assert ordered.shape == (4, 2)
        # Clockwise on screen means positive signed area with y pointing down
        x, y = ordered[:, 0], ordered[:, 1]
        signed = np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))
        assert signed > 0

    def test_invalid_count(self):
        with pytest.raises(ValueError, match="Expected exactly 4 points"):
            order_points_clockwise([[0, 0], [1, 1], [2, 2]])
