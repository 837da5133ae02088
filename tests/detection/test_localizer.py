"""Unit tests for the OpenCV localizer wrapper."""

from unittest.mock import MagicMock, patch

import numpy as np

from qrlocate.detection.localizer import QRLocalizer


class TestQRLocalizer:
    def test_detector_lazy_loaded(self):
        localizer = QRLocalizer()
        assert localizer._detector is None

        with patch("qrlocate.detection.localizer.cv2.QRCodeDetector") as mock_cls:
            _ = localizer.detector
            _ = localizer.detector

        mock_cls.assert_called_once()

    def test_flattens_points(self):
        localizer = QRLocalizer()
        points = np.arange(8, dtype=np.float32).reshape(1, 4, 2)
        localizer._detector = MagicMock()
        localizer._detector.detect.return_value = (True, points)

        result = localizer.locate(np.zeros((10, 10), dtype=np.uint8))

        np.testing.assert_array_equal(result, np.arange(8, dtype=np.float32))

    def test_not_found(self):
        localizer = QRLocalizer()
        localizer._detector = MagicMock()
        localizer._detector.detect.return_value = (False, None)

        assert localizer.locate(np.zeros((10, 10), dtype=np.uint8)) is None

    def test_blank_image(self):
        assert QRLocalizer().locate(np.full((100, 100), 255, dtype=np.uint8)) is None

    def test_real_code(self, hello_surface):
        gray = hello_surface[:, :, 0].copy()

        points = QRLocalizer().locate(gray)

        assert points is not None
        assert points.size == 8
        # Corners lie on the code, well inside the 200px canvas
        assert points.min() > 0
        assert points.max() < 200
