"""
QR localization capability.

Thin wrapper over ``cv2.QRCodeDetector.detect``. It only finds geometry; the
payload is read separately by the decode waterfall, so a localization is never
trusted until the region actually decodes.
"""

import logging
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class QRLocalizer:
    """
    Finds the four corners of a QR code in a grayscale image.

    The OpenCV detector is created on first use and reused afterwards.

    Example:
        >>> localizer = QRLocalizer()
        >>> points = localizer.locate(gray)
        >>> points.shape
        (8,)
    """

    def __init__(self):
        self._detector = None

    @property
    def detector(self):
        if self._detector is None:
            try:
                self._detector = cv2.QRCodeDetector()
                logger.debug("✓ QRCodeDetector created")
            except Exception as e:
                raise RuntimeError(f"Failed to create QRCodeDetector: {e}") from e
        return self._detector

    def locate(self, image: np.ndarray) -> Optional[np.ndarray]:
        """
        Localize a code.

        Args:
            image: Single-channel uint8 image.

        Returns:
            Flat float32 array of the reported corner coordinates
            (x0, y0, x1, y1, ...), or None when nothing was found.
        """
        found, points = self.detector.detect(image)
        if not found or points is None or points.size == 0:
            return None
        return np.asarray(points, dtype=np.float32).ravel()
