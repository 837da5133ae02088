"""Decoder backends wrapping third-party QR readers.

Each backend exposes the same minimal surface:

- ``name``: identifier used in logs
- ``read(image) -> str``: decoded text, empty string when nothing was found
- ``is_available() -> bool``: whether the underlying library can be loaded

Libraries are lazy-loaded on first use so that importing this module never
fails because an optional decoder is missing. ``read`` may raise; the
waterfall treats any exception as "no match" for that attempt.

Example:
    >>> backend = ZXingBackend()
    >>> backend.read(gray)
    'HELLO'
"""

import logging
from typing import Optional

import numpy as np

from qrlocate.utils.image import to_gray

logger = logging.getLogger(__name__)


class DecoderBackend:
    """Base class for decoder backends."""

    name = "backend"
    _available: Optional[bool] = None

    def read(self, image: np.ndarray) -> str:
        raise NotImplementedError

    def load(self):
        """Import or create whatever ``read`` needs."""
        return None

    def is_available(self) -> bool:
        """Whether ``load`` succeeds. Probed once, then cached."""
        if self._available is None:
            try:
                self.load()
                self._available = True
            except (ImportError, AttributeError):
                self._available = False
        return self._available

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class OpenCVBackend(DecoderBackend):
    """OpenCV ``QRCodeDetector.detectAndDecode`` (localize + decode in one call)."""

    name = "opencv"

    def __init__(self):
        self._detector: Optional[object] = None

    @property
    def detector(self):
        if self._detector is None:
            import cv2

            self._detector = cv2.QRCodeDetector()
        return self._detector

    def read(self, image: np.ndarray) -> str:
        gray = to_gray(image) if image.ndim == 3 else image
        text, _points, _straight = self.detector.detectAndDecode(gray)
        return text or ""

    def load(self):
        return self.detector


class ZXingBackend(DecoderBackend):
    """``zxing-cpp`` reader restricted to QR codes."""

    name = "zxing"

    def __init__(self):
        self._module: Optional[object] = None

    @property
    def module(self):
        """Lazy-load zxingcpp on first access.

        Raises:
            ImportError: If zxing-cpp is not installed.
        """
        if self._module is None:
            try:
                import zxingcpp
            except ImportError as e:
                logger.error("Failed to import zxingcpp. Install with: pip install zxing-cpp")
                raise ImportError("zxing-cpp not installed. Run: pip install zxing-cpp") from e
            self._module = zxingcpp
        return self._module

    def read(self, image: np.ndarray) -> str:
        zxingcpp = self.module
        gray = np.ascontiguousarray(to_gray(image) if image.ndim == 3 else image)
        results = zxingcpp.read_barcodes(gray, formats=zxingcpp.BarcodeFormat.QRCode)
        for result in results:
            if result.text:
                return result.text
        return ""

    def load(self):
        return self.module


class PyzbarBackend(DecoderBackend):
    """``pyzbar`` (zbar) reader restricted to QR codes."""

    name = "pyzbar"

    def __init__(self):
        self._module: Optional[object] = None

    @property
    def module(self):
        """Lazy-load pyzbar on first access.

        Raises:
            ImportError: If pyzbar or the native zbar library is missing.
        """
        if self._module is None:
            try:
                from pyzbar import pyzbar
            except (ImportError, OSError) as e:
                logger.error(
                    "Failed to import pyzbar. Install with: pip install pyzbar "
                    "(and the zbar shared library)"
                )
                raise ImportError("pyzbar/zbar not installed. Run: pip install pyzbar") from e
            self._module = pyzbar
        return self._module

    def read(self, image: np.ndarray) -> str:
        pyzbar = self.module
        gray = np.ascontiguousarray(to_gray(image) if image.ndim == 3 else image)
        for symbol in pyzbar.decode(gray, symbols=[pyzbar.ZBarSymbol.QRCODE]):
            text = symbol.data.decode("utf-8", errors="replace")
            if text:
                return text
        return ""

    def load(self):
        return self.module
