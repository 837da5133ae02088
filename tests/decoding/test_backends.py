"""Unit tests for decoder backend wrappers."""

import sys
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from qrlocate.decoding.backends import OpenCVBackend, PyzbarBackend, ZXingBackend


@pytest.fixture
def gray():
    return np.full((30, 30), 255, dtype=np.uint8)


class TestOpenCVBackend:
    def test_lazy_detector(self):
        assert OpenCVBackend()._detector is None

    def test_empty_text_on_blank(self, gray):
        assert OpenCVBackend().read(gray) == ""

    def test_converts_color_input(self):
        backend = OpenCVBackend()
        backend._detector = MagicMock()
        backend._detector.detectAndDecode.return_value = ("HI", None, None)

        text = backend.read(np.zeros((10, 10, 4), dtype=np.uint8))

        assert text == "HI"
        passed = backend._detector.detectAndDecode.call_args.args[0]
        assert passed.ndim == 2

    def test_reads_real_code(self, hello_tile):
        assert OpenCVBackend().read(hello_tile) == "HELLO"


class TestZXingBackend:
    def test_reads_first_non_empty(self, gray):
        fake = MagicMock()
        fake.read_barcodes.return_value = [MagicMock(text=""), MagicMock(text="ZX")]
        backend = ZXingBackend()
        backend._module = fake

        assert backend.read(gray) == "ZX"
        assert fake.read_barcodes.call_args.kwargs["formats"] is fake.BarcodeFormat.QRCode

    def test_no_results(self, gray):
        fake = MagicMock()
        fake.read_barcodes.return_value = []
        backend = ZXingBackend()
        backend._module = fake

        assert backend.read(gray) == ""

    def test_unavailable_when_import_fails(self):
        with patch.dict(sys.modules, {"zxingcpp": None}):
            backend = ZXingBackend()
            assert backend.is_available() is False
            with pytest.raises(ImportError, match="zxing-cpp not installed"):
                backend.read(np.zeros((4, 4), dtype=np.uint8))


class TestPyzbarBackend:
    def test_decodes_bytes(self, gray):
        fake = MagicMock()
        fake.decode.return_value = [MagicMock(data="héllo".encode("utf-8"))]
        backend = PyzbarBackend()
        backend._module = fake

        assert backend.read(gray) == "héllo"
        assert fake.decode.call_args.kwargs["symbols"] == [fake.ZBarSymbol.QRCODE]

    def test_invalid_utf8_replaced(self, gray):
        fake = MagicMock()
        fake.decode.return_value = [MagicMock(data=b"\xffok")]
        backend = PyzbarBackend()
        backend._module = fake

        assert backend.read(gray).endswith("ok")

    def test_unavailable_when_import_fails(self):
        with patch.dict(sys.modules, {"pyzbar": None, "pyzbar.pyzbar": None}):
            assert PyzbarBackend().is_available() is False
