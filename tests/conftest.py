"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import cv2
import numpy as np
import pytest

from qrlocate.common.resources import ImageLedger
from qrlocate.config_loader import Config
from qrlocate.runtime import RuntimeCapabilities, VisionRuntime


def render_qr(text: str, module_px: int = 4) -> np.ndarray:
    """Encode ``text`` as a grayscale QR tile with ``module_px`` pixels per module."""
    encoder = cv2.QRCodeEncoder.create()
    tile = encoder.encode(text)
    if tile.ndim == 3:
        tile = cv2.cvtColor(tile, cv2.COLOR_BGR2GRAY)
    # Guarantee a quiet zone whatever border the encoder adds
    tile = cv2.copyMakeBorder(tile, 4, 4, 4, 4, cv2.BORDER_CONSTANT, value=255)
    height, width = tile.shape[:2]
    return cv2.resize(
        tile, (width * module_px, height * module_px), interpolation=cv2.INTER_NEAREST
    )


def place_on_canvas(tile: np.ndarray, size: int = 200) -> np.ndarray:
    """Center a grayscale tile on a white square canvas and return it as RGBA."""
    canvas = np.full((size, size), 255, dtype=np.uint8)
    height, width = tile.shape[:2]
    top = (size - height) // 2
    left = (size - width) // 2
    canvas[top : top + height, left : left + width] = tile
    return cv2.cvtColor(canvas, cv2.COLOR_GRAY2RGBA)


@pytest.fixture
def hello_surface():
    """200x200 RGBA image with an axis-aligned QR code encoding "HELLO"."""
    if not hasattr(cv2, "QRCodeEncoder"):
        pytest.skip("OpenCV build has no QRCodeEncoder")
    tile = render_qr("HELLO", module_px=4)
    return place_on_canvas(tile, 200)


@pytest.fixture
def small_hello_surface():
    """40x40 RGBA image with a one-pixel-per-module "HELLO" code."""
    if not hasattr(cv2, "QRCodeEncoder"):
        pytest.skip("OpenCV build has no QRCodeEncoder")
    tile = render_qr("HELLO", module_px=1)
    if max(tile.shape[:2]) > 40:
        pytest.skip(f"Encoded tile {tile.shape[:2]} does not fit a 40px canvas")
    return place_on_canvas(tile, 40)


@pytest.fixture
def skewed_hello_surface(hello_surface):
    """The "HELLO" surface warped by a mild perspective skew."""
    src = np.float32([[0, 0], [200, 0], [200, 200], [0, 200]])
    dst = np.float32([[12, 6], [188, 22], [194, 190], [4, 178]])
    matrix = cv2.getPerspectiveTransform(src, dst)
    return cv2.warpPerspective(
        hello_surface, matrix, (200, 200), borderValue=(255, 255, 255, 255)
    )


@pytest.fixture
def low_contrast_hello_surface(hello_surface):
    """The "HELLO" surface with its gray levels compressed into 118..138."""
    surface = hello_surface.copy()
    rgb = surface[..., :3].astype(np.float32)
    surface[..., :3] = np.round(118 + rgb * (20.0 / 255.0)).astype(np.uint8)
    return surface


@pytest.fixture
def hello_tile():
    """Tightly cropped grayscale "HELLO" code (with its quiet zone)."""
    if not hasattr(cv2, "QRCodeEncoder"):
        pytest.skip("OpenCV build has no QRCodeEncoder")
    return render_qr("HELLO", module_px=4)


@pytest.fixture
def blank_surface():
    """Uniform mid-gray RGBA image with nothing to find."""
    image = np.full((120, 160, 4), 128, dtype=np.uint8)
    image[:, :, 3] = 255
    return image


@pytest.fixture
def gradient_gray():
    """Horizontal gradient, useful for checking operators change pixels."""
    row = np.linspace(0, 255, 64, dtype=np.uint8)
    return np.tile(row, (48, 1))


@pytest.fixture
def ledger():
    """Fresh image ledger, isolated from the process-wide one."""
    return ImageLedger()


@pytest.fixture
def default_config():
    """Model defaults, independent of the bundled YAML."""
    return Config()


@pytest.fixture
def capabilities():
    return RuntimeCapabilities(
        opencv_version="test",
        qr_detector=True,
        perspective=True,
        zxing=True,
        pyzbar=True,
    )


@pytest.fixture
def ready_runtime(capabilities):
    """Runtime whose initializer returns immediately."""
    return VisionRuntime(initializer=lambda: capabilities, timeout_s=5.0)


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing sample 4-corner points in scrambled order."""
    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float32,
    )
