"""
Preprocessing Operators

Pure grayscale image transforms applied before a localization attempt.
Every operator returns a new array and leaves its input untouched.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

SHARPEN_KERNEL = np.array(
    [
        [0, -1, 0],
        [-1, 5, -1],
        [0, -1, 0],
    ],
    dtype=np.float32,
)

# Full negative ring, heavier centre
SHARPEN_STRONG_KERNEL = np.array(
    [
        [-1, -1, -1],
        [-1, 9, -1],
        [-1, -1, -1],
    ],
    dtype=np.float32,
)


def gaussian_blur(gray: np.ndarray, kernel_size: int = 5) -> np.ndarray:
    """Gaussian smoothing for noise suppression before thresholding."""
    return cv2.GaussianBlur(gray, (kernel_size, kernel_size), 0)


def equalize_histogram(gray: np.ndarray) -> np.ndarray:
    """Global histogram equalization."""
    return cv2.equalizeHist(gray)


def enhance_contrast(
    gray: np.ndarray, clip_limit: float = 2.0, tile_size: int = 8
) -> np.ndarray:
    """
    Locally-adaptive contrast enhancement (CLAHE).

    Args:
        gray: Single-channel uint8 image.
        clip_limit: Contrast limit per tile.
        tile_size: Number of tiles per side of the grid.

    Returns:
        Contrast-enhanced image with the same shape.
    """
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(gray)


def sharpen(gray: np.ndarray) -> np.ndarray:
    return cv2.filter2D(gray, -1, SHARPEN_KERNEL)


def sharpen_strong(gray: np.ndarray) -> np.ndarray:
    return cv2.filter2D(gray, -1, SHARPEN_STRONG_KERNEL)


def otsu_threshold(gray: np.ndarray) -> np.ndarray:
    """Global binarization with Otsu's between-class variance rule."""
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return binary


def adaptive_threshold_gaussian(
    gray: np.ndarray, block_size: int = 11, c: float = 2
) -> np.ndarray:
    return cv2.adaptiveThreshold(
        gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, block_size, c
    )


def adaptive_threshold_mean(
    gray: np.ndarray, block_size: int = 11, c: float = 2
) -> np.ndarray:
    return cv2.adaptiveThreshold(
        gray, 255, cv2.ADAPTIVE_THRESH_MEAN_C, cv2.THRESH_BINARY, block_size, c
    )


def morph_close(gray: np.ndarray, kernel_size: int = 3) -> np.ndarray:
    """Morphological closing (fills small holes)."""
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))
    return cv2.morphologyEx(gray, cv2.MORPH_CLOSE, kernel)


def morph_open(gray: np.ndarray, kernel_size: int = 3) -> np.ndarray:
    """Morphological opening (removes speckles)."""
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))
    return cv2.morphologyEx(gray, cv2.MORPH_OPEN, kernel)


def scale_by(gray: np.ndarray, factor: float) -> np.ndarray:
    """
    Uniform resize by ``factor``.

    Upscaling uses bicubic interpolation, downscaling uses area averaging.

    Raises:
        ValueError: If factor is not positive.
    """
    if factor <= 0:
        raise ValueError(f"Scale factor must be positive, got {factor}")

    height, width = gray.shape[:2]
    new_size = (max(1, int(round(width * factor))), max(1, int(round(height * factor))))
    interpolation = cv2.INTER_CUBIC if factor >= 1 else cv2.INTER_AREA

    logger.debug(f"Scaling {width}x{height} by {factor} -> {new_size[0]}x{new_size[1]}")
    return cv2.resize(gray, new_size, interpolation=interpolation)
