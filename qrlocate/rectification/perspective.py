"""
Perspective Rectification

Maps a (possibly skewed) quadrilateral onto an axis-aligned square canvas via
a projective transform. Angled captures decode far more reliably once the
code is square again.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from qrlocate.common.types import QuadCorners

logger = logging.getLogger(__name__)

MAX_PADDING_RATIO = 0.5
WHITE = (255, 255, 255, 255)


def square_destination(size: int, pad: int) -> np.ndarray:
    """Corners of the square inset by ``pad`` inside a ``size`` x ``size`` canvas."""
    far = float(size - pad)
    near = float(pad)
    return np.array(
        [
            [near, near],  # Top-Left
            [far, near],  # Top-Right
            [far, far],  # Bottom-Right
            [near, far],  # Bottom-Left
        ],
        dtype=np.float32,
    )


def rectify_quad(
    surface: np.ndarray,
    corners: QuadCorners,
    target_size: Optional[int] = None,
    padding_ratio: float = 0.15,
    min_side_length: float = 1.0,
    perspective_available: bool = True,
) -> Optional[np.ndarray]:
    """
    Warp the quad spanned by ``corners`` onto a square canvas.

    The output side is the longest quad side unless ``target_size`` is given.
    The quad is mapped onto a square inset by ``size * padding_ratio`` pixels
    (ratio clamped to 0.5), and everything outside the source quad is filled
    with white.

    Args:
        surface: Full-resolution source image (gray, RGB or RGBA).
        corners: Quad in surface coordinates, clockwise from top-left.
        target_size: Explicit output side in pixels.
        padding_ratio: Inward padding relative to the output size.
        min_side_length: Quads with a shorter side count as degenerate.
        perspective_available: False when the runtime lacks projective warps.

    Returns:
        Rectified square image, or None for degenerate input or when the
        projective capability is unavailable.

    Example:
        >>> crop = rectify_quad(frame, detection.corners, padding_ratio=0.15)
        >>> crop.shape[:2]
        (412, 412)
    """
    if not perspective_available:
        logger.warning("Rectification skipped: projective transform unavailable")
        return None

    if surface is None or surface.size == 0:
        logger.warning("Rectification skipped: empty surface")
        return None

    sides = corners.side_lengths()
    if min(sides) < min_side_length:
        logger.debug(f"Rectification skipped: degenerate quad, sides={sides}")
        return None

    size = int(target_size) if target_size else int(round(max(sides)))
    ratio = min(max(padding_ratio, 0.0), MAX_PADDING_RATIO)
    pad = int(round(size * ratio))

    if size - 2 * pad < 1:
        logger.debug(f"Rectification skipped: padding {pad}px leaves no room in {size}px")
        return None

    src = corners.to_numpy()
    dst = square_destination(size, pad)

    try:
        matrix = cv2.getPerspectiveTransform(src, dst)
        border = WHITE[: surface.shape[2]] if surface.ndim == 3 else 255
        rectified = cv2.warpPerspective(
            surface,
            matrix,
            (size, size),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=border,
        )
    except cv2.error as e:
        logger.warning(f"Rectification failed: {e}")
        return None

    if pad > 0:
        # Blank the inset ring so only the quad's own pixels remain
        mask = np.zeros((size, size), dtype=np.uint8)
        cv2.fillConvexPoly(mask, np.round(dst).astype(np.int32), 255)
        rectified[mask == 0] = border

    logger.debug(f"Rectified quad to {size}x{size} (pad={pad}px)")
    return rectified
