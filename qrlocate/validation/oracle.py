"""
Validation Oracle

A localized quad only counts as a detection once its region decodes. The
oracle first decodes a padded, upscaled crop of the candidate's bounding box
and, if that fails, a perspective-rectified crop of the quad itself.
"""

import asyncio
import logging
from typing import Optional

import numpy as np

from qrlocate.common.resources import ImageLedger, ImageScope
from qrlocate.common.types import BoundingBox, QuadCorners
from qrlocate.config_loader import Config, get_default_config
from qrlocate.decoding.waterfall import DecodeOptions, DecodeWaterfall
from qrlocate.detection.types import DetectionCandidate
from qrlocate.rectification.perspective import rectify_quad
from qrlocate.runtime import RuntimeCapabilities
from qrlocate.utils.region import padded_rect, upscale_to_target

logger = logging.getLogger(__name__)


class ValidationOracle:
    """
    Confirms candidates by decoding their region on the full-resolution surface.

    Args:
        waterfall: Decode waterfall; built from ``config`` when None.
        config: Pipeline configuration; bundled defaults when None.
        ledger: Ledger counting the crops this oracle creates.

    Example:
        >>> oracle = ValidationOracle()
        >>> text = await oracle.validate(candidate, surface)
    """

    def __init__(
        self,
        waterfall: Optional[DecodeWaterfall] = None,
        config: Optional[Config] = None,
        ledger: Optional[ImageLedger] = None,
    ):
        self.config = config or get_default_config()
        self.ledger = ledger
        self.waterfall = waterfall or DecodeWaterfall.from_config(self.config, ledger)

    async def validate(
        self,
        candidate: DetectionCandidate,
        surface: np.ndarray,
        capabilities: Optional[RuntimeCapabilities] = None,
    ) -> Optional[str]:
        """
        Decode the candidate's region.

        Args:
            candidate: Localized quad in surface coordinates.
            surface: Full-resolution source image.
            capabilities: Loaded runtime. Decoders it lacks are skipped, and
                the rectified attempt needs ``perspective``.

        Returns:
            Decoded text, or None if neither attempt produced any.
        """
        text = await self.decode_roi(
            surface, candidate.bounding_box, capabilities=capabilities
        )
        if text:
            return text

        if not self.config.validation.enable_rectification:
            return None

        text = await self.decode_rectified(
            surface, candidate.corners, capabilities=capabilities
        )
        if text:
            logger.info(f"✓ Candidate from '{candidate.strategy}' confirmed after rectification")
        return text

    async def decode_roi(
        self,
        surface: np.ndarray,
        bounding_box: BoundingBox,
        padding_ratio: Optional[float] = None,
        target_size: Optional[int] = None,
        capabilities: Optional[RuntimeCapabilities] = None,
    ) -> Optional[str]:
        """Decode the padded bounding-box crop, upscaled toward ``target_size``."""
        validation = self.config.validation
        ratio = validation.roi_padding_ratio if padding_ratio is None else padding_ratio
        target = target_size or validation.target_size

        rect = padded_rect(bounding_box, ratio, surface.shape[1], surface.shape[0])
        if rect is None:
            logger.debug(f"ROI {bounding_box.to_tuple()} is empty after clamping")
            return None

        x, y, width, height = rect
        with ImageScope(self.ledger) as scope:
            roi = scope.adopt(surface[y : y + height, x : x + width].copy())
            upscaled = upscale_to_target(roi, target)
            if upscaled is not roi:
                scope.adopt(upscaled)
                scope.release(roi)
            return await self.waterfall.decode(
                upscaled, DecodeOptions(label="roi", capabilities=capabilities)
            )

    async def decode_rectified(
        self,
        surface: np.ndarray,
        corners: QuadCorners,
        capabilities: Optional[RuntimeCapabilities] = None,
    ) -> Optional[str]:
        """Decode the quad after warping it onto a padded square."""
        rectification = self.config.rectification
        with ImageScope(self.ledger) as scope:
            rectified = rectify_quad(
                surface,
                corners,
                target_size=rectification.target_size,
                padding_ratio=rectification.padding_ratio,
                min_side_length=rectification.min_side_length,
                perspective_available=capabilities.perspective if capabilities else True,
            )
            await asyncio.sleep(0)
            if rectified is None:
                return None
            scope.adopt(rectified)
            return await self.waterfall.decode(
                rectified, DecodeOptions(label="rectified", capabilities=capabilities)
            )
