"""
Detector Engine

Runs the strategy catalog against the localizer and returns the first
candidate whose region actually decodes.

Pipeline per strategy:
    gray source -> operations (scale factor tracked) -> localizer
    -> coordinate mapper -> validation oracle

Strategies run strictly in order and the search stops at the first validated
result. Failures inside one strategy only abandon that strategy. Every
intermediate image is owned by an ``ImageScope`` and released when its
strategy ends, including on error paths.
"""

import asyncio
import logging
from typing import Optional, Sequence

import numpy as np

from qrlocate.common.resources import ImageLedger, ImageScope
from qrlocate.config_loader import Config, get_default_config
from qrlocate.detection.coordinate_mapper import ScaleAccumulator, build_candidate
from qrlocate.detection.localizer import QRLocalizer
from qrlocate.detection.strategies import Strategy, strategies_from_config
from qrlocate.detection.types import DetectionResult
from qrlocate.exceptions import RuntimeInitError
from qrlocate.preprocessing.operations import apply_operation
from qrlocate.runtime import RuntimeCapabilities, VisionRuntime, get_runtime
from qrlocate.utils.image import PixelBuffer, as_image, to_gray
from qrlocate.validation.oracle import ValidationOracle

logger = logging.getLogger(__name__)


class QRDetector:
    """
    Multi-strategy QR detector.

    Args:
        config: Pipeline configuration; bundled defaults when None.
        strategies: Strategies to try in order; the configured catalog when None.
        localizer: Object with ``locate(gray) -> Optional[array]``.
        oracle: Object with an awaitable ``validate(candidate, surface, ...)``.
        runtime: Readiness guard; the process-wide one when None.
        ledger: Ledger counting the intermediate images of every call.

    Example:
        >>> detector = QRDetector()
        >>> result = await detector.detect(rgba, width, height)
        >>> result.decoded_text if result else None
        'HELLO'
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        strategies: Optional[Sequence[Strategy]] = None,
        localizer: Optional[QRLocalizer] = None,
        oracle: Optional[ValidationOracle] = None,
        runtime: Optional[VisionRuntime] = None,
        ledger: Optional[ImageLedger] = None,
    ):
        self.config = config or get_default_config()
        if strategies is None:
            strategies = strategies_from_config(self.config.detection.strategies)
        self.strategies = tuple(strategies)
        self.localizer = localizer or QRLocalizer()
        self.ledger = ledger
        self.oracle = oracle or ValidationOracle(config=self.config, ledger=ledger)
        self._runtime = runtime

        logger.debug(f"QRDetector initialized with {len(self.strategies)} strategies")

    @property
    def runtime(self) -> VisionRuntime:
        return self._runtime or get_runtime(self.config.runtime.init_timeout_s)

    async def detect(
        self,
        pixel_buffer: PixelBuffer,
        width: Optional[int] = None,
        height: Optional[int] = None,
        source_surface: Optional[np.ndarray] = None,
    ) -> Optional[DetectionResult]:
        """
        Locate and decode a QR code.

        Args:
            pixel_buffer: RGBA bytes (with width/height) or an image array.
            width: Width of a flat buffer.
            height: Height of a flat buffer.
            source_surface: Full-resolution image used for validation crops.
                Must have the same size as the pixel buffer; the buffer is
                used when omitted.

        Returns:
            The first validated detection, or None. Never raises.
        """
        try:
            capabilities = await self.runtime.ensure_ready()
        except RuntimeInitError as e:
            logger.error(f"Detection aborted: {e}")
            return None

        try:
            source = as_image(pixel_buffer, width, height)
        except ValueError as e:
            logger.warning(f"Detection aborted: {e}")
            return None

        surface = self._resolve_surface(source, source_surface)

        try:
            with ImageScope(self.ledger) as base_scope:
                gray = to_gray(source)
                if gray is not source:
                    base_scope.adopt(gray)

                accumulator = ScaleAccumulator()
                for index, strategy in enumerate(self.strategies, 1):
                    logger.debug(f"Trying strategy {index}/{len(self.strategies)}: {strategy.name}")
                    accumulator.reset()
                    result = await self._run_strategy(
                        strategy, gray, surface, accumulator, capabilities
                    )
                    if result is not None:
                        logger.info(
                            f"✓ QR code found by strategy '{strategy.name}' "
                            f"({index}/{len(self.strategies)})"
                        )
                        return result
        except Exception as e:
            logger.error(f"Detection failed: {type(e).__name__}: {e}")
            return None

        logger.info(f"✗ No QR code found after {len(self.strategies)} strategies")
        return None

    def _resolve_surface(
        self, source: np.ndarray, source_surface: Optional[np.ndarray]
    ) -> np.ndarray:
        if source_surface is None:
            return source
        if source_surface.shape[:2] != source.shape[:2]:
            logger.warning(
                f"Source surface {source_surface.shape[:2]} does not match "
                f"pixel buffer {source.shape[:2]}, using the pixel buffer"
            )
            return source
        return source_surface

    async def _run_strategy(
        self,
        strategy: Strategy,
        gray: np.ndarray,
        surface: np.ndarray,
        accumulator: ScaleAccumulator,
        capabilities: Optional[RuntimeCapabilities],
    ) -> Optional[DetectionResult]:
        with ImageScope(self.ledger) as scope:
            working = gray
            try:
                for operation in strategy.operations:
                    produced = apply_operation(working, operation, self.config.preprocessing)
                    accumulator.apply(operation)
                    if produced is not working:
                        scope.adopt(produced)
                        # Only the newest working image stays alive
                        scope.release(working)
                        working = produced
                points = self.localizer.locate(working)
            except Exception as e:
                logger.warning(f"Strategy '{strategy.name}' failed: {e}")
                return None

            await asyncio.sleep(0)

            if points is None:
                logger.debug(f"{strategy.name}: nothing localized")
                return None

            candidate = build_candidate(
                points,
                accumulator.factor,
                strategy.name,
                self.config.detection.min_quad_area,
            )
            if candidate is None:
                return None

            try:
                text = await self.oracle.validate(
                    candidate, surface, capabilities=capabilities
                )
            except Exception as e:
                logger.warning(f"Validation of '{strategy.name}' candidate failed: {e}")
                return None

            if not text:
                logger.debug(f"{strategy.name}: candidate rejected, region did not decode")
                return None

            return DetectionResult.from_candidate(candidate, text)
