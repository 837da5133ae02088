"""Decode waterfall: ordered decode providers with first-success short-circuit.

Each provider pairs a decoder backend with a sweep: a list of upscale factors
and, for every factor, a sequence of image variants. Providers are tried in
order; within a provider every (scale, variant) attempt is isolated so that a
crash in one attempt only counts as "no match".

Default order:
    1. vendor    - OpenCV detectAndDecode over colour-robust variants
    2. primary   - zxing-cpp over raw/Otsu/per-channel variants
    3. secondary - pyzbar over the same sweep, only if the primary failed

Example:
    >>> waterfall = DecodeWaterfall.from_config(get_default_config())
    >>> text = await waterfall.decode(region_rgba)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from qrlocate.common.resources import ImageLedger, ImageScope
from qrlocate.config_loader import Config, get_default_config
from qrlocate.decoding.backends import (
    DecoderBackend,
    OpenCVBackend,
    PyzbarBackend,
    ZXingBackend,
)
from qrlocate.decoding.variants import (
    VariantGenerator,
    binarization_variants,
    color_variants,
)
from qrlocate.runtime import RuntimeCapabilities
from qrlocate.utils.image import resize_nearest, to_rgba

logger = logging.getLogger(__name__)


@dataclass
class DecodeOptions:
    """Per-call options passed to every provider.

    Attributes:
        label: Free-form tag used in log messages (e.g. "roi", "rectified").
        scales: Overrides the provider's own scale list when set.
        capabilities: Loaded runtime; providers it lacks are skipped.
    """

    label: str = "region"
    scales: Optional[Sequence[float]] = None
    capabilities: Optional[RuntimeCapabilities] = None


@dataclass
class DecodeProvider:
    """A decoder backend plus the scale/variant sweep it runs.

    Attributes:
        name: Provider name used in logs.
        backend: Decoder backend.
        scales: Upscale factors, tried in order.
        variants: Variant generator run at every scale.
        ledger: Ledger that counts the variant images this provider builds.
        requires: ``RuntimeCapabilities`` flag the backend depends on.
    """

    name: str
    backend: DecoderBackend
    scales: Sequence[float]
    variants: VariantGenerator
    ledger: Optional[ImageLedger] = field(default=None, repr=False)
    requires: Optional[str] = None

    def supported_by(self, capabilities: Optional[RuntimeCapabilities]) -> bool:
        """False when the loaded runtime lacks this provider's backend."""
        if capabilities is not None and self.requires:
            if not getattr(capabilities, self.requires, False):
                return False
        return self.backend.is_available()

    def decode(self, image: np.ndarray, options: Optional[DecodeOptions] = None) -> str:
        """
        Sweep scales and variants until the backend returns text.

        Args:
            image: Region image (gray, RGB or RGBA).
            options: Per-call options.

        Returns:
            Decoded text, or an empty string if every attempt failed.
        """
        options = options or DecodeOptions()
        scales = options.scales if options.scales is not None else self.scales

        with ImageScope(self.ledger) as region_scope:
            rgba = to_rgba(image)
            if rgba is not image:
                region_scope.adopt(rgba)
            return self._sweep(rgba, scales, options)

    def _sweep(
        self, rgba: np.ndarray, scales: Sequence[float], options: DecodeOptions
    ) -> str:
        for scale in scales:
            with ImageScope(self.ledger) as scope:
                scaled = resize_nearest(rgba, scale)
                if scaled is not rgba:
                    scope.adopt(scaled)

                variants = self.variants(scaled)
                while True:
                    try:
                        variant_name, variant = next(variants)
                    except StopIteration:
                        break
                    except Exception as e:
                        logger.debug(
                            f"{self.name} [{options.label}] variant build failed at {scale}x: {e}"
                        )
                        break

                    if variant is not scaled and variant is not rgba:
                        scope.adopt(variant)

                    text = self._attempt(variant, variant_name, scale, options.label)
                    if text:
                        logger.info(
                            f"✓ {self.name} decoded [{options.label}] "
                            f"at {scale}x ({variant_name})"
                        )
                        return text

                    if scope.owns(variant):
                        scope.release(variant)

        return ""

    def _attempt(
        self, variant: np.ndarray, variant_name: str, scale: float, label: str
    ) -> str:
        try:
            return self.backend.read(variant) or ""
        except Exception as e:
            logger.debug(
                f"{self.name} [{label}] {scale}x:{variant_name} raised "
                f"{type(e).__name__}: {e}"
            )
            return ""


class DecodeWaterfall:
    """Ordered list of decode providers, first non-empty result wins.

    Args:
        providers: Providers in the order they should be tried.
    """

    def __init__(self, providers: List[DecodeProvider]):
        self.providers = list(providers)
        logger.debug(
            "DecodeWaterfall initialized: "
            + " -> ".join(p.name for p in self.providers)
        )

    @classmethod
    def from_config(
        cls, config: Optional[Config] = None, ledger: Optional[ImageLedger] = None
    ) -> "DecodeWaterfall":
        """Build the default vendor -> primary -> secondary waterfall."""
        config = config or get_default_config()
        decoding = config.decoding

        providers = [
            DecodeProvider(
                name="opencv",
                backend=OpenCVBackend(),
                scales=list(decoding.vendor_scales),
                variants=color_variants,
                ledger=ledger,
                requires="qr_detector",
            ),
            DecodeProvider(
                name="zxing",
                backend=ZXingBackend(),
                scales=list(decoding.primary_scales),
                variants=binarization_variants,
                ledger=ledger,
                requires="zxing",
            ),
        ]
        if decoding.enable_secondary:
            providers.append(
                DecodeProvider(
                    name="pyzbar",
                    backend=PyzbarBackend(),
                    scales=list(decoding.secondary_scales),
                    variants=binarization_variants,
                    ledger=ledger,
                    requires="pyzbar",
                )
            )
        return cls(providers)

    async def decode(
        self, image: Optional[np.ndarray], options: Optional[DecodeOptions] = None
    ) -> Optional[str]:
        """
        Run the providers in order until one returns text.

        Args:
            image: Region image (gray, RGB or RGBA).
            options: Per-call options forwarded to every provider.

        Returns:
            Decoded text, or None if every provider failed.
        """
        if image is None or image.size == 0:
            logger.warning("Decode skipped: empty image")
            return None

        options = options or DecodeOptions()
        for provider in self.providers:
            if not provider.supported_by(options.capabilities):
                logger.debug(f"Skipping {provider.name}: backend unavailable")
                continue

            try:
                text = provider.decode(image, options)
            except Exception as e:
                logger.warning(f"{provider.name} failed on [{options.label}]: {e}")
                text = ""

            # Yield to other tasks between capability calls
            await asyncio.sleep(0)

            if text:
                return text
            logger.debug(f"{provider.name} found nothing in [{options.label}]")

        logger.info(f"✗ No decoder could read [{options.label}]")
        return None
