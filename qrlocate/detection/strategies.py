"""
Strategy Catalog

A strategy is a named, ordered chain of preprocessing operations applied to
the grayscale source before localization. The default catalog runs cheap
chains first and upscaled chains last, so clean captures are found on the
first attempts and small or blurry codes still get a chance.

Strategies can be replaced from YAML:

    detection:
      strategies:
        - name: identity
          steps: []
        - name: scale2_contrast
          steps: ["scale:2", contrast]
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from qrlocate.preprocessing.operations import (
    ADAPTIVE,
    ADAPTIVE_MEAN,
    BLUR,
    CONTRAST,
    EQUALIZE,
    MORPH_CLOSE,
    MORPH_OPEN,
    OTSU,
    SHARPEN,
    SHARPEN_STRONG,
    Operation,
    parse_step,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    """
    Named preprocessing chain.

    Attributes:
        name: Unique name, reported on the detection result.
        operations: Operations applied left to right; empty means identity.
    """

    name: str
    operations: Tuple[Operation, ...] = ()

    @classmethod
    def from_steps(cls, name: str, steps: Iterable[str]) -> "Strategy":
        """Build a strategy from step tags such as ``"contrast"`` or ``"scale:2"``."""
        return cls(name=name, operations=tuple(parse_step(s) for s in steps))

    @property
    def scale_factor(self) -> float:
        """Product of all scale factors in the chain."""
        factor = 1.0
        for op in self.operations:
            if op.factor is not None:
                factor *= op.factor
        return factor

    def describe(self) -> str:
        return " -> ".join(op.tag for op in self.operations) or "identity"


_X2 = Operation.scale(2)
_X3 = Operation.scale(3)
_X4 = Operation.scale(4)

DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    # Identity and simple enhancement
    Strategy("identity"),
    Strategy("blur", (BLUR,)),
    Strategy("equalize", (EQUALIZE,)),
    Strategy("contrast", (CONTRAST,)),
    # Sharpening
    Strategy("sharpen", (SHARPEN,)),
    Strategy("sharpen_strong", (SHARPEN_STRONG,)),
    Strategy("blur_sharpen", (BLUR, SHARPEN)),
    Strategy("contrast_sharpen", (CONTRAST, SHARPEN)),
    # Binarization
    Strategy("otsu", (OTSU,)),
    Strategy("adaptive", (ADAPTIVE,)),
    Strategy("adaptive_mean", (ADAPTIVE_MEAN,)),
    Strategy("contrast_otsu", (CONTRAST, OTSU)),
    Strategy("blur_adaptive", (BLUR, ADAPTIVE)),
    # Morphology
    Strategy("morph_close", (MORPH_CLOSE,)),
    Strategy("morph_open", (MORPH_OPEN,)),
    Strategy("otsu_morph_close", (OTSU, MORPH_CLOSE)),
    Strategy("adaptive_morph_open", (ADAPTIVE, MORPH_OPEN)),
    # 2x upscale
    Strategy("scale2", (_X2,)),
    Strategy("scale2_sharpen", (_X2, SHARPEN)),
    Strategy("scale2_contrast", (_X2, CONTRAST)),
    Strategy("scale2_otsu", (_X2, OTSU)),
    Strategy("scale2_contrast_sharpen", (_X2, CONTRAST, SHARPEN)),
    Strategy("scale2_blur_adaptive", (_X2, BLUR, ADAPTIVE)),
    # 3x upscale
    Strategy("scale3", (_X3,)),
    Strategy("scale3_sharpen", (_X3, SHARPEN)),
    Strategy("scale3_contrast", (_X3, CONTRAST)),
    Strategy("scale3_otsu", (_X3, OTSU)),
    Strategy("scale3_contrast_sharpen_strong", (_X3, CONTRAST, SHARPEN_STRONG)),
    # 4x upscale
    Strategy("scale4", (_X4,)),
    Strategy("scale4_contrast", (_X4, CONTRAST)),
    Strategy("scale4_blur_sharpen", (_X4, BLUR, SHARPEN)),
    Strategy("scale4_contrast_otsu", (_X4, CONTRAST, OTSU)),
)


def strategies_from_config(specs: Optional[Sequence]) -> Tuple[Strategy, ...]:
    """
    Resolve the strategy list from ``detection.strategies``.

    Args:
        specs: ``StrategySpec`` entries from the config, or None.

    Returns:
        The configured strategies, or the default catalog when none are set.

    Raises:
        ValueError: If a step tag is unknown or a name is repeated.
    """
    if not specs:
        return DEFAULT_STRATEGIES

    strategies: List[Strategy] = []
    seen = set()
    for spec in specs:
        if spec.name in seen:
            raise ValueError(f"Duplicate strategy name '{spec.name}'")
        seen.add(spec.name)
        strategies.append(Strategy.from_steps(spec.name, spec.steps))

    logger.info(f"Using {len(strategies)} configured strategies")
    return tuple(strategies)
