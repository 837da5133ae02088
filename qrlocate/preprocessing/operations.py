"""Operation variants and dispatch for the preprocessing library.

An ``Operation`` is a closed tagged value: an ``OperationKind`` plus the
parameters that kind needs (only ``SCALE_BY`` carries a factor). Dispatch goes
through a table that must cover every kind; a missing entry fails at import
time instead of silently doing nothing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional

import numpy as np

from qrlocate.preprocessing import operators

if TYPE_CHECKING:
    from qrlocate.config_loader import PreprocessingConfig


class OperationKind(Enum):
    """All preprocessing operations a strategy can use."""

    BLUR = "blur"
    EQUALIZE = "equalize"
    CONTRAST = "contrast"
    SHARPEN = "sharpen"
    SHARPEN_STRONG = "sharpen_strong"
    OTSU_THRESHOLD = "otsu"
    ADAPTIVE_THRESHOLD_GAUSSIAN = "adaptive"
    ADAPTIVE_THRESHOLD_MEAN = "adaptive_mean"
    MORPH_CLOSE = "morph_close"
    MORPH_OPEN = "morph_open"
    SCALE_BY = "scale"


@dataclass(frozen=True)
class Operation:
    """One step of a strategy.

    Attributes:
        kind: Operation kind.
        factor: Scale factor, required for SCALE_BY and forbidden otherwise.
    """

    kind: OperationKind
    factor: Optional[float] = None

    def __post_init__(self):
        if self.kind is OperationKind.SCALE_BY:
            if self.factor is None or self.factor <= 0:
                raise ValueError(f"SCALE_BY needs a positive factor, got {self.factor}")
        elif self.factor is not None:
            raise ValueError(f"{self.kind.name} does not take a factor")

    @classmethod
    def scale(cls, factor: float) -> "Operation":
        return cls(OperationKind.SCALE_BY, float(factor))

    @property
    def tag(self) -> str:
        if self.kind is OperationKind.SCALE_BY:
            return f"scale:{self.factor:g}"
        return self.kind.value

    def __str__(self) -> str:
        return self.tag


BLUR = Operation(OperationKind.BLUR)
EQUALIZE = Operation(OperationKind.EQUALIZE)
CONTRAST = Operation(OperationKind.CONTRAST)
SHARPEN = Operation(OperationKind.SHARPEN)
SHARPEN_STRONG = Operation(OperationKind.SHARPEN_STRONG)
OTSU = Operation(OperationKind.OTSU_THRESHOLD)
ADAPTIVE = Operation(OperationKind.ADAPTIVE_THRESHOLD_GAUSSIAN)
ADAPTIVE_MEAN = Operation(OperationKind.ADAPTIVE_THRESHOLD_MEAN)
MORPH_CLOSE = Operation(OperationKind.MORPH_CLOSE)
MORPH_OPEN = Operation(OperationKind.MORPH_OPEN)


def parse_step(tag: str) -> Operation:
    """
    Parse a step tag into an Operation.

    Accepted tags are the ``OperationKind`` values plus ``scale:<factor>``
    and ``scale_<factor>`` for scaling.

    Raises:
        ValueError: If the tag is unknown or the factor is invalid.

    Example:
        >>> parse_step("scale:2")
        Operation(kind=<OperationKind.SCALE_BY: 'scale'>, factor=2.0)
    """
    text = str(tag).strip().lower()

    for prefix in ("scale:", "scale_"):
        if text.startswith(prefix):
            raw_factor = text[len(prefix):]
            try:
                factor = float(raw_factor)
            except ValueError as e:
                raise ValueError(f"Invalid scale factor in step '{tag}'") from e
            return Operation.scale(factor)

    if text == OperationKind.SCALE_BY.value:
        raise ValueError("Step 'scale' needs a factor, e.g. 'scale:2'")

    try:
        return Operation(OperationKind(text))
    except ValueError as e:
        valid = [k.value for k in OperationKind if k is not OperationKind.SCALE_BY]
        raise ValueError(
            f"Unknown preprocessing step '{tag}'. Must be one of {valid} or 'scale:<factor>'"
        ) from e


def _default_params() -> "PreprocessingConfig":
    from qrlocate.config_loader import PreprocessingConfig

    return PreprocessingConfig()


_Handler = Callable[[np.ndarray, Operation, "PreprocessingConfig"], np.ndarray]

_DISPATCH: Dict[OperationKind, _Handler] = {
    OperationKind.BLUR: lambda img, op, p: operators.gaussian_blur(
        img, p.blur_kernel_size
    ),
    OperationKind.EQUALIZE: lambda img, op, p: operators.equalize_histogram(img),
    OperationKind.CONTRAST: lambda img, op, p: operators.enhance_contrast(
        img, p.clahe_clip_limit, p.clahe_tile_size
    ),
    OperationKind.SHARPEN: lambda img, op, p: operators.sharpen(img),
    OperationKind.SHARPEN_STRONG: lambda img, op, p: operators.sharpen_strong(img),
    OperationKind.OTSU_THRESHOLD: lambda img, op, p: operators.otsu_threshold(img),
    OperationKind.ADAPTIVE_THRESHOLD_GAUSSIAN: (
        lambda img, op, p: operators.adaptive_threshold_gaussian(
            img, p.adaptive_block_size, p.adaptive_c
        )
    ),
    OperationKind.ADAPTIVE_THRESHOLD_MEAN: (
        lambda img, op, p: operators.adaptive_threshold_mean(
            img, p.adaptive_block_size, p.adaptive_c
        )
    ),
    OperationKind.MORPH_CLOSE: lambda img, op, p: operators.morph_close(
        img, p.morph_kernel_size
    ),
    OperationKind.MORPH_OPEN: lambda img, op, p: operators.morph_open(
        img, p.morph_kernel_size
    ),
    OperationKind.SCALE_BY: lambda img, op, p: operators.scale_by(img, op.factor),
}

_missing = set(OperationKind) - set(_DISPATCH)
if _missing:
    raise RuntimeError(f"No preprocessing handler for {sorted(k.name for k in _missing)}")


def apply_operation(
    gray: np.ndarray,
    operation: Operation,
    params: Optional["PreprocessingConfig"] = None,
) -> np.ndarray:
    """
    Apply a single operation to a grayscale image.

    Args:
        gray: Single-channel uint8 image (not modified).
        operation: Operation to apply.
        params: Operator parameters; defaults are used when None.

    Returns:
        New image produced by the operation.
    """
    if params is None:
        params = _default_params()
    return _DISPATCH[operation.kind](gray, operation, params)
