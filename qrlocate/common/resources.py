"""
Scoped ownership of intermediate images.

Every image produced while a detection or decode call runs is adopted by an
``ImageScope``. The scope releases whatever it still owns when it exits,
whether the block returned normally or raised. An ``ImageLedger`` counts
creations and releases so that leaks across repeated calls are observable.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class ImageLedger:
    """Running totals of adopted and released images."""

    created: int = 0
    released: int = 0

    @property
    def outstanding(self) -> int:
        return self.created - self.released

    def reset(self) -> None:
        self.created = 0
        self.released = 0


_shared_ledger = ImageLedger()


def get_shared_ledger() -> ImageLedger:
    """Process-wide ledger used when a component is not given its own."""
    return _shared_ledger


class ImageScope:
    """
    Owner of the intermediate images produced by one step.

    Example:
        >>> with ImageScope(ledger) as scope:
        ...     blurred = scope.adopt(cv2.GaussianBlur(gray, (5, 5), 0))
        ...     binary = scope.adopt(otsu(blurred))
        ...     scope.release(blurred)  # ownership moved on to ``binary``
    """

    def __init__(self, ledger: Optional[ImageLedger] = None):
        self.ledger = ledger if ledger is not None else _shared_ledger
        self._owned: Dict[int, np.ndarray] = {}
        self._closed = False

    def adopt(self, image: np.ndarray) -> np.ndarray:
        """Take ownership of ``image`` and return it."""
        if self._closed:
            raise RuntimeError("Cannot adopt an image into a closed scope")
        key = id(image)
        if key not in self._owned:
            self._owned[key] = image
            self.ledger.created += 1
        return image

    def owns(self, image: np.ndarray) -> bool:
        return id(image) in self._owned

    def release(self, image: np.ndarray) -> None:
        """Release one owned image early. Images not owned here are ignored."""
        if self._owned.pop(id(image), None) is not None:
            self.ledger.released += 1

    def close(self) -> None:
        """Release everything still owned. Safe to call more than once."""
        count = len(self._owned)
        self._owned.clear()
        self.ledger.released += count
        self._closed = True
        if count:
            logger.debug(f"Released {count} intermediate image(s)")

    @property
    def size(self) -> int:
        return len(self._owned)

    def __enter__(self) -> "ImageScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
