"""
Vision runtime readiness guard.

The pipeline depends on capabilities that are loaded once per process: the
OpenCV QR localizer and projective warp, and the optional ``zxing-cpp`` and
``pyzbar`` decoders. ``VisionRuntime`` probes them exactly once. Callers that
arrive while the probe is in flight await the same task instead of starting
their own. The probe is bounded by a timeout; a failed or timed-out attempt
raises ``RuntimeInitError`` and the next call starts a fresh attempt.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from qrlocate.exceptions import RuntimeInitError

logger = logging.getLogger(__name__)

DEFAULT_INIT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class RuntimeCapabilities:
    """What the loaded vision runtime can do.

    Attributes:
        opencv_version: Version string reported by OpenCV.
        qr_detector: ``cv2.QRCodeDetector`` is available.
        perspective: ``getPerspectiveTransform``/``warpPerspective`` are available.
        zxing: ``zxingcpp`` can be imported.
        pyzbar: ``pyzbar`` (and its native zbar library) can be imported.
    """

    opencv_version: str
    qr_detector: bool
    perspective: bool
    zxing: bool
    pyzbar: bool


def load_vision_runtime() -> RuntimeCapabilities:
    """
    Import and probe the vision libraries.

    Raises:
        RuntimeError: If OpenCV or its QR localizer is missing.
    """
    try:
        import cv2
    except ImportError as e:
        raise RuntimeError(
            "opencv-python not installed. Run: pip install opencv-python"
        ) from e

    if not hasattr(cv2, "QRCodeDetector"):
        raise RuntimeError(f"OpenCV {cv2.__version__} has no QRCodeDetector")

    perspective = hasattr(cv2, "getPerspectiveTransform") and hasattr(
        cv2, "warpPerspective"
    )

    try:
        import zxingcpp  # noqa: F401

        zxing = True
    except ImportError:
        logger.warning("zxing-cpp not available; primary decoder disabled")
        zxing = False

    # pyzbar raises ImportError when the native zbar library is missing
    try:
        from pyzbar import pyzbar  # noqa: F401

        has_pyzbar = True
    except (ImportError, OSError):
        logger.warning("pyzbar/zbar not available; secondary decoder disabled")
        has_pyzbar = False

    return RuntimeCapabilities(
        opencv_version=cv2.__version__,
        qr_detector=True,
        perspective=perspective,
        zxing=zxing,
        pyzbar=has_pyzbar,
    )


class VisionRuntime:
    """
    Init-once, awaitable readiness guard.

    Args:
        initializer: Blocking callable returning ``RuntimeCapabilities``.
            Runs in the default executor so that the timeout can fire.
        timeout_s: Upper bound for one initialization attempt.

    Example:
        >>> runtime = VisionRuntime()
        >>> await runtime.ensure_ready()
        >>> runtime.capabilities.perspective
        True
    """

    def __init__(
        self,
        initializer: Optional[Callable[[], RuntimeCapabilities]] = None,
        timeout_s: float = DEFAULT_INIT_TIMEOUT_S,
    ):
        self._initializer = initializer or load_vision_runtime
        self.timeout_s = timeout_s
        self._ready = False
        self._pending: Optional[asyncio.Future] = None
        self.capabilities: Optional[RuntimeCapabilities] = None

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def ensure_ready(self) -> RuntimeCapabilities:
        """
        Wait until the runtime is initialized, starting initialization if needed.

        Returns:
            The probed capabilities.

        Raises:
            RuntimeInitError: If this attempt failed or timed out.
        """
        if self._ready:
            return self.capabilities

        loop = asyncio.get_running_loop()
        if self._pending is not None and self._pending.get_loop() is not loop:
            # Left over from an event loop that is gone
            self._pending = None

        if self._pending is None:
            logger.info("Initializing vision runtime")
            self._pending = loop.create_task(self._initialize())

        return await asyncio.shield(self._pending)

    async def _initialize(self) -> RuntimeCapabilities:
        loop = asyncio.get_running_loop()
        try:
            capabilities = await asyncio.wait_for(
                loop.run_in_executor(None, self._initializer), timeout=self.timeout_s
            )
        except asyncio.TimeoutError as e:
            self._pending = None
            logger.error(f"Vision runtime initialization timed out after {self.timeout_s}s")
            raise RuntimeInitError(
                f"Vision runtime initialization timed out after {self.timeout_s}s"
            ) from e
        except Exception as e:
            self._pending = None
            logger.error(f"Vision runtime initialization failed: {e}")
            raise RuntimeInitError(f"Vision runtime initialization failed: {e}") from e

        self.capabilities = capabilities
        self._ready = True
        logger.info(f"✓ Vision runtime ready (OpenCV {capabilities.opencv_version})")
        return capabilities


_shared_runtime: Optional[VisionRuntime] = None


def get_runtime(timeout_s: Optional[float] = None) -> VisionRuntime:
    """
    Process-wide runtime shared by the package-level entry points.

    Args:
        timeout_s: Initialization timeout applied to the shared runtime
            (``runtime.init_timeout_s``). Left unchanged when None.
    """
    global _shared_runtime
    if _shared_runtime is None:
        _shared_runtime = VisionRuntime(timeout_s=timeout_s or DEFAULT_INIT_TIMEOUT_S)
    elif timeout_s is not None:
        _shared_runtime.timeout_s = timeout_s
    return _shared_runtime


def set_runtime(runtime: Optional[VisionRuntime]) -> None:
    """Replace the process-wide runtime (None resets it)."""
    global _shared_runtime
    _shared_runtime = runtime
