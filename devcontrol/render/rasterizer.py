"""
Surface Rasterizer - capture a rendered diagram surface as a PNG image.

While capturing, the surface background is forced to a solid colour and
overlay controls are hidden. Both are restored afterwards whether the
capture succeeds or fails.
"""

import asyncio
import base64
import logging
from typing import Optional

from devcontrol.core.errors import CaptureFailure, SurfaceNotReady
from devcontrol.core.settings import CaptureSettings
from devcontrol.render.surface import (
    RenderedSurface,
    ensure_surface_ready,
    prepared_for_capture,
)

logger = logging.getLogger(__name__)

FULL_RESOLUTION_PIXEL_RATIO = 2.0
DOCUMENT_PIXEL_RATIO = 1.5

DATA_URI_PREFIX = "data:image/png;base64,"


def encode_data_uri(png_bytes: bytes) -> str:
    """Wrap PNG bytes in a ``data:`` URI."""
    return DATA_URI_PREFIX + base64.b64encode(png_bytes).decode("ascii")


def decode_data_uri(data_uri: str) -> bytes:
    """Extract PNG bytes from a ``data:image/png;base64,`` URI."""
    if not data_uri.startswith(DATA_URI_PREFIX):
        raise ValueError("Not a PNG data URI")
    return base64.b64decode(data_uri[len(DATA_URI_PREFIX):])


class SurfaceRasterizer:
    """
    Capture surfaces into PNG data URIs.

    Usage:
        rasterizer = SurfaceRasterizer()
        data_uri = await rasterizer.capture(surface)
        data_uri = await rasterizer.capture(surface, pixel_ratio=DOCUMENT_PIXEL_RATIO)
    """

    def __init__(
        self,
        settle_delay: float = 0.05,
        background: str = "#ffffff",
        full_pixel_ratio: float = FULL_RESOLUTION_PIXEL_RATIO,
        document_pixel_ratio: float = DOCUMENT_PIXEL_RATIO,
    ):
        self.settle_delay = settle_delay
        self.background = background
        self.full_pixel_ratio = full_pixel_ratio
        self.document_pixel_ratio = document_pixel_ratio
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop = None

    @classmethod
    def from_settings(cls, settings: CaptureSettings) -> "SurfaceRasterizer":
        return cls(
            settle_delay=settings.settle_delay,
            background=settings.background,
            full_pixel_ratio=settings.full_pixel_ratio,
            document_pixel_ratio=settings.document_pixel_ratio,
        )

    def _capture_lock(self) -> asyncio.Lock:
        # Surface style mutation must not interleave between two captures
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def capture_png(self, surface: Optional[RenderedSurface], pixel_ratio: Optional[float] = None) -> bytes:
        """
        Capture ``surface`` and return raw PNG bytes.

        Args:
            surface: Mounted surface to capture
            pixel_ratio: Pixel density multiplier (full resolution by default)

        Raises:
            SurfaceNotReady: If the surface is missing, unmounted or empty
            CaptureFailure: If rendering fails
        """
        ensure_surface_ready(surface)
        if pixel_ratio is None:
            pixel_ratio = self.full_pixel_ratio

        async with self._capture_lock():
            try:
                with prepared_for_capture(surface, self.background):
                    await asyncio.sleep(self.settle_delay)
                    png_bytes = surface.render_png(pixel_ratio, self.background)
            except SurfaceNotReady:
                raise
            except Exception as e:
                logger.error(f"Surface capture failed: {e}")
                raise CaptureFailure(f"Failed to capture graph: {e}") from e

        logger.info(f"Captured surface at {pixel_ratio}x ({len(png_bytes)} bytes)")
        return png_bytes

    async def capture(self, surface: Optional[RenderedSurface], pixel_ratio: Optional[float] = None) -> str:
        """Capture ``surface`` and return a PNG data URI."""
        png_bytes = await self.capture_png(surface, pixel_ratio)
        return encode_data_uri(png_bytes)

