"""
DevControl PNG Exporter - Save a full-resolution snapshot of the dependency diagram.

The diagram surface is captured at full pixel density, placed on a white
canvas of at least the configured minimum size, and stamped with a
watermark in the bottom-right corner.
"""

import io
import logging
from datetime import datetime
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from devcontrol.core.downloads import DownloadSink, export_filename
from devcontrol.core.errors import CaptureFailure, SerializationFailure, SurfaceNotReady
from devcontrol.core.settings import ExportSettings
from devcontrol.exporters.result import ExportResult
from devcontrol.render.rasterizer import SurfaceRasterizer, decode_data_uri
from devcontrol.render.surface import RenderedSurface

logger = logging.getLogger(__name__)

WATERMARK_PADDING = 20
WATERMARK_FONT_SIZE = 14
WATERMARK_FILL = (0, 0, 0, 102)  # 40% black


def watermark_text(display_name: str, now: Optional[datetime] = None) -> str:
    """e.g. ``DevControl - Mar 05, 2024, 02:07 PM``"""
    if now is None:
        now = datetime.now()
    return f"{display_name} - {now.strftime('%b %d, %Y, %I:%M %p')}"


def finish_snapshot(
    png_bytes: bytes,
    min_width: int = 1920,
    min_height: int = 1080,
    watermark: Optional[str] = None,
) -> bytes:
    """
    Pad a captured PNG to the minimum canvas size and stamp the watermark.

    Args:
        png_bytes: Captured diagram
        min_width: Minimum output width in pixels
        min_height: Minimum output height in pixels
        watermark: Text for the bottom-right corner, or None to skip

    Returns:
        Finished PNG bytes
    """
    with Image.open(io.BytesIO(png_bytes)) as captured:
        captured = captured.convert("RGBA")

    width = max(captured.width, min_width)
    height = max(captured.height, min_height)

    canvas = Image.new("RGBA", (width, height), (255, 255, 255, 255))
    canvas.alpha_composite(captured, (0, 0))

    if watermark:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = ImageFont.load_default(size=WATERMARK_FONT_SIZE)
        left, top, right, bottom = draw.textbbox((0, 0), watermark, font=font)
        x = width - WATERMARK_PADDING - (right - left)
        y = height - WATERMARK_PADDING - (bottom - top)
        draw.text((x - left, y - top), watermark, font=font, fill=WATERMARK_FILL)
        canvas = Image.alpha_composite(canvas, layer)

    output = io.BytesIO()
    canvas.convert("RGB").save(output, format="PNG")
    return output.getvalue()


class PNGExporter:
    """
    Export the dependency diagram as a PNG download.

    Usage:
        exporter = PNGExporter(sink, settings)
        result = await exporter.export(surface)
    """

    def __init__(
        self,
        sink: DownloadSink,
        settings: Optional[ExportSettings] = None,
        rasterizer: Optional[SurfaceRasterizer] = None,
    ):
        self.sink = sink
        self.settings = settings or ExportSettings()
        self.rasterizer = rasterizer or SurfaceRasterizer.from_settings(self.settings.capture)

    def filename(self, now: Optional[datetime] = None) -> str:
        return export_filename(self.settings.product, "dependency-graph", "png", now)

    async def export(self, surface: Optional[RenderedSurface]) -> ExportResult:
        """
        Capture, finish and save the snapshot.

        Raises:
            SurfaceNotReady: If there is no mounted, non-empty surface
            CaptureFailure: If the surface could not be rendered
            SerializationFailure: If encoding or saving fails
        """
        try:
            data_uri = await self.rasterizer.capture(surface, self.rasterizer.full_pixel_ratio)

            png_settings = self.settings.png
            text = watermark_text(self.settings.display_name) if png_settings.watermark else None
            data = finish_snapshot(
                decode_data_uri(data_uri),
                min_width=png_settings.min_width,
                min_height=png_settings.min_height,
                watermark=text,
            )

            filename = self.filename()
            output_path = self.sink.save(filename, data)
        except SurfaceNotReady:
            raise
        except CaptureFailure as e:
            logger.error(f"PNG export failed: {e}")
            raise CaptureFailure(f"Failed to export graph as PNG: {e}") from e
        except Exception as e:
            logger.error(f"PNG export failed: {e}")
            raise SerializationFailure(f"Failed to export graph as PNG: {e}") from e

        logger.info(f"PNG export successful: {filename}")

        return ExportResult(
            filename=filename,
            output_path=output_path,
            size=len(data),
            stats={"watermarked": text is not None},
        )


async def export_graph_to_png(
    surface: Optional[RenderedSurface],
    sink: DownloadSink,
    settings: Optional[ExportSettings] = None,
    rasterizer: Optional[SurfaceRasterizer] = None,
) -> ExportResult:
    """
    Export the dependency diagram to a PNG file.

    Args:
        surface: Rendered diagram surface
        sink: Where to save the file
        settings: Export settings (product name, PNG options)
        rasterizer: Rasterizer to use (built from settings by default)

    Returns:
        ExportResult
    """
    exporter = PNGExporter(sink, settings=settings, rasterizer=rasterizer)
    return await exporter.export(surface)
