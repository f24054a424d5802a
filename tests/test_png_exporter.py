"""Tests for the PNG exporter."""

import asyncio
import io
from datetime import datetime

import pytest
from PIL import Image

from devcontrol.core.errors import CaptureFailure, SerializationFailure, SurfaceNotReady
from devcontrol.core.graph import build_dependency_graph
from devcontrol.exporters.png_exporter import (
    PNGExporter,
    export_graph_to_png,
    finish_snapshot,
    watermark_text,
)
from devcontrol.render.diagram import render_dependency_diagram


def _png(size, color=(37, 99, 235)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestFinishSnapshot:
    """Tests for padding and watermarking."""

    def test_pads_to_minimum(self):
        data = finish_snapshot(_png((40, 30)), min_width=200, min_height=100)

        with Image.open(io.BytesIO(data)) as image:
            assert image.size == (200, 100)
            assert image.getpixel((10, 10)) == (37, 99, 235)
            # padding is white
            assert image.getpixel((150, 80)) == (255, 255, 255)

    def test_keeps_larger_capture(self):
        data = finish_snapshot(_png((300, 200)), min_width=200, min_height=100)
        with Image.open(io.BytesIO(data)) as image:
            assert image.size == (300, 200)

    def test_transparent_capture_gets_white_background(self):
        buffer = io.BytesIO()
        Image.new("RGBA", (20, 20), (0, 0, 0, 0)).save(buffer, format="PNG")

        data = finish_snapshot(buffer.getvalue(), min_width=20, min_height=20)

        with Image.open(io.BytesIO(data)) as image:
            assert image.getpixel((5, 5)) == (255, 255, 255)

    def test_watermark_in_bottom_right(self):
        plain = finish_snapshot(_png((10, 10), (255, 255, 255)), min_width=400, min_height=200)
        marked = finish_snapshot(
            _png((10, 10), (255, 255, 255)), min_width=400, min_height=200,
            watermark="DevControl - Mar 05, 2024, 02:07 PM",
        )

        with Image.open(io.BytesIO(plain)) as a, Image.open(io.BytesIO(marked)) as b:
            bottom_right = (200, 100, 400, 200)
            top_left = (0, 0, 200, 100)
            assert a.crop(bottom_right).tobytes() != b.crop(bottom_right).tobytes()
            assert a.crop(top_left).tobytes() == b.crop(top_left).tobytes()

    def test_watermark_text(self):
        assert watermark_text("DevControl", datetime(2024, 3, 5, 14, 7)) == "DevControl - Mar 05, 2024, 02:07 PM"


class TestPNGExporter:
    """Tests for PNGExporter."""

    def test_export(self, sink, test_settings, fake_surface):
        result = asyncio.run(export_graph_to_png(fake_surface, sink, test_settings))

        assert result.filename.startswith("devcontrol-dependency-graph-")
        assert result.filename.endswith(".png")
        assert result.stats["watermarked"] is True
        with Image.open(result.output_path) as image:
            assert image.size == (200, 100)
        assert fake_surface.render_calls == [(2.0, "#ffffff")]

    def test_no_watermark(self, sink, test_settings, fake_surface):
        test_settings.png.watermark = False
        result = asyncio.run(PNGExporter(sink, test_settings).export(fake_surface))
        assert result.stats["watermarked"] is False

    def test_missing_surface(self, sink, test_settings):
        with pytest.raises(SurfaceNotReady, match="Graph element not found"):
            asyncio.run(export_graph_to_png(None, sink, test_settings))
        assert sink.saved == []

    def test_empty_surface(self, sink, test_settings, make_surface):
        with pytest.raises(SurfaceNotReady, match="Graph is empty"):
            asyncio.run(export_graph_to_png(make_surface(empty=True), sink, test_settings))

    def test_render_failure(self, sink, test_settings, make_surface):
        surface = make_surface(fail_with=RuntimeError("canvas lost"))

        with pytest.raises(CaptureFailure, match="Failed to export graph as PNG"):
            asyncio.run(export_graph_to_png(surface, sink, test_settings))

        assert sink.saved == []
        assert surface.background == "transparent"

    def test_save_failure(self, sink, test_settings, fake_surface, monkeypatch):
        def broken_save(filename, data):
            raise OSError("disk full")

        monkeypatch.setattr(sink, "save", broken_save)

        with pytest.raises(SerializationFailure, match="disk full"):
            asyncio.run(export_graph_to_png(fake_surface, sink, test_settings))

    def test_real_diagram(self, sink, test_settings, sample_dependencies):
        test_settings.png.min_width = 1920
        test_settings.png.min_height = 1080
        surface = render_dependency_diagram(build_dependency_graph(sample_dependencies), figsize=(4, 3), dpi=50)

        result = asyncio.run(export_graph_to_png(surface, sink, test_settings))

        with Image.open(result.output_path) as image:
            assert image.size == (1920, 1080)
