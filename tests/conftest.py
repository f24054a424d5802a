"""Shared fixtures for DevControl export tests."""

from datetime import datetime, timezone
from typing import List, Tuple

import matplotlib
import pytest

matplotlib.use("Agg")

from devcontrol.core.downloads import DownloadSink
from devcontrol.core.models import ServiceDependency, CircularDependency
from devcontrol.core.settings import CaptureSettings, ExportSettings, PNGSettings


class FakeControl:
    """Overlay control with a visibility flag."""

    def __init__(self, visible: bool = True):
        self.visible = visible

    def get_visible(self) -> bool:
        return self.visible

    def set_visible(self, b: bool) -> None:
        self.visible = b


class FakeSurface:
    """In-memory RenderedSurface that records what it looked like when rendered."""

    def __init__(self, mounted=True, empty=False, fail_with=None, background="transparent", controls=None):
        self.mounted = mounted
        self.empty = empty
        self.fail_with = fail_with
        self.background = background
        self.controls = controls if controls is not None else [FakeControl(True), FakeControl(False)]
        self.render_calls: List[Tuple[float, str]] = []
        self.seen_during_render = None

    def is_mounted(self) -> bool:
        return self.mounted

    def is_empty(self) -> bool:
        return self.empty

    def size_px(self):
        return (800, 600)

    def get_background(self):
        return self.background

    def set_background(self, color) -> None:
        self.background = color

    def overlay_controls(self):
        return list(self.controls)

    def render_png(self, pixel_ratio: float, background: str) -> bytes:
        self.render_calls.append((pixel_ratio, background))
        self.seen_during_render = {
            "background": self.background,
            "controls": [c.get_visible() for c in self.controls],
        }
        if self.fail_with is not None:
            raise self.fail_with
        return _tiny_png()


def _tiny_png() -> bytes:
    import io
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (40, 30), (37, 99, 235)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 5, 14, 7, 30, tzinfo=timezone.utc)


@pytest.fixture
def sample_dependencies():
    """A small dependency set with one cycle (checkout -> payments -> checkout)."""
    return [
        ServiceDependency(
            id="dep-1",
            source_service_name="checkout",
            target_service_name="payments",
            dependency_type="runtime",
            is_critical=True,
        ),
        ServiceDependency(
            id="dep-2",
            source_service_name="payments",
            target_service_name="checkout",
            dependency_type="api",
        ),
        ServiceDependency(
            id="dep-3",
            source_service_name="checkout",
            target_service_name="inventory",
            dependency_type="data",
        ),
        ServiceDependency(
            id="dep-4",
            source_service_id="svc-42",
            target_service_name="inventory",
            dependency_type="runtime",
        ),
    ]


@pytest.fixture
def sample_cycles():
    return [CircularDependency(path="checkout -> payments -> checkout")]


@pytest.fixture
def fake_surface():
    return FakeSurface()


@pytest.fixture
def test_settings(tmp_path):
    """Settings with no waits, written into a temporary downloads folder."""
    return ExportSettings(
        product="devcontrol",
        display_name="DevControl",
        downloads_dir=tmp_path / "downloads",
        capture=CaptureSettings(settle_delay=0.0),
        png=PNGSettings(min_width=200, min_height=100, watermark=True),
    )


@pytest.fixture
def sink(test_settings):
    return DownloadSink(test_settings.downloads_dir)


@pytest.fixture
def make_surface():
    """Factory for FakeSurface instances."""
    return FakeSurface


@pytest.fixture
def make_control():
    return FakeControl
