"""
Rendered surfaces - what the rasterizer captures.

A surface is anything that:
- knows whether it is mounted and whether it has content
- exposes a background colour that can be changed and restored
- exposes overlay controls (zoom buttons, toolbars, legends) that can be
  hidden and shown
- can render itself to PNG bytes at a given pixel ratio

FigureSurface adapts a matplotlib Figure drawn on the Agg canvas.
"""

import io
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Protocol, Tuple

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from devcontrol.core.errors import SurfaceNotReady

logger = logging.getLogger(__name__)


class OverlayControl(Protocol):
    """An interactive element layered on top of a surface."""

    def get_visible(self) -> bool: ...

    def set_visible(self, b: bool) -> None: ...


class RenderedSurface(Protocol):
    """Handle to an on-screen diagram that can be rasterized."""

    def is_mounted(self) -> bool: ...

    def is_empty(self) -> bool: ...

    def size_px(self) -> Tuple[int, int]: ...

    def get_background(self) -> Any: ...

    def set_background(self, color: Any) -> None: ...

    def overlay_controls(self) -> List[OverlayControl]: ...

    def render_png(self, pixel_ratio: float, background: str) -> bytes: ...


class FigureSurface:
    """
    RenderedSurface backed by a matplotlib Figure.

    Overlay controls are matplotlib artists registered with ``add_control``
    (legends, text banners acting as toolbars). The figure background is the
    figure patch face colour.

    Usage:
        figure = Figure(figsize=(12, 7))
        FigureCanvasAgg(figure)
        surface = FigureSurface(figure)
        surface.add_control(figure.legend(...))
    """

    def __init__(self, figure: Figure, controls: Optional[List[Any]] = None):
        self.figure = figure
        if not isinstance(figure.canvas, FigureCanvasAgg):
            FigureCanvasAgg(figure)
        self._controls: List[Any] = list(controls or [])
        self._mounted = True

    def add_control(self, artist: Any):
        """Register an artist as an overlay control."""
        self._controls.append(artist)

    def unmount(self):
        """Mark the surface as no longer on screen."""
        self._mounted = False

    def is_mounted(self) -> bool:
        return self._mounted and self.figure.canvas is not None

    def is_empty(self) -> bool:
        return not any(ax.has_data() for ax in self.figure.axes)

    def size_px(self) -> Tuple[int, int]:
        width, height = self.figure.get_size_inches()
        dpi = self.figure.dpi
        return int(round(width * dpi)), int(round(height * dpi))

    def get_background(self) -> Tuple[float, float, float, float]:
        return tuple(self.figure.get_facecolor())

    def set_background(self, color: Any) -> None:
        self.figure.set_facecolor(color)

    def overlay_controls(self) -> List[Any]:
        return list(self._controls)

    def render_png(self, pixel_ratio: float, background: str) -> bytes:
        buffer = io.BytesIO()
        self.figure.savefig(
            buffer,
            format="png",
            dpi=self.figure.dpi * pixel_ratio,
            facecolor=background,
        )
        return buffer.getvalue()


@dataclass
class SurfaceStyleSnapshot:
    """Background and control visibility captured before a capture begins."""
    background: Any
    control_visibility: List[bool] = field(default_factory=list)


def snapshot_style(surface: RenderedSurface) -> SurfaceStyleSnapshot:
    """Record the surface's current background and control visibility."""
    return SurfaceStyleSnapshot(
        background=surface.get_background(),
        control_visibility=[c.get_visible() for c in surface.overlay_controls()],
    )


def restore_style(surface: RenderedSurface, snapshot: SurfaceStyleSnapshot):
    """Put back everything recorded in ``snapshot``."""
    surface.set_background(snapshot.background)
    for control, visible in zip(surface.overlay_controls(), snapshot.control_visibility):
        control.set_visible(visible)


def ensure_surface_ready(surface: Optional[RenderedSurface]):
    """
    Raise SurfaceNotReady unless ``surface`` can be captured.

    Raises:
        SurfaceNotReady: If the surface is None, unmounted, or has no content
    """
    if surface is None or not surface.is_mounted():
        raise SurfaceNotReady("Graph element not found. Cannot export.")
    if surface.is_empty():
        raise SurfaceNotReady("Graph is empty. Add dependencies to export the graph.")


@contextmanager
def prepared_for_capture(surface: RenderedSurface, background: str) -> Iterator[SurfaceStyleSnapshot]:
    """
    Force a solid background and hide overlay controls for the duration of
    the block. The previous style is restored on every exit path.
    """
    snapshot = snapshot_style(surface)
    try:
        for control in surface.overlay_controls():
            control.set_visible(False)
        surface.set_background(background)
        yield snapshot
    finally:
        restore_style(surface, snapshot)
        logger.debug("Restored surface style after capture")
