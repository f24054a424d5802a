"""DevControl render - diagram surfaces and the surface rasterizer."""

from devcontrol.render.surface import (
    RenderedSurface,
    FigureSurface,
    SurfaceStyleSnapshot,
    snapshot_style,
    prepared_for_capture,
)
from devcontrol.render.rasterizer import (
    SurfaceRasterizer,
    FULL_RESOLUTION_PIXEL_RATIO,
    DOCUMENT_PIXEL_RATIO,
    encode_data_uri,
    decode_data_uri,
)
from devcontrol.render.diagram import render_dependency_diagram

__all__ = [
    "RenderedSurface",
    "FigureSurface",
    "SurfaceStyleSnapshot",
    "snapshot_style",
    "prepared_for_capture",
    "SurfaceRasterizer",
    "FULL_RESOLUTION_PIXEL_RATIO",
    "DOCUMENT_PIXEL_RATIO",
    "encode_data_uri",
    "decode_data_uri",
    "render_dependency_diagram",
]
