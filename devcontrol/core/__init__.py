"""DevControl core - export data model, settings, downloads and graph."""

from devcontrol.core.models import (
    ExportRecord,
    ExportStats,
    ServiceDependency,
    CircularDependency,
    build_export_data,
)
from devcontrol.core.errors import (
    ExportError,
    SurfaceNotReady,
    CaptureFailure,
    SerializationFailure,
    ExportBusy,
)

__all__ = [
    "ExportRecord",
    "ExportStats",
    "ServiceDependency",
    "CircularDependency",
    "build_export_data",
    "ExportError",
    "SurfaceNotReady",
    "CaptureFailure",
    "SerializationFailure",
    "ExportBusy",
]
