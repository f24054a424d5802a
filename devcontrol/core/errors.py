"""
DevControl export errors.

Every public export entry point catches failures, logs them, and re-raises
one of these with a message suitable for showing to the user.
"""


class ExportError(Exception):
    """Base class for report export failures."""


class SurfaceNotReady(ExportError):
    """Rasterization was requested for a missing, unmounted or empty surface."""


class CaptureFailure(ExportError):
    """The rasterization backend raised while capturing a surface."""


class SerializationFailure(ExportError):
    """CSV, PNG or PDF encoding failed; no file was written."""


class ExportBusy(ExportError):
    """Another export is already running on the same orchestrator."""
