"""
Export Orchestrator - thin caller that turns dashboard state into downloads.

For each export it:
- refuses to start while another export is running (busy flag)
- builds a fresh export data model from the current dependencies
- calls the CSV, PNG or PDF exporter
- reports the outcome through a notifier callback
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from devcontrol.core.downloads import DownloadSink
from devcontrol.core.errors import ExportBusy, ExportError
from devcontrol.core.models import (
    CircularDependency,
    ExportRecord,
    ExportStats,
    ServiceDependency,
    build_export_data,
)
from devcontrol.core.settings import ExportSettings
from devcontrol.exporters.csv_exporter import export_dependencies_to_csv
from devcontrol.exporters.pdf_exporter import export_dependency_report
from devcontrol.exporters.png_exporter import export_graph_to_png
from devcontrol.exporters.result import ExportResult
from devcontrol.render.rasterizer import SurfaceRasterizer
from devcontrol.render.surface import RenderedSurface

logger = logging.getLogger(__name__)

# notifier(level, message) with level "success" or "error"
Notifier = Callable[[str, str], None]

UI_SETTLE_DELAY = 0.1

GRAPH_NOT_LOADED = "Graph not loaded. Please wait for the graph to render."


def _log_notifier(level: str, message: str):
    if level == "error":
        logger.error(message)
    else:
        logger.info(message)


class ExportOrchestrator:
    """
    Coordinate CSV, PNG and PDF exports for the dependencies page.

    Usage:
        orchestrator = ExportOrchestrator(settings, notifier=show_toast)
        await orchestrator.export_csv(dependencies, cycles)
        await orchestrator.export_pdf(dependencies, cycles, surface)
    """

    def __init__(
        self,
        settings: Optional[ExportSettings] = None,
        sink: Optional[DownloadSink] = None,
        notifier: Optional[Notifier] = None,
        rasterizer: Optional[SurfaceRasterizer] = None,
        ui_settle_delay: float = UI_SETTLE_DELAY,
    ):
        self.settings = settings or ExportSettings()
        self.sink = sink or DownloadSink(self.settings.downloads_dir)
        self.notifier = notifier or _log_notifier
        self.rasterizer = rasterizer or SurfaceRasterizer.from_settings(self.settings.capture)
        self.ui_settle_delay = ui_settle_delay
        self.exporting_type: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.exporting_type is not None

    def prepare_export_data(
        self,
        dependencies: Sequence[ServiceDependency],
        cycles: Optional[Sequence[CircularDependency]] = None,
    ) -> Tuple[List[ExportRecord], ExportStats]:
        """Build a fresh export data model from the current page state."""
        return build_export_data(dependencies, cycles or [])

    async def _run(self, export_type: str, success_message: str, export) -> ExportResult:
        if self.busy:
            raise ExportBusy(f"An export is already in progress ({self.exporting_type})")

        self.exporting_type = export_type
        try:
            # Let the busy indicator render before the work starts
            await asyncio.sleep(self.ui_settle_delay)
            result = await export()
        except ExportError as e:
            self.notifier("error", str(e))
            raise
        except Exception as e:
            message = f"{export_type.upper()} export failed. Please try again."
            self.notifier("error", message)
            raise ExportError(message) from e
        finally:
            self.exporting_type = None

        self.notifier("success", success_message)
        return result

    async def export_csv(
        self,
        dependencies: Sequence[ServiceDependency],
        cycles: Optional[Sequence[CircularDependency]] = None,
    ) -> ExportResult:
        """Export the current dependencies as CSV."""

        async def run():
            records, stats = self.prepare_export_data(dependencies, cycles)
            return await export_dependencies_to_csv(
                records, stats, self.sink,
                product=self.settings.product,
                display_name=self.settings.display_name,
            )

        return await self._run("csv", "Dependencies exported as CSV", run)

    async def export_png(self, surface: Optional[RenderedSurface]) -> Optional[ExportResult]:
        """
        Export the diagram as PNG.

        Returns None without exporting when no diagram is mounted.
        """
        if surface is None or not surface.is_mounted():
            self.notifier("error", GRAPH_NOT_LOADED)
            return None

        async def run():
            return await export_graph_to_png(surface, self.sink, self.settings, self.rasterizer)

        return await self._run("png", "Graph exported as PNG", run)

    async def export_pdf(
        self,
        dependencies: Sequence[ServiceDependency],
        cycles: Optional[Sequence[CircularDependency]] = None,
        surface: Optional[RenderedSurface] = None,
    ) -> ExportResult:
        """Export the full dependency report as PDF."""

        async def run():
            records, stats = self.prepare_export_data(dependencies, cycles)
            return await export_dependency_report(
                records, stats, surface, self.sink, self.settings, self.rasterizer,
            )

        return await self._run("pdf", "Report exported as PDF", run)
