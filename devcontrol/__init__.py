"""
DevControl - Service dependency report exports

Turns the dependency data shown on the DevControl dashboard into
downloadable artifacts.

Usage:
    devcontrol export csv dependencies.json
    devcontrol export pdf dependencies.json --no-graph
    devcontrol export png dependencies.yaml -o ./exports

Features:
    - CSV export with metadata preamble (spreadsheet friendly)
    - PNG snapshot of the dependency diagram with watermark
    - Multi-page PDF report (cover, summary, graph, details, cycle advice)
"""

__version__ = "1.0.0"

from devcontrol.core.models import ExportRecord, ExportStats, build_export_data
from devcontrol.orchestrator import ExportOrchestrator

__all__ = [
    "__version__",
    "ExportRecord",
    "ExportStats",
    "build_export_data",
    "ExportOrchestrator",
]
