"""
DevControl Exporters - Output generation modules

Available exporters:
- csv_exporter.py - Export dependency rows as CSV with a metadata preamble
- png_exporter.py - Export a watermarked snapshot of the dependency diagram
- pdf_exporter.py - Export the multi-page dependency report
"""

from devcontrol.exporters.result import ExportResult
from devcontrol.exporters.csv_exporter import (
    CSVExporter,
    build_csv,
    parse_csv,
    export_dependencies_to_csv,
)
from devcontrol.exporters.png_exporter import (
    PNGExporter,
    export_graph_to_png,
)
from devcontrol.exporters.pdf_exporter import (
    DocumentComposer,
    ReportDocument,
    compose_report,
    export_dependency_report,
)

__all__ = [
    "ExportResult",
    # CSV
    "CSVExporter",
    "build_csv",
    "parse_csv",
    "export_dependencies_to_csv",
    # PNG
    "PNGExporter",
    "export_graph_to_png",
    # PDF
    "DocumentComposer",
    "ReportDocument",
    "compose_report",
    "export_dependency_report",
]
