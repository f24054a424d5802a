"""
DevControl CSV Exporter - Export service dependencies to a spreadsheet-friendly CSV.

Layout:
- Metadata preamble (export source, date, aggregate counts)
- Blank separator row
- Header row
- One row per dependency

Every field is quoted, tags are joined with "; " and lines end with CRLF.
The whole document is built in memory before it is saved.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from devcontrol.core.downloads import DownloadSink, export_filename
from devcontrol.core.errors import SerializationFailure
from devcontrol.core.models import ExportRecord, ExportStats
from devcontrol.exporters.result import ExportResult

logger = logging.getLogger(__name__)

HEADER = ["Service Name", "Depends On", "Type", "Status", "Critical Path", "Tags"]
TAG_SEPARATOR = "; "

PREAMBLE_SOURCE = "Exported from"
PREAMBLE_DATE = "Export date"
PREAMBLE_SERVICES = "Total services"
PREAMBLE_DEPENDENCIES = "Total dependencies"
PREAMBLE_CRITICAL = "Critical paths"
PREAMBLE_CYCLES = "Circular dependencies"


def _preamble_rows(stats: ExportStats, source: str) -> List[List[str]]:
    return [
        [PREAMBLE_SOURCE, source],
        [PREAMBLE_DATE, stats.generated_at],
        [PREAMBLE_SERVICES, str(stats.total_entities)],
        [PREAMBLE_DEPENDENCIES, str(stats.total_relations)],
        [PREAMBLE_CRITICAL, str(stats.critical_path_count)],
        [PREAMBLE_CYCLES, str(stats.cycle_count)],
    ]


def _record_row(record: ExportRecord) -> List[str]:
    return [
        record.subject,
        record.related_to,
        record.relation_kind,
        record.state,
        "Yes" if record.is_critical_path else "No",
        TAG_SEPARATOR.join(record.tags),
    ]


def build_csv(records: Sequence[ExportRecord], stats: ExportStats, source: str = "DevControl") -> str:
    """
    Render records and stats as CSV text.

    Args:
        records: Dependency rows
        stats: Aggregate statistics for the preamble
        source: Product name written to the "Exported from" row

    Returns:
        Complete CSV document with CRLF line endings
    """
    buffer = io.StringIO(newline="")
    writer = csv.writer(
        buffer,
        delimiter=",",
        quotechar='"',
        doublequote=True,
        quoting=csv.QUOTE_ALL,
        lineterminator="\r\n",
    )

    writer.writerows(_preamble_rows(stats, source))
    writer.writerow([])
    writer.writerow(HEADER)
    for record in records:
        writer.writerow(_record_row(record))

    return buffer.getvalue()


@dataclass
class ParsedCSVExport:
    """A CSV export read back into its preamble and records."""
    preamble: Dict[str, str] = field(default_factory=dict)
    header: List[str] = field(default_factory=list)
    records: List[ExportRecord] = field(default_factory=list)


def parse_csv(text: str) -> ParsedCSVExport:
    """
    Read a CSV export back.

    The preamble ends at the first empty row; the row after it is the header.
    """
    parsed = ParsedCSVExport()
    rows = list(csv.reader(io.StringIO(text, newline="")))

    index = 0
    while index < len(rows) and rows[index]:
        key, value = (rows[index] + [""])[:2]
        parsed.preamble[key] = value
        index += 1

    index += 1  # blank separator
    if index < len(rows):
        parsed.header = rows[index]
        index += 1

    for row in rows[index:]:
        if not row:
            continue
        subject, related_to, kind, state, critical, tags = (row + [""] * 6)[:6]
        parsed.records.append(ExportRecord(
            subject=subject,
            related_to=related_to,
            relation_kind=kind,
            state=state,
            is_critical_path=critical == "Yes",
            tags=tuple(tags.split(TAG_SEPARATOR)) if tags else (),
        ))

    return parsed


class CSVExporter:
    """
    Export dependency records to a CSV download.

    Usage:
        exporter = CSVExporter(sink, product="devcontrol")
        result = exporter.export(records, stats)
    """

    def __init__(self, sink: DownloadSink, product: str = "devcontrol", display_name: str = "DevControl"):
        self.sink = sink
        self.product = product
        self.display_name = display_name

    def filename(self, now: Optional[datetime] = None) -> str:
        return export_filename(self.product, "dependencies", "csv", now)

    def export_string(self, records: Sequence[ExportRecord], stats: ExportStats) -> str:
        """Export to a CSV string."""
        return build_csv(records, stats, source=self.display_name)

    def export(self, records: Sequence[ExportRecord], stats: ExportStats) -> ExportResult:
        """
        Build the CSV document and save it.

        Raises:
            SerializationFailure: If building or saving fails. Nothing is saved
                when building fails.
        """
        try:
            data = self.export_string(records, stats).encode("utf-8")
            filename = self.filename()
            output_path = self.sink.save(filename, data)
        except Exception as e:
            logger.error(f"CSV export failed: {e}")
            raise SerializationFailure(f"Failed to export dependencies to CSV: {e}") from e

        logger.info(f"CSV export successful: {filename}")

        return ExportResult(
            filename=filename,
            output_path=output_path,
            size=len(data),
            stats={"rows": len(records), "critical_paths": stats.critical_path_count},
        )


async def export_dependencies_to_csv(
    records: Sequence[ExportRecord],
    stats: ExportStats,
    sink: DownloadSink,
    product: str = "devcontrol",
    display_name: str = "DevControl",
) -> ExportResult:
    """
    Export dependency records to CSV and save the file.

    Args:
        records: Dependency rows
        stats: Aggregate statistics
        sink: Where to save the file
        product: File name prefix
        display_name: Branding written to the preamble

    Returns:
        ExportResult
    """
    exporter = CSVExporter(sink, product=product, display_name=display_name)
    return exporter.export(records, stats)
