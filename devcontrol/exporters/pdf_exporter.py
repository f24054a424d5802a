"""
DevControl PDF Exporter - Compose a multi-page dependency report.

Report sections, in order:
1. Cover - title, generation date, headline counts
2. Executive Summary - 2x2 stat cards and key insights
3. Dependency Graph - embedded diagram snapshot (only with a surface)
4. Dependency Details - table continued across pages with repeated header
5. Circular Dependencies - remediation advice (only when cycles exist)

Every page gets a centred "Page X of N" footer once the page count is known.
Layout is done by hand in inches on a US Letter page.
"""

import asyncio
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from devcontrol.core.downloads import DownloadSink, export_filename
from devcontrol.core.errors import SerializationFailure
from devcontrol.core.models import ExportRecord, ExportStats
from devcontrol.core.settings import ExportSettings
from devcontrol.exporters.result import ExportResult
from devcontrol.render.rasterizer import SurfaceRasterizer, decode_data_uri
from devcontrol.render.surface import RenderedSurface

logger = logging.getLogger(__name__)

# Page geometry (inches)
PAGE_WIDTH = 8.5
PAGE_HEIGHT = 11.0
MARGIN = 0.75
CONTENT_WIDTH = PAGE_WIDTH - MARGIN * 2
CONTENT_BOTTOM = PAGE_HEIGHT - MARGIN

# Summary cards (inches)
CARD_GAP = 0.2
CARD_WIDTH = CONTENT_WIDTH / 2 - 0.1
CARD_HEIGHT = 0.8

GRAPH_HEIGHT = 5.0

# Table column widths (inches), summing to CONTENT_WIDTH
TABLE_COLUMNS = ["Service", "Depends On", "Type", "Critical", "Tags"]
TABLE_COLUMN_WIDTHS = [1.6, 1.6, 0.9, 0.8, 2.1]

# Colour scheme
PRIMARY_BLUE = HexColor("#2563eb")
DARK_GRAY = HexColor("#1f2937")
LIGHT_GRAY = HexColor("#6b7280")
BG_GRAY = HexColor("#f3f4f6")
DANGER_RED = HexColor("#ef4444")
HEALTHY_GREEN = HexColor("#10b981")

GRAPH_PLACEHOLDER = "(Graph could not be embedded in this report)"

CIRCULAR_EXPLANATION = (
    "Circular dependencies can cause deployment issues, infinite loops, "
    "and cascading failures."
)

RECOMMENDATIONS = [
    "1. Identify and break circular dependencies by introducing mediator services",
    "2. Use event-driven architecture to decouple tightly-coupled services",
    "3. Review service boundaries and consider domain-driven design principles",
    "4. Implement dependency injection to reduce tight coupling",
]


# Sections

@dataclass(frozen=True)
class Cover:
    title: str = "Cover"


@dataclass(frozen=True)
class Summary:
    title: str = "Executive Summary"


@dataclass(frozen=True)
class DiagramPage:
    surface: RenderedSurface = field(compare=False)
    title: str = "Dependency Graph"


@dataclass(frozen=True)
class DetailTable:
    title: str = "Dependency Details"


@dataclass(frozen=True)
class CircularDependencies:
    title: str = "Circular Dependencies"


Section = Union[Cover, Summary, DiagramPage, DetailTable, CircularDependencies]


def plan_sections(stats: ExportStats, surface: Optional[RenderedSurface]) -> Tuple[Section, ...]:
    """Decide which sections the report contains before anything is drawn."""
    sections: List[Section] = [Cover(), Summary()]
    if surface is not None:
        sections.append(DiagramPage(surface=surface))
    if stats.total_relations > 0:
        sections.append(DetailTable())
    if stats.cycle_count > 0:
        sections.append(CircularDependencies())
    return tuple(sections)


def key_insights(stats: ExportStats) -> List[Tuple[str, bool]]:
    """
    Human-readable observations for the summary page.

    Returns:
        List of (text, is_concern) tuples
    """
    insights = []

    if stats.critical_path_count > 0:
        insights.append((
            f"{stats.critical_path_count} critical path dependencies require immediate attention",
            True,
        ))

    if stats.cycle_count > 0:
        insights.append((
            f"{stats.cycle_count} circular dependency cycles detected - may cause deployment issues",
            True,
        ))
    else:
        insights.append(("No circular dependencies detected - architecture is healthy", False))

    insights.append((
        f"Average dependencies per service: {stats.average_relations_per_entity:.1f}",
        False,
    ))

    return insights


class NumberedCanvas(canvas.Canvas):
    """
    Canvas that holds pages back until save() so each one can be stamped
    with "Page X of N".
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self.page_count = 0

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(total_pages)
            super().showPage()
        self.page_count = total_pages
        super().save()

    def draw_page_number(self, total_pages: int):
        self.setFont("Helvetica", 9)
        self.setFillColor(LIGHT_GRAY)
        self.drawCentredString(
            PAGE_WIDTH / 2 * inch,
            MARGIN / 2 * inch,
            f"Page {self.getPageNumber()} of {total_pages}",
        )


@dataclass
class LayoutCursor:
    """Current drawing position, measured in inches from the top-left corner."""
    x: float = MARGIN
    y: float = MARGIN
    page_index: int = 0
    page_sections: List[str] = field(default_factory=list)

    def advance(self, dy: float):
        self.y += dy

    def remaining(self) -> float:
        """Inches left above the bottom margin."""
        return CONTENT_BOTTOM - self.y

    def at_page_top(self) -> bool:
        return self.y <= MARGIN

    def new_page(self, pdf: canvas.Canvas, section: str):
        pdf.showPage()
        self.x = MARGIN
        self.y = MARGIN
        self.page_index += 1
        self.page_sections.append(section)


def _pdf_y(y: float) -> float:
    """Convert a top-down inch offset into reportlab's bottom-up points."""
    return (PAGE_HEIGHT - y) * inch


@dataclass
class ReportDocument:
    """A fully composed report held in memory."""
    data: bytes
    page_count: int
    page_sections: List[str]
    sections: Tuple[Section, ...]
    degraded: bool = False


class DocumentComposer:
    """
    Build the dependency report PDF.

    Usage:
        composer = DocumentComposer(records, stats, surface, rasterizer)
        document = await composer.compose()
    """

    def __init__(
        self,
        records: Sequence[ExportRecord],
        stats: ExportStats,
        surface: Optional[RenderedSurface] = None,
        rasterizer: Optional[SurfaceRasterizer] = None,
        display_name: str = "DevControl",
    ):
        self.records = list(records)
        self.stats = stats
        self.surface = surface
        self.rasterizer = rasterizer or SurfaceRasterizer()
        self.display_name = display_name
        self.degraded = False

        self._buffer = io.BytesIO()
        self._pdf = NumberedCanvas(self._buffer, pagesize=letter)
        self._cursor = LayoutCursor(page_sections=["Cover"])

    async def compose(self) -> ReportDocument:
        """Draw every planned section, paginate, and return the PDF bytes."""
        sections = plan_sections(self.stats, self.surface)
        self._pdf.setTitle("Service Dependencies - Architecture Report")
        self._pdf.setAuthor(self.display_name)
        self._pdf.setCreator(self.display_name)

        for section in sections:
            if isinstance(section, Cover):
                self._draw_cover()
            elif isinstance(section, Summary):
                self._begin_section(section.title)
                self._draw_summary()
            elif isinstance(section, DiagramPage):
                self._begin_section(section.title)
                image = await self._capture_diagram(section.surface)
                self._draw_diagram(section.title, image)
            elif isinstance(section, DetailTable):
                self._begin_section(section.title)
                self._draw_detail_table(section.title)
            elif isinstance(section, CircularDependencies):
                self._begin_section(section.title)
                self._draw_circular_dependencies(section.title)
            # Let other tasks run between sections
            await asyncio.sleep(0)

        self._pdf.showPage()
        self._pdf.save()

        return ReportDocument(
            data=self._buffer.getvalue(),
            page_count=self._pdf.page_count,
            page_sections=list(self._cursor.page_sections),
            sections=sections,
            degraded=self.degraded,
        )

    def _begin_section(self, title: str):
        self._cursor.new_page(self._pdf, title)

    # Drawing helpers

    def _text(self, text: str, x: float, y: float, size: float, color, bold: bool = False):
        self._pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self._pdf.setFillColor(color)
        self._pdf.drawString(x * inch, _pdf_y(y), text)

    def _wrapped_text(self, text: str, x: float, size: float, color, max_width: float, leading: float):
        """Draw ``text`` wrapped to ``max_width`` inches at the cursor and advance."""
        lines = simpleSplit(text, "Helvetica", size, max_width * inch)
        for line in lines:
            self._text(line, x, self._cursor.y, size, color)
            self._cursor.advance(leading)

    def _heading(self, title: str, color=PRIMARY_BLUE):
        self._text(title, MARGIN, self._cursor.y, 20, color, bold=True)

    # Sections

    def _draw_cover(self):
        cursor = self._cursor

        self._text("Service Dependencies", MARGIN, cursor.y + 0.5, 32, PRIMARY_BLUE, bold=True)
        cursor.advance(1.0)
        self._text("Architecture Report", MARGIN, cursor.y, 24, DARK_GRAY, bold=True)

        cursor.advance(1.5)
        report_date = self.stats.generated_datetime.strftime("%B %d, %Y, %I:%M %p")
        self._text(f"Generated: {report_date}", MARGIN, cursor.y, 12, LIGHT_GRAY)
        cursor.advance(0.3)
        self._text(f"Total Services: {self.stats.total_entities}", MARGIN, cursor.y, 12, LIGHT_GRAY)
        cursor.advance(0.3)
        self._text(f"Total Dependencies: {self.stats.total_relations}", MARGIN, cursor.y, 12, LIGHT_GRAY)

        branding_y = PAGE_HEIGHT - MARGIN - 0.5
        self._text(f"{self.display_name} - Service Dependency Management", MARGIN, branding_y, 10, LIGHT_GRAY)

    def _draw_stat_card(self, x: float, y: float, label: str, value: str, accent):
        pdf = self._pdf
        bottom = _pdf_y(y + CARD_HEIGHT)

        pdf.setFillColor(BG_GRAY)
        pdf.rect(x * inch, bottom, CARD_WIDTH * inch, CARD_HEIGHT * inch, stroke=0, fill=1)

        pdf.setStrokeColor(accent)
        pdf.setLineWidth(0.02 * inch)
        pdf.rect(x * inch, bottom, CARD_WIDTH * inch, CARD_HEIGHT * inch, stroke=1, fill=0)

        self._text(label, x + 0.15, y + 0.3, 10, LIGHT_GRAY)
        self._text(value, x + 0.15, y + 0.6, 20, DARK_GRAY, bold=True)

    def _draw_summary(self):
        cursor = self._cursor
        stats = self.stats

        self._heading("Executive Summary")
        cursor.advance(0.5)

        def health(count: int):
            return DANGER_RED if count > 0 else HEALTHY_GREEN

        cards = [
            ("Total Services", stats.total_entities, PRIMARY_BLUE),
            ("Total Dependencies", stats.total_relations, PRIMARY_BLUE),
            ("Critical Paths", stats.critical_path_count, health(stats.critical_path_count)),
            ("Circular Dependencies", stats.cycle_count, health(stats.cycle_count)),
        ]

        top = cursor.y
        for index, (label, value, accent) in enumerate(cards):
            row, column = divmod(index, 2)
            x = MARGIN + column * (CARD_WIDTH + CARD_GAP)
            y = top + row * (CARD_HEIGHT + CARD_GAP)
            self._draw_stat_card(x, y, label, str(value), accent)

        rows = (len(cards) + 1) // 2
        cursor.y = top + rows * CARD_HEIGHT + (rows - 1) * CARD_GAP + 0.5

        self._text("Key Insights", MARGIN, cursor.y, 14, PRIMARY_BLUE, bold=True)
        cursor.advance(0.3)

        for text, is_concern in key_insights(stats):
            color = DANGER_RED if is_concern else DARK_GRAY
            self._wrapped_text(f"• {text}", MARGIN + 0.2, 11, color, CONTENT_WIDTH - 0.2, 0.25)

    async def _capture_diagram(self, surface: RenderedSurface) -> Optional[bytes]:
        try:
            data_uri = await self.rasterizer.capture(surface, self.rasterizer.document_pixel_ratio)
            return decode_data_uri(data_uri)
        except Exception as e:
            logger.warning(f"Failed to embed graph: {e}")
            self.degraded = True
            return None

    def _draw_diagram(self, title: str, image: Optional[bytes]):
        cursor = self._cursor

        self._heading(title)
        cursor.advance(0.4)

        if image is not None:
            try:
                self._pdf.drawImage(
                    ImageReader(io.BytesIO(image)),
                    MARGIN * inch,
                    _pdf_y(cursor.y + GRAPH_HEIGHT),
                    width=CONTENT_WIDTH * inch,
                    height=GRAPH_HEIGHT * inch,
                    preserveAspectRatio=True,
                    anchor="n",
                )
                cursor.advance(GRAPH_HEIGHT + 0.3)
                return
            except Exception as e:
                logger.warning(f"Failed to embed graph: {e}")
                self.degraded = True

        self._text(GRAPH_PLACEHOLDER, MARGIN, cursor.y, 11, LIGHT_GRAY)
        cursor.advance(0.5)

    def _build_table(self) -> Table:
        cell_style = ParagraphStyle("Cell", fontName="Helvetica", fontSize=9, leading=11, textColor=DARK_GRAY)

        data = [list(TABLE_COLUMNS)]
        for record in self.records:
            values = [
                record.subject,
                record.related_to,
                record.relation_kind,
                "Yes" if record.is_critical_path else "No",
                ", ".join(record.tags),
            ]
            data.append([Paragraph(escape(v), cell_style) for v in values])

        table = Table(
            data,
            colWidths=[w * inch for w in TABLE_COLUMN_WIDTHS],
            repeatRows=1,
            hAlign="LEFT",
        )
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), PRIMARY_BLUE),
            ("TEXTCOLOR", (0, 0), (-1, 0), white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 10),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [white, BG_GRAY]),
            ("GRID", (0, 0), (-1, -1), 0.5, LIGHT_GRAY),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]))
        return table

    def _draw_detail_table(self, title: str):
        cursor = self._cursor
        pdf = self._pdf

        self._heading(title)
        cursor.advance(0.5)

        table = self._build_table()
        available_width = CONTENT_WIDTH * inch

        while True:
            available_height = cursor.remaining() * inch
            _, height = table.wrapOn(pdf, available_width, available_height)

            if height <= available_height:
                table.drawOn(pdf, MARGIN * inch, _pdf_y(cursor.y) - height)
                cursor.advance(height / inch)
                return

            parts = table.split(available_width, available_height)
            if len(parts) < 2:
                if cursor.at_page_top():
                    # Nothing fits on an empty page; draw and let it clip
                    table.drawOn(pdf, MARGIN * inch, _pdf_y(cursor.y) - height)
                    cursor.advance(height / inch)
                    return
                cursor.new_page(pdf, title)
                continue

            head, table = parts[0], parts[1]
            _, head_height = head.wrapOn(pdf, available_width, available_height)
            head.drawOn(pdf, MARGIN * inch, _pdf_y(cursor.y) - head_height)
            cursor.new_page(pdf, title)

    def _draw_circular_dependencies(self, title: str):
        cursor = self._cursor

        self._heading(title, color=DANGER_RED)
        cursor.advance(0.4)

        self._wrapped_text(CIRCULAR_EXPLANATION, MARGIN, 11, DARK_GRAY, CONTENT_WIDTH, 0.2)
        cursor.advance(0.1)
        self._text(f"Detected cycles: {self.stats.cycle_count}", MARGIN, cursor.y, 11, DARK_GRAY, bold=True)

        cursor.advance(0.5)
        self._text("Recommended Actions:", MARGIN, cursor.y, 12, PRIMARY_BLUE, bold=True)
        cursor.advance(0.3)

        for recommendation in RECOMMENDATIONS:
            self._wrapped_text(recommendation, MARGIN + 0.2, 11, DARK_GRAY, CONTENT_WIDTH - 0.2, 0.2)
            cursor.advance(0.1)


async def compose_report(
    records: Sequence[ExportRecord],
    stats: ExportStats,
    surface: Optional[RenderedSurface] = None,
    rasterizer: Optional[SurfaceRasterizer] = None,
    display_name: str = "DevControl",
) -> ReportDocument:
    """Compose the report in memory without saving it."""
    composer = DocumentComposer(records, stats, surface, rasterizer, display_name=display_name)
    return await composer.compose()


async def export_dependency_report(
    records: Sequence[ExportRecord],
    stats: ExportStats,
    surface: Optional[RenderedSurface],
    sink: DownloadSink,
    settings: Optional[ExportSettings] = None,
    rasterizer: Optional[SurfaceRasterizer] = None,
) -> ExportResult:
    """
    Compose the dependency report and save it as a PDF.

    Args:
        records: Dependency rows
        stats: Aggregate statistics
        surface: Rendered diagram to embed, or None to skip the graph page
        sink: Where to save the file
        settings: Export settings
        rasterizer: Rasterizer for the graph page

    Returns:
        ExportResult whose stats include the page count and whether the
        graph had to be replaced by a placeholder

    Raises:
        SerializationFailure: If composing or saving fails. Nothing is saved.
    """
    settings = settings or ExportSettings()
    if rasterizer is None:
        rasterizer = SurfaceRasterizer.from_settings(settings.capture)

    try:
        document = await compose_report(
            records, stats, surface, rasterizer, display_name=settings.display_name,
        )
        filename = export_filename(settings.product, "dependency-report", "pdf")
        output_path = sink.save(filename, document.data)
    except Exception as e:
        logger.error(f"PDF export failed: {e}")
        raise SerializationFailure(f"Failed to export dependency report: {e}") from e

    logger.info(f"PDF report exported successfully: {filename} ({document.page_count} pages)")

    return ExportResult(
        filename=filename,
        output_path=output_path,
        size=len(document.data),
        stats={
            "pages": document.page_count,
            "page_sections": document.page_sections,
            "degraded": document.degraded,
        },
    )
