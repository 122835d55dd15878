"""
Printable skill-check report rendered with reportlab.

One summary page, one page per discipline, and the time reference table.
Every figure printed here comes from a finished ``CustomerReport``.
"""

from __future__ import annotations

import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ..domain.items import TIME_ITEMS
from ..domain.models import NO_RANK
from ..domain.services import CustomerReport, DisciplineSection, DisciplineSummary
from ..infrastructure.exceptions import RenderError
from ..infrastructure.logging import get_logger
from .charts import rank_color

logger = get_logger(__name__)

ACCENT = colors.HexColor("#E75480")
DARK = colors.HexColor("#1F2937")
LIGHT = colors.HexColor("#FDF2F6")
GRID = colors.HexColor("#D1D5DB")

TREND_MARKS = {"improved": "up", "declined": "down", "unchanged": "same", "indeterminate": "-"}


def _fmt(value: float | str | None, digits: int = 0) -> str:
    if value is None:
        return NO_RANK
    if isinstance(value, str):
        return value
    return f"{value:.{digits}f}"


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReportTitle", parent=base["Heading1"], textColor=ACCENT, fontSize=18, leading=22
        ),
        "h2": ParagraphStyle(
            "ReportH2",
            parent=base["Heading2"],
            textColor=DARK,
            fontSize=12,
            leading=15,
            spaceBefore=10,
            spaceAfter=4,
        ),
        "body": ParagraphStyle(
            "ReportBody", parent=base["Normal"], textColor=DARK, fontSize=9, leading=12
        ),
    }


def _table(rows: list[list[str]], widths: list[float], rank_column: int | None = None) -> Table:
    table = Table(rows, colWidths=widths, repeatRows=1)
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (1, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, GRID),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT]),
    ]
    if rank_column is not None:
        for row_index, row in enumerate(rows[1:], start=1):
            style.append(
                (
                    "TEXTCOLOR",
                    (rank_column, row_index),
                    (rank_column, row_index),
                    colors.HexColor(rank_color(row[rank_column])),
                )
            )
    table.setStyle(TableStyle(style))
    return table


def _summary_rows(summaries: list[DisciplineSummary]) -> list[list[str]]:
    rows = [["Discipline", "Score", "Max", "%", "Rank", "Previous", "Prev. rank", "National", "Trend"]]
    for s in summaries:
        rows.append(
            [
                s.label,
                _fmt(s.current),
                str(s.maximum),
                _fmt(s.current_percentage, 1),
                s.current_rank,
                _fmt(s.previous),
                s.previous_rank,
                _fmt(s.national),
                TREND_MARKS.get(s.vs_previous, NO_RANK),
            ]
        )
    return rows


def _summary_page(report: CustomerReport, organisation: str, st: dict, width: float) -> list:
    customer = report.customer
    story: list = [
        Paragraph(escape(f"{organisation} - Skill Check Report"), st["title"]),
        Paragraph(
            escape(
                f"{customer.name} ({customer.customer_number}) · "
                f"issued {report.generated_at:%Y-%m-%d}"
            ),
            st["body"],
        ),
        Spacer(1, 0.4 * cm),
        Paragraph("Results", st["h2"]),
    ]
    summaries = [report.overall] + [section.summary for section in report.sections.values()]
    story.append(_table(_summary_rows(summaries), [width / 9] * 9, rank_column=4))
    story.append(Spacer(1, 0.3 * cm))
    story.append(
        Paragraph(
            escape(
                f"Total working time: {report.total_time} "
                f"(previous {report.previous_total_time}, national {report.national_total_time})"
            ),
            st["body"],
        )
    )

    if report.counseling_comment:
        story.append(Paragraph("Counseling comment", st["h2"]))
        story.append(Paragraph(escape(report.counseling_comment), st["body"]))

    if report.history:
        story.append(Paragraph("History", st["h2"]))
        rows = [["Date", "Total", "Rank"]]
        rows += [[h.date, _fmt(h.total), h.rank] for h in report.history]
        story.append(_table(rows, [width / 3] * 3, rank_column=2))
    return story


def _section_page(section: DisciplineSection, st: dict, width: float) -> list:
    summary = section.summary
    story: list = [
        Paragraph(escape(f"{summary.label}: {_fmt(summary.current)} / {summary.maximum}"), st["h2"]),
        Paragraph(
            escape(f"Rank {summary.current_rank} · previous {summary.previous_rank}"),
            st["body"],
        ),
        Spacer(1, 0.2 * cm),
    ]

    rows = [["Category", "Allocation", "Current", "Previous", "%"]]
    for c in section.categories:
        rows.append(
            [
                f"{c.category} {c.label}",
                str(c.allocation),
                _fmt(c.current),
                _fmt(c.previous),
                _fmt(c.percentage),
            ]
        )
    story.append(_table(rows, [width * 0.4] + [width * 0.15] * 4))
    story.append(Spacer(1, 0.3 * cm))

    is_time = summary.discipline == "time"
    header = ["Item", "Allocation", "Current", "Previous", "%", "Rank" if is_time else "Trend"]
    rows = [header]
    for item in section.items:
        required = " *" if item.required else ""
        rows.append(
            [
                f"{item.id} {item.label}{required}",
                str(item.allocation),
                _fmt(item.current),
                _fmt(item.previous),
                _fmt(item.percentage),
                (item.rank or NO_RANK) if is_time else TREND_MARKS.get(item.trend, NO_RANK),
            ]
        )
    widths = [width * 0.34, width * 0.11, width * 0.17, width * 0.17, width * 0.09, width * 0.12]
    story.append(_table(rows, widths, rank_column=5 if is_time else None))
    return story


def _timetable_page(st: dict, width: float) -> list:
    rows = [["Item", "AAA", "AA", "A", "Points"]]
    for item in TIME_ITEMS:
        tt = item.timetable
        rows.append(
            [
                f"{item.id} {item.label}",
                _fmt(tt.aaa) if tt else NO_RANK,
                _fmt(tt.aa) if tt else NO_RANK,
                _fmt(tt.a) if tt else NO_RANK,
                str(item.allocation),
            ]
        )
    return [
        Paragraph("Time reference (minutes, at or under)", st["h2"]),
        _table(rows, [width * 0.4] + [width * 0.15] * 4),
    ]


def render_report_pdf(report: CustomerReport, organisation: str = "Nail Skill Check") -> bytes:
    """
    Render a customer report to PDF bytes.

    Raises:
        RenderError: If reportlab fails to lay out the document.
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title=f"Skill check report {report.customer.customer_number}",
    )
    st = _styles()

    story = _summary_page(report, organisation, st, doc.width)
    for section in report.sections.values():
        story.append(PageBreak())
        story.extend(_section_page(section, st, doc.width))
    story.append(PageBreak())
    story.extend(_timetable_page(st, doc.width))

    try:
        doc.build(story)
    except Exception as e:
        logger.error(f"PDF rendering failed: {str(e)}", exc_info=True)
        raise RenderError(str(e), document="report.pdf") from e

    logger.info(f"Rendered PDF report for customer {report.customer.customer_number}")
    return buf.getvalue()
