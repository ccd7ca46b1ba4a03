# arogya/services/export.py
"""
Turn a PatientReport into a downloadable document.

PDF export tries the styled layout first and a plain one-column layout
second. If both fail, or PDF export is switched off, the report is
exported as plain text, which needs no rendering library at all.

Report text is set in a Unicode TrueType font (PDF_FONT_PATH, or the
first known font found on the system) because the PDF base fonts only
cover Latin-1. Without one, Devanagari, Kannada and the banner symbols
come out as empty boxes. reportlab does not shape Indic scripts, so
conjuncts may still render as separate glyphs.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    ListFlowable,
    ListItem,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
)

from arogya.config import get_settings
from arogya.intake.report import REPORT_TITLE, export_filename, header_lines, render_text
from arogya.intake.schema import PatientReport


logger = logging.getLogger("arogya.export")

PDF_MEDIA_TYPE = "application/pdf"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"

BASE_FONT = "Helvetica"

# Searched in order; FreeSans also covers Devanagari
FONT_CANDIDATES = ("FreeSans.ttf", "DejaVuSans.ttf", "NotoSans-Regular.ttf")
FONT_DIRS = (
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("/Library/Fonts"),
    Path("C:/Windows/Fonts"),
)


class ExportError(RuntimeError):
    pass


@dataclass
class ExportedDocument:
    content: bytes
    media_type: str
    filename: str
    degraded: bool = False


def find_font() -> Optional[Path]:
    for name in FONT_CANDIDATES:
        for font_dir in FONT_DIRS:
            if not font_dir.is_dir():
                continue
            match = next(font_dir.rglob(name), None)
            if match is not None:
                return match
    return None


@lru_cache(maxsize=None)
def _register_font(font_path: str) -> str:
    path = Path(font_path) if font_path else find_font()
    if path is None:
        logger.warning("No Unicode TTF font found, PDF text falls back to %s", BASE_FONT)
        return BASE_FONT

    font_name = f"Arogya-{path.stem}"
    try:
        pdfmetrics.registerFont(TTFont(font_name, str(path)))
    except (TTFError, OSError):
        logger.exception("Could not load PDF font %s, using %s", path, BASE_FONT)
        return BASE_FONT
    logger.info("Registered PDF font %s from %s", font_name, path)
    return font_name


def report_font() -> str:
    """Name of the registered font used for report text."""
    return _register_font(get_settings().pdf_font_path)


def _footer_text(report: PatientReport, page: int, total: int) -> str:
    return (
        f"Generated by Arogya AI on {report.generated_at:%Y-%m-%d} "
        f"- Page {page} of {total}"
    )


def _numbered_canvas(report: PatientReport, font_name: str):
    """
    Canvas class that holds pages back until save(), so every footer can
    carry the total page count.
    """

    class NumberedCanvas(canvas.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._page_states: List[dict] = []

        def showPage(self):
            self._page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._page_states)
            for page_state in self._page_states:
                self.__dict__.update(page_state)
                self.setFont(font_name, 9)
                self.drawCentredString(
                    A4[0] / 2, 10 * mm, _footer_text(report, self._pageNumber, total)
                )
                super().showPage()
            super().save()

    return NumberedCanvas


def render_pdf(report: PatientReport) -> bytes:
    font_name = report_font()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=REPORT_TITLE,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle", parent=styles["Title"], fontSize=16, spaceAfter=12
    )
    heading_style = ParagraphStyle(
        "SectionHeading",
        parent=styles["Heading3"],
        textColor=colors.HexColor("#1f5f8b"),
        spaceBefore=10,
        spaceAfter=4,
    )
    body_style = ParagraphStyle(
        "Body", parent=styles["BodyText"], fontName=font_name, leading=14
    )
    banner_style = ParagraphStyle(
        "Emergency",
        parent=body_style,
        textColor=colors.HexColor("#b00020"),
        backColor=colors.HexColor("#fdecea"),
        borderPadding=6,
        spaceBefore=10,
    )
    disclaimer_style = ParagraphStyle(
        "Disclaimer", parent=body_style, fontSize=8, textColor=colors.grey, spaceBefore=12
    )

    story = [Paragraph(escape(REPORT_TITLE), title_style)]
    story.append(Paragraph("Patient Information", heading_style))
    for line in header_lines(report):
        story.append(Paragraph(escape(line), body_style))

    if report.emergency_banner:
        story.append(Paragraph(escape(report.emergency_banner), banner_style))

    for section in report.sections:
        story.append(Paragraph(escape(section.heading), heading_style))
        for block in section.blocks:
            if block.type == "list":
                story.append(
                    ListFlowable(
                        [ListItem(Paragraph(escape(item), body_style)) for item in block.lines],
                        bulletType="bullet",
                        leftIndent=12,
                    )
                )
            else:
                text = "<br/>".join(escape(line) for line in block.lines)
                story.append(Paragraph(text.replace("\n", "<br/>"), body_style))
            story.append(Spacer(1, 4))

    story.append(Paragraph(escape(report.disclaimer), disclaimer_style))

    doc.build(story, canvasmaker=_numbered_canvas(report, font_name))
    return buffer.getvalue()


def render_simple_pdf(report: PatientReport) -> bytes:
    """
    One-column text dump of the plain-text rendering. No flowables, no
    markup parsing; used when the styled layout fails.
    """
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    margin = 18 * mm
    line_height = 12
    font = (report_font(), 10)

    lines: List[str] = []
    for raw_line in render_text(report).splitlines():
        lines.extend(simpleSplit(raw_line, font[0], font[1], width - 2 * margin) or [""])

    per_page = int((height - 2 * margin) // line_height)
    pages = [lines[i:i + per_page] for i in range(0, len(lines), per_page)] or [[]]
    for number, page_lines in enumerate(pages, start=1):
        pdf.setFont(*font)
        y = height - margin
        for line in page_lines:
            pdf.drawString(margin, y, line)
            y -= line_height
        pdf.setFont(font[0], 9)
        pdf.drawCentredString(width / 2, 10 * mm, _footer_text(report, number, len(pages)))
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()


def export_text(report: PatientReport) -> ExportedDocument:
    return ExportedDocument(
        content=render_text(report).encode("utf-8"),
        media_type=TEXT_MEDIA_TYPE,
        filename=export_filename(report, "txt"),
    )


def export_pdf(report: PatientReport, pdf_enabled: bool = True) -> ExportedDocument:
    """
    Export as PDF, degrading to a simpler PDF and then to plain text.
    Raises ExportError only when every path failed.
    """
    renderers: List[Tuple[str, Callable[[PatientReport], bytes]]] = []
    if pdf_enabled:
        renderers = [("styled", render_pdf), ("simplified", render_simple_pdf)]
    else:
        logger.info("PDF export disabled, using plain-text export")

    for label, renderer in renderers:
        try:
            content = renderer(report)
        except Exception:
            logger.exception("%s PDF export failed for report %s", label, report.report_id)
            continue
        return ExportedDocument(
            content=content,
            media_type=PDF_MEDIA_TYPE,
            filename=export_filename(report, "pdf"),
            degraded=label != "styled",
        )

    try:
        document = export_text(report)
    except Exception as exc:
        raise ExportError(f"Could not export report {report.report_id}") from exc
    document.degraded = True
    return document
