"""fpdf2-based PDF output: flow-markup layout and the python-docx adapter."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.table import Table
from docx.text.paragraph import Paragraph
from docx.text.run import Run
from fpdf import FPDF, XPos, YPos
from fpdf.errors import FPDFException

from docpdf.config.models import RenderConfig
from docpdf.converter.models import FlowDocument, LayoutError, RenderError

logger = logging.getLogger(__name__)

CUSTOM_FONT = "docpdf-body"

_ALIGN: dict[object, str] = {
    WD_ALIGN_PARAGRAPH.CENTER: "C",
    WD_ALIGN_PARAGRAPH.RIGHT: "R",
    WD_ALIGN_PARAGRAPH.JUSTIFY: "J",
}

# Font size multipliers keyed by heading level; 0 is the Title style.
_HEADING_SCALE = {0: 2.0, 1: 1.6, 2: 1.4, 3: 1.2}
_HEADING_RE = re.compile(r"^Heading (\d+)$")


class DocumentPdf(FPDF):
    """FPDF page setup shared by both library paths."""

    def __init__(
        self,
        render_config: RenderConfig,
        *,
        title: str | None = None,
        author: str | None = None,
        creation_date: datetime | None = None,
    ) -> None:
        super().__init__(orientation="portrait", unit="mm", format=render_config.page_format)
        self.render_config = render_config
        margin = render_config.margin_mm
        self.set_margins(margin, margin, margin)
        self.set_auto_page_break(auto=True, margin=margin)

        if render_config.font_path:
            for style in ("", "B", "I", "BI"):
                self.add_font(CUSTOM_FONT, style, render_config.font_path)
            self.body_font = CUSTOM_FONT
            self.unicode_font = True
        else:
            self.body_font = render_config.font_family
            self.unicode_font = False

        self.set_creator("docpdf")
        if title:
            self.set_title(title)
        if author:
            self.set_author(author)
        if creation_date is not None:
            self.set_creation_date(creation_date)
        self.set_font(self.body_font, "", render_config.font_size)

    def safe_text(self, text: str) -> str:
        """Core fonts only cover Latin-1."""
        if self.unicode_font:
            return text
        return text.encode("latin-1", errors="replace").decode("latin-1")

    def line_height(self, size_pt: float | None = None) -> float:
        size_pt = size_pt or self.render_config.font_size
        return size_pt / self.k * self.render_config.line_height

    def footer(self) -> None:
        if not self.render_config.page_numbers:
            return
        self.set_y(-self.render_config.margin_mm / 2 - 4)
        self.set_font(self.body_font, "I", 8)
        self.cell(0, 8, str(self.page_no()), align="C")


def write_pdf(pdf: FPDF, destination: Path) -> None:
    """Serialize fully before touching the destination."""
    try:
        data = pdf.output()
    except FPDFException as e:
        raise RenderError(f"PDF generation failed for {destination}: {e}") from e
    try:
        Path(destination).write_bytes(data)
    except OSError as e:
        raise RenderError(f"Cannot write {destination}: {e}") from e
    logger.debug("wrote %s (%d bytes)", destination, len(data))


def _new_pdf(config: RenderConfig, **metadata) -> DocumentPdf:
    try:
        return DocumentPdf(config, **metadata)
    except (OSError, FPDFException) as e:
        raise RenderError(f"Cannot set up PDF output: {e}") from e


def layout_flow(
    flow: FlowDocument,
    destination: Path,
    config: RenderConfig,
    *,
    creation_date: datetime | None = None,
) -> None:
    """Run the flow markup through fpdf2's HTML layout engine, one page per section."""
    pdf = _new_pdf(
        config, title=flow.title, author=flow.author, creation_date=creation_date
    )
    try:
        for section in flow.sections:
            pdf.add_page()
            pdf.set_font(pdf.body_font, "", config.font_size)
            if section:
                pdf.write_html(pdf.safe_text(section), font_family=pdf.body_font)
    except FPDFException as e:
        raise LayoutError(f"Layout failed for {destination}: {e}") from e
    write_pdf(pdf, destination)


def _run_style(run: Run) -> str:
    style = ""
    if run.bold:
        style += "B"
    if run.italic:
        style += "I"
    if run.underline:
        style += "U"
    return style


def _heading_level(paragraph: Paragraph) -> int | None:
    name = paragraph.style.name if paragraph.style is not None else ""
    if name == "Title":
        return 0
    m = _HEADING_RE.match(name or "")
    return int(m.group(1)) if m else None


def _has_page_break(run: Run) -> bool:
    return bool(run._r.xpath("./w:br[@w:type='page']"))


class DocxPdfAdapter:
    """Renders a python-docx document straight onto FPDF pages."""

    def __init__(self, config: RenderConfig) -> None:
        self._config = config

    def render(
        self,
        document: DocxDocument,
        destination: Path,
        *,
        creation_date: datetime | None = None,
    ) -> None:
        props = document.core_properties
        pdf = _new_pdf(
            self._config,
            title=props.title or None,
            author=props.author or None,
            creation_date=creation_date,
        )
        try:
            pdf.add_page()
            for block in document.iter_inner_content():
                if isinstance(block, Table):
                    self._table(pdf, block)
                else:
                    self._paragraph(pdf, block)
        except FPDFException as e:
            raise RenderError(f"Rendering failed for {destination}: {e}") from e
        write_pdf(pdf, destination)

    # ------------------------------------------------------------------
    # Block renderers
    # ------------------------------------------------------------------

    def _paragraph(self, pdf: DocumentPdf, paragraph: Paragraph) -> None:
        if paragraph.paragraph_format.page_break_before and pdf.get_y() > pdf.t_margin:
            pdf.add_page()

        level = _heading_level(paragraph)
        size = self._config.font_size * _HEADING_SCALE.get(level, 1.1 if level else 1.0)
        h = pdf.line_height(size)
        runs = paragraph.runs
        text = "".join(run.text for run in runs).replace("\t", "    ")
        align = _ALIGN.get(paragraph.alignment)

        if not text.strip():
            pdf.ln(h)
        elif level is not None or align is not None:
            style = "B" if level is not None else _run_style(runs[0])
            pdf.set_font(pdf.body_font, style, size)
            pdf.multi_cell(
                0, h, pdf.safe_text(text), align=align or "L",
                new_x=XPos.LMARGIN, new_y=YPos.NEXT,
            )
        else:
            for run in runs:
                pdf.set_font(pdf.body_font, _run_style(run), size)
                if run.text:
                    pdf.write(h, pdf.safe_text(run.text.replace("\t", "    ")))
            pdf.ln(h)

        if any(_has_page_break(run) for run in runs):
            pdf.add_page()
        pdf.set_font(pdf.body_font, "", self._config.font_size)

    def _table(self, pdf: DocumentPdf, table: Table) -> None:
        rows = [[pdf.safe_text(cell.text) for cell in row.cells] for row in table.rows]
        width = max((len(row) for row in rows), default=0)
        if width == 0:
            return
        pdf.set_font(pdf.body_font, "", self._config.font_size)
        h = pdf.line_height()
        with pdf.table(first_row_as_headings=False, line_height=h) as out:
            for row in rows:
                out_row = out.row()
                for value in row + [""] * (width - len(row)):
                    out_row.cell(value)
        pdf.ln(h / 2)
