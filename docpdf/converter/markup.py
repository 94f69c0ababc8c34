"""Word97Document → FlowDocument transform."""

from __future__ import annotations

import html

from docpdf.converter.models import FlowDocument, Word97Document

CELL_SEPARATOR = " | "


def _paragraph_html(text: str) -> str:
    if not text.strip():
        return "<br>"
    lines = [html.escape(line) for line in text.split("\n")]
    return "<p>" + "<br>".join(lines) + "</p>"


def to_flow(document: Word97Document) -> FlowDocument:
    """Lay paragraphs out into page sections of HTML.

    Each table row collapses into one line. Word closes a row with an
    extra empty cell mark, so an empty cell following other cells ends the
    row. A paragraph flagged with a page break opens a new section.
    """
    sections: list[list[str]] = [[]]
    cells: list[str] = []

    def flush_cells() -> None:
        if cells:
            sections[-1].append(_paragraph_html(CELL_SEPARATOR.join(cells)))
            cells.clear()

    for para in document.paragraphs:
        if para.page_break_before:
            flush_cells()
            if sections[-1]:
                sections.append([])
        if para.in_table:
            text = para.text.replace("\n", " ").strip()
            if not text and cells:
                flush_cells()
            else:
                cells.append(text)
            continue
        flush_cells()
        sections[-1].append(_paragraph_html(para.text))
    flush_cells()

    return FlowDocument(
        sections=["\n".join(parts) for parts in sections],
        title=document.title,
        author=document.author,
    )

