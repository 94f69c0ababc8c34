"""In-process rendering: python-docx / olefile parsing, fpdf2 output."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import docx

from docpdf.config.models import RenderConfig
from docpdf.converter import markup, word97
from docpdf.converter.models import (
    DocumentParseError,
    LayoutError,
    SourceFormat,
)
from docpdf.converter.pdf import DocxPdfAdapter, layout_flow

logger = logging.getLogger(__name__)


def _source_date(source: Path) -> datetime:
    """PDF creation date pinned to the source so repeated runs match byte for byte."""
    return datetime.fromtimestamp(source.stat().st_mtime, tz=timezone.utc)


def render_to_pdf(
    source: str | Path,
    destination: str | Path,
    config: RenderConfig | None = None,
) -> None:
    """Convert *source* to a PDF at *destination* without external programs.

    Raises UnsupportedFormatError for anything but .doc/.docx, and
    DocumentParseError / LayoutError / RenderError for the stage that
    failed. The destination is only written once the whole PDF exists.
    """
    source = Path(source)
    destination = Path(destination)
    config = config or RenderConfig()
    fmt = SourceFormat.from_path(source)

    if fmt is SourceFormat.DOC:
        _render_doc(source, destination, config)
    else:
        _render_docx(source, destination, config)
    logger.debug("library render %s -> %s", source, destination)


def _render_doc(source: Path, destination: Path, config: RenderConfig) -> None:
    document = word97.load(source)
    try:
        flow = markup.to_flow(document)
    except ValueError as e:
        raise LayoutError(f"Cannot lay out {source}: {e}", source=source) from e
    layout_flow(flow, destination, config, creation_date=_source_date(source))


def _render_docx(source: Path, destination: Path, config: RenderConfig) -> None:
    try:
        document = docx.Document(str(source))
    except Exception as e:
        raise DocumentParseError(f"Failed to read {source}: {e}", source=source) from e
    DocxPdfAdapter(config).render(
        document, destination, creation_date=_source_date(source)
    )
