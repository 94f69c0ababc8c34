"""Document conversion subsystem: .doc/.docx to PDF."""

from docpdf.converter.dispatcher import (
    DocumentConverter,
    after_external_failure,
    select_mode,
)
from docpdf.converter.external import ExternalRenderer, automation_script
from docpdf.converter.library import render_to_pdf
from docpdf.converter.models import (
    ConversionError,
    ConversionMode,
    ConversionOutcome,
    ConversionRequest,
    DocumentConversionError,
    DocumentParseError,
    ExternalToolError,
    LayoutError,
    RenderError,
    ScriptExtractionError,
    SourceFormat,
    UnsupportedFormatError,
)

__all__ = [
    "ConversionError",
    "ConversionMode",
    "ConversionOutcome",
    "ConversionRequest",
    "DocumentConversionError",
    "DocumentConverter",
    "DocumentParseError",
    "ExternalRenderer",
    "ExternalToolError",
    "LayoutError",
    "RenderError",
    "ScriptExtractionError",
    "SourceFormat",
    "UnsupportedFormatError",
    "after_external_failure",
    "automation_script",
    "render_to_pdf",
    "select_mode",
]
