"""Pydantic models and errors for the document conversion subsystem."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ConversionError(Exception):
    """Base class for every conversion failure."""

    def __init__(self, message: str, *, source: Path | None = None) -> None:
        self.source = source
        super().__init__(message)


class UnsupportedFormatError(ConversionError):
    """The source extension has no renderer."""


class DocumentParseError(ConversionError):
    """The source document could not be read into a document model."""


class LayoutError(ConversionError):
    """The document model could not be turned into paginated markup."""


class RenderError(ConversionError):
    """PDF generation failed."""


class ScriptExtractionError(ConversionError):
    """The bundled automation script could not be extracted."""


class ExternalToolError(ConversionError):
    """The automation script ran but did not produce the destination file."""

    def __init__(
        self, message: str, *, source: Path | None = None, output: str = ""
    ) -> None:
        self.output = output
        super().__init__(message, source=source)


class DocumentConversionError(ConversionError):
    """Wraps any conversion failure with the offending source path."""

    def __init__(self, source: Path, cause: Exception) -> None:
        super().__init__(f"Failed to convert the file: {source}", source=source)
        self.__cause__ = cause


class SourceFormat(str, Enum):
    DOC = "doc"
    DOCX = "docx"

    @classmethod
    def from_path(cls, path: str | Path) -> SourceFormat:
        ext = Path(path).suffix.lower().lstrip(".")
        try:
            return cls(ext)
        except ValueError:
            raise UnsupportedFormatError(
                f"The file to be processed has the unsupported extension: {ext}",
                source=Path(path),
            ) from None


class ConversionMode(str, Enum):
    EXTERNAL = "external"
    LIBRARY = "library"


class ConversionRequest(BaseModel):
    """One source file and where its PDF goes."""

    model_config = ConfigDict(frozen=True)

    source: Path
    destination: Path
    format: SourceFormat

    @classmethod
    def build(cls, source: str | Path, destination: str | Path) -> ConversionRequest:
        source = Path(source).absolute()
        return cls(
            source=source,
            destination=Path(destination).absolute(),
            format=SourceFormat.from_path(source),
        )


class ConversionOutcome(BaseModel):
    """Which path produced the PDF for a request."""

    request: ConversionRequest
    mode: ConversionMode
    fell_back: bool = False


class Word97Paragraph(BaseModel):
    text: str
    in_table: bool = False
    page_break_before: bool = False


class Word97Document(BaseModel):
    """Text content of a legacy binary Word document."""

    paragraphs: list[Word97Paragraph] = Field(default_factory=list)
    title: str | None = None
    author: str | None = None


class FlowDocument(BaseModel):
    """Paginated flow markup: every section is an HTML fragment starting a new page."""

    sections: list[str] = Field(default_factory=list)
    title: str | None = None
    author: str | None = None
