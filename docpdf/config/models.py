from pydantic import BaseModel, Field
from typing import Literal

from docpdf._platform import EXTERNAL_AUTOMATION_SUPPORTED


class ConversionConfig(BaseModel):
    use_local_word: bool = EXTERNAL_AUTOMATION_SUPPORTED
    script_interpreter: str = "cscript"
    include: list[str] = ["*.doc", "*.docx"]
    fail_fast: bool = False


class RenderConfig(BaseModel):
    page_format: Literal["A3", "A4", "A5", "Letter", "Legal"] = "A4"
    margin_mm: float = Field(default=20.0, ge=0)
    font_family: Literal["helvetica", "times", "courier"] = "helvetica"
    font_path: str | None = None
    font_size: float = Field(default=11.0, gt=0)
    line_height: float = Field(default=1.4, gt=0)
    page_numbers: bool = True


class DocPdfConfig(BaseModel):
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
