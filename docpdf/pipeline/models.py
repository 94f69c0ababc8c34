"""Pydantic models for the copy pipeline."""

from pathlib import Path

from pydantic import BaseModel, Field


class FileCopyDetails(BaseModel):
    """One entry of the copy stream."""

    relative_path: str = Field(description="POSIX path relative to the source root")
    source: Path
    is_directory: bool = False


class ConversionFailure(BaseModel):
    source: str
    message: str


class WorkResult(BaseModel):
    """Outcome of processing a copy stream."""

    did_work: bool = False
    converted: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)
    failures: list[ConversionFailure] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures
