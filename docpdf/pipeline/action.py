"""Copy action: directories pass through, documents go to the converter."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from docpdf.converter import DocumentConversionError, DocumentConverter
from docpdf.pipeline.models import ConversionFailure, FileCopyDetails, WorkResult
from docpdf.pipeline.stream import destination_name

logger = logging.getLogger(__name__)


class ConversionCopyAction:
    """Processes a copy stream into *destination_dir*.

    Failed files are recorded in the WorkResult and the batch continues,
    unless ``fail_fast`` is set, in which case the first
    DocumentConversionError propagates.
    """

    def __init__(
        self,
        destination_dir: str | Path | None,
        converter: DocumentConverter,
        *,
        fail_fast: bool = False,
    ) -> None:
        if destination_dir is None:
            raise ValueError("No destination directory has been specified")
        self.destination_dir = Path(destination_dir).absolute()
        self.converter = converter
        self.fail_fast = fail_fast

    def resolve(self, details: FileCopyDetails) -> Path:
        relative = details.relative_path
        if not details.is_directory:
            relative = destination_name(relative)
        return self.destination_dir / relative

    def execute(self, stream: Iterable[FileCopyDetails]) -> WorkResult:
        result = WorkResult()
        self.destination_dir.mkdir(parents=True, exist_ok=True)
        for details in stream:
            self.process_file(details, result)
        logger.info(
            "processed stream: %d converted, %d failed",
            len(result.converted),
            len(result.failures),
        )
        return result

    def process_file(self, details: FileCopyDetails, result: WorkResult) -> None:
        destination = self.resolve(details)

        if details.is_directory:
            destination.mkdir(parents=True, exist_ok=True)
            result.directories.append(details.relative_path)
            result.did_work = True
            return

        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.converter.convert(details.source, destination)
        except DocumentConversionError as e:
            if self.fail_fast:
                raise
            cause = e.__cause__ or e
            logger.error("%s: %s", e, cause)
            result.failures.append(
                ConversionFailure(source=str(details.source), message=f"{e}: {cause}")
            )
            return
        result.converted.append(details.relative_path)
        result.did_work = True
