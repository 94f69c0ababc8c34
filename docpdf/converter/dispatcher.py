"""Conversion dispatcher: Word automation first when asked for, library otherwise."""

from __future__ import annotations

import logging
from pathlib import Path

from docpdf.config.models import DocPdfConfig, RenderConfig
from docpdf.converter.external import ExternalRenderer
from docpdf.converter.library import render_to_pdf
from docpdf.converter.models import (
    ConversionMode,
    ConversionOutcome,
    ConversionRequest,
    DocumentConversionError,
    ExternalToolError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)


def select_mode(use_external: bool, external_available: bool) -> ConversionMode:
    """Initial mode of a run."""
    if use_external and external_available:
        return ConversionMode.EXTERNAL
    return ConversionMode.LIBRARY


def after_external_failure(mode: ConversionMode) -> ConversionMode:
    """The only transition: a failed external attempt downgrades to LIBRARY for good."""
    if mode is ConversionMode.EXTERNAL:
        return ConversionMode.LIBRARY
    return mode


class DocumentConverter:
    """Converts one file at a time, tracking the run's conversion mode.

    The mode starts as EXTERNAL only when requested and an external
    renderer exists. The first external attempt that leaves no
    destination file renders that file through the library and switches
    the rest of the run to LIBRARY.
    """

    def __init__(
        self,
        render_config: RenderConfig | None = None,
        external: ExternalRenderer | None = None,
        *,
        use_external: bool = False,
    ) -> None:
        self._render_config = render_config or RenderConfig()
        self._external = external
        if use_external and external is None:
            logger.warning(
                "Local MS Word conversion is not supported on the current platform; "
                "using library conversion"
            )
        self.mode = select_mode(use_external, external is not None)
        logger.info("conversion mode: %s", self.mode.value)

    @classmethod
    def from_config(cls, config: DocPdfConfig) -> DocumentConverter:
        """Build the dispatcher for a run.

        On platforms with Word automation the script is extracted here, so
        an extraction failure surfaces before any file is processed.
        """
        external = ExternalRenderer.create(config.conversion.script_interpreter)
        return cls(
            config.render,
            external,
            use_external=config.conversion.use_local_word,
        )

    def convert(self, source: str | Path, destination: str | Path) -> ConversionOutcome:
        """Convert *source* into a PDF at *destination*.

        Raises DocumentConversionError naming the source on any failure.
        """
        try:
            request = ConversionRequest.build(source, destination)
        except UnsupportedFormatError as e:
            raise DocumentConversionError(Path(source), e) from e

        fell_back = False
        if self.mode is ConversionMode.EXTERNAL and self._external is not None:
            try:
                self._external.render(request.source, request.destination)
                logger.info("converted %s with MS Word", request.source)
                return ConversionOutcome(request=request, mode=ConversionMode.EXTERNAL)
            except ExternalToolError as e:
                logger.warning(
                    "MS Word did not produce %s, falling back to library conversion: %s",
                    request.destination,
                    e,
                )
                self.mode = after_external_failure(self.mode)
                fell_back = True

        try:
            render_to_pdf(request.source, request.destination, self._render_config)
        except Exception as e:
            raise DocumentConversionError(request.source, e) from e

        logger.info("converted %s", request.source)
        return ConversionOutcome(
            request=request, mode=ConversionMode.LIBRARY, fell_back=fell_back
        )
