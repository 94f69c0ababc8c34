"""Copy pipeline feeding the converter."""

from docpdf.pipeline.action import ConversionCopyAction
from docpdf.pipeline.models import ConversionFailure, FileCopyDetails, WorkResult
from docpdf.pipeline.stream import destination_name, scan_tree

__all__ = [
    "ConversionCopyAction",
    "ConversionFailure",
    "FileCopyDetails",
    "WorkResult",
    "destination_name",
    "scan_tree",
]
