"""Source tree scanning and destination naming."""

from __future__ import annotations

import fnmatch
import os
import re
from collections.abc import Iterator, Sequence
from pathlib import Path

from docpdf.pipeline.models import FileCopyDetails

DEFAULT_INCLUDE = ("*.doc", "*.docx")

_RENAME_RE = re.compile(r"(.+)\.docx?$", re.IGNORECASE)


def destination_name(relative_path: str) -> str:
    """``report.docx`` → ``report.pdf``; other names are left alone."""
    return _RENAME_RE.sub(r"\1.pdf", relative_path)


def is_included(name: str, include: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(fnmatch.fnmatchcase(lowered, pattern.lower()) for pattern in include)


def scan_tree(
    root: str | Path, include: Sequence[str] = DEFAULT_INCLUDE
) -> Iterator[FileCopyDetails]:
    """Walk *root* in sorted order, yielding every directory and each included file.

    A missing *root* raises NotADirectoryError here, before anything is consumed.
    """
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(f"Source directory not found: {root}")
    return _walk(root, include)


def _walk(root: Path, include: Sequence[str]) -> Iterator[FileCopyDetails]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        current = Path(dirpath)
        for name in dirnames:
            path = current / name
            yield FileCopyDetails(
                relative_path=path.relative_to(root).as_posix(),
                source=path,
                is_directory=True,
            )
        for name in sorted(filenames):
            if not is_included(name, include):
                continue
            path = current / name
            yield FileCopyDetails(
                relative_path=path.relative_to(root).as_posix(),
                source=path,
            )
