"""Word automation through the bundled VBScript (Windows only).

The script is extracted into a temporary directory once per process.
The outcome of that extraction is memoized, failures included, so a
broken extraction is reported again on every call but never retried.

Success of a conversion is judged only by the destination file existing
after the script exits; its exit code is not inspected.
"""

from __future__ import annotations

import atexit
import functools
import logging
import shutil
import subprocess
import tempfile
from importlib import resources
from pathlib import Path

from charset_normalizer import from_bytes

from docpdf._platform import EXTERNAL_AUTOMATION_SUPPORTED
from docpdf.converter.models import ExternalToolError, ScriptExtractionError

logger = logging.getLogger(__name__)

SCRIPT_NAME = "ms-word-to-pdf.vbs"
DEFAULT_INTERPRETER = "cscript"
FALLBACK_ENCODING = "utf-8"


def _extract_script() -> Path:
    script = resources.files("docpdf.converter") / "scripts" / SCRIPT_NAME
    target_dir = Path(tempfile.mkdtemp(prefix="docpdf-"))
    atexit.register(shutil.rmtree, target_dir, ignore_errors=True)
    target = target_dir / SCRIPT_NAME
    target.write_bytes(script.read_bytes())
    return target


@functools.cache
def _extraction() -> Path | ScriptExtractionError:
    try:
        path = _extract_script()
    except OSError as e:
        logger.error("Failed to extract %s into a temporary directory: %s", SCRIPT_NAME, e)
        err = ScriptExtractionError(
            f"Failed to extract {SCRIPT_NAME} into temporary directory"
        )
        err.__cause__ = e
        return err
    logger.debug("extracted %s to %s", SCRIPT_NAME, path)
    return path


def automation_script() -> Path:
    """Path of the extracted script; raises ScriptExtractionError if extraction failed."""
    result = _extraction()
    if isinstance(result, ScriptExtractionError):
        raise result
    return result


def decode_output(raw: bytes) -> str:
    """Decode process output, guessing its encoding."""
    if not raw:
        return ""
    best = from_bytes(raw).best()
    if best is None:
        return raw.decode(FALLBACK_ENCODING, errors="replace")
    return str(best)


class ExternalRenderer:
    """Runs ``<interpreter> <script> <source> /o:<destination>`` per file."""

    def __init__(self, script: Path, interpreter: str = DEFAULT_INTERPRETER) -> None:
        self.script = script
        self.interpreter = interpreter

    @classmethod
    def create(cls, interpreter: str = DEFAULT_INTERPRETER) -> ExternalRenderer | None:
        """None where Word automation is unsupported; extraction errors propagate."""
        if not EXTERNAL_AUTOMATION_SUPPORTED:
            return None
        return cls(automation_script(), interpreter)

    def command(self, source: Path, destination: Path) -> list[str]:
        return [
            self.interpreter,
            str(self.script),
            str(Path(source).absolute()),
            "/o:" + str(Path(destination).absolute()),
        ]

    def render(self, source: str | Path, destination: str | Path) -> None:
        source = Path(source)
        destination = Path(destination)
        base_message = "Failed to convert a document by means of a local MS Word instance"
        cmd = self.command(source, destination)
        logger.debug("running %s", cmd)

        try:
            proc = subprocess.run(
                cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
            )
        except OSError as e:
            raise ExternalToolError(f"{base_message}: {e}", source=source) from e

        if destination.exists():
            return

        output = decode_output(proc.stdout or b"")
        raise ExternalToolError(
            f"{base_message}. VB script output:\n{output}",
            source=source,
            output=output,
        )
