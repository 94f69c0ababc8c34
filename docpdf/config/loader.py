"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import DocPdfConfig

PROJECT_CONFIG = Path("docpdf.yaml")
USER_CONFIG = Path(".docpdf") / "config.yaml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")


def load_config(cli_path: str | None = None) -> DocPdfConfig:
    """Resolve the config: --config path, ./docpdf.yaml, ~/.docpdf/config.yaml, defaults.

    An explicit path must exist. Empty files are skipped like missing ones.
    """
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in _candidate_paths(cli_path):
        raw = _read_yaml(path)
        if raw is None:
            continue
        try:
            return DocPdfConfig(**_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return DocPdfConfig()


def _candidate_paths(cli_path: str | None) -> list[Path]:
    paths = [PROJECT_CONFIG, Path.home() / USER_CONFIG]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return [p for p in paths if p.is_file()]


def _read_yaml(path: Path) -> object:
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings; unset vars become empty."""
    if isinstance(obj, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `docpdf config init`
DEFAULT_CONFIG_TEMPLATE = """\
# docpdf.yaml

# Conversion strategy
conversion:
  # Drive a local Microsoft Word through the bundled VBScript (Windows only).
  # Omit to use the platform default: true on Windows, false elsewhere.
  # use_local_word: false
  script_interpreter: "cscript"
  include: ["*.doc", "*.docx"]
  fail_fast: false             # stop the batch at the first failed file

# Library renderer (used when Word is unavailable or fails)
render:
  page_format: "A4"            # A3 | A4 | A5 | Letter | Legal
  margin_mm: 20
  font_family: "helvetica"     # helvetica | times | courier
  # font_path: "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
  font_size: 11
  line_height: 1.4
  page_numbers: true

# Logging
log_level: "info"              # debug | info | warn | error
"""
