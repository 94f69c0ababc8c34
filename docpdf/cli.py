"""CLI entry point for docpdf."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from docpdf.config import DocPdfConfig, load_config
from docpdf.config.loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG
from docpdf.converter import (
    ConversionError,
    DocumentConversionError,
    DocumentConverter,
)
from docpdf.pipeline import ConversionCopyAction, WorkResult, destination_name, scan_tree

app = typer.Typer(
    name="docpdf",
    help="Copy a directory of Word documents, converting .doc/.docx to PDF.",
)

config_app = typer.Typer(help="Manage docpdf configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: DocPdfConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> DocPdfConfig:
    if _config is None:
        return load_config()
    return _config


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS[level],
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to docpdf.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(_config.log_level)


def _with_overrides(
    cfg: DocPdfConfig, local_word: bool | None, fail_fast: bool | None = None
) -> DocPdfConfig:
    update: dict[str, bool] = {}
    if local_word is not None:
        update["use_local_word"] = local_word
    if fail_fast is not None:
        update["fail_fast"] = fail_fast
    if not update:
        return cfg
    conversion = cfg.conversion.model_copy(update=update)
    return cfg.model_copy(update={"conversion": conversion})


def _build_converter(cfg: DocPdfConfig) -> DocumentConverter:
    try:
        return DocumentConverter.from_config(cfg)
    except ConversionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _display_work_result(result: WorkResult) -> None:
    rprint(
        Panel(
            f"[dim]Directories:[/dim] {len(result.directories)}\n"
            f"[dim]Converted:[/dim]   {len(result.converted)}\n"
            f"[dim]Failed:[/dim]      {len(result.failures)}",
            title="Conversion Result",
            border_style="green" if result.succeeded else "red",
        )
    )
    if result.failures:
        table = Table(title=f"Failures ({len(result.failures)})")
        table.add_column("Source", style="cyan")
        table.add_column("Error", style="red")
        for failure in result.failures:
            table.add_row(failure.source, failure.message)
        rprint(table)


@app.command()
def convert(
    source: str = typer.Argument(..., help="Directory containing .doc/.docx files"),
    destination: str = typer.Argument(..., help="Directory receiving the PDFs"),
    local_word: bool | None = typer.Option(
        None, "--local-word/--no-local-word", help="Use a local MS Word instance (Windows)"
    ),
    fail_fast: bool | None = typer.Option(
        None, "--fail-fast/--keep-going", help="Stop at the first failed file"
    ),
) -> None:
    """Copy SOURCE into DESTINATION, converting Word documents to PDF."""
    cfg = _with_overrides(_get_config(), local_word, fail_fast)
    converter = _build_converter(cfg)
    action = ConversionCopyAction(
        destination, converter, fail_fast=cfg.conversion.fail_fast
    )

    try:
        result = action.execute(scan_tree(source, cfg.conversion.include))
    except NotADirectoryError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except DocumentConversionError as e:
        rprint(f"[red]Error:[/red] {e}: {e.__cause__}")
        raise typer.Exit(1)

    _display_work_result(result)
    if not result.succeeded:
        raise typer.Exit(1)


@app.command("file")
def convert_file(
    source: str = typer.Argument(..., help="Path to a .doc or .docx file"),
    output: str | None = typer.Option(None, "--output", "-o", help="PDF path"),
    local_word: bool | None = typer.Option(
        None, "--local-word/--no-local-word", help="Use a local MS Word instance (Windows)"
    ),
) -> None:
    """Convert a single document to PDF."""
    cfg = _with_overrides(_get_config(), local_word)
    converter = _build_converter(cfg)
    target = Path(output) if output else Path(destination_name(source))
    if target == Path(source):
        target = Path(source).with_suffix(".pdf")

    try:
        outcome = converter.convert(source, target)
    except DocumentConversionError as e:
        rprint(f"[red]Error:[/red] {e}: {e.__cause__}")
        raise typer.Exit(1)

    rprint(
        Panel(
            f"[dim]Source:[/dim]      {outcome.request.source}\n"
            f"[dim]Destination:[/dim] {outcome.request.destination}\n"
            f"[dim]Mode:[/dim]        {outcome.mode.value}\n"
            f"[dim]Fell back:[/dim]   {outcome.fell_back}",
            title="Conversion Result",
            border_style="green",
        )
    )


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default docpdf.yaml in current directory."""
    target = PROJECT_CONFIG
    if target.exists() and not force:
        rprint("[yellow]docpdf.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
