from __future__ import annotations

import logging
from importlib import metadata
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from pedebug.config import load_config
from pedebug.loader import load_debug_sections
from pedebug.model import build_report
from pedebug.reporters.console import render_console, render_types

app = typer.Typer(add_completion=False)


def version_callback(value: bool):
    if value:
        try:
            v = metadata.version("pedebug")
        except metadata.PackageNotFoundError:
            v = "0.1.0-dev"
        typer.echo(f"pedebug version: {v}")
        raise typer.Exit()


def setup_logging(level: str) -> None:
    root = logging.getLogger("pedebug")
    root.handlers.clear()
    root.addHandler(RichHandler(console=Console(stderr=True), show_path=False, markup=False))
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """
    Static decoder for PE debug directories.
    """
    pass


@app.command()
def info(
    path: str = typer.Argument(..., help="PE file path."),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON report instead of text."),
):
    cfg = load_config(config)
    setup_logging(cfg.log_level)

    p = Path(path).expanduser().resolve()
    if not p.is_file():
        raise typer.BadParameter(f"Path does not exist: {p}")

    result = load_debug_sections(p, limits=cfg.limits)
    if as_json:
        typer.echo(build_report(str(p), result).model_dump_json(indent=2))
        if not result.present:
            raise typer.Exit(code=1)
        return

    log = logging.getLogger("pedebug.cli")
    for e in result.errors:
        log.warning("%s: %s", e.get("code"), e.get("message"))

    if result.present:
        if result.sections:
            render_console(p.name, result.sections)
        else:
            typer.echo("No debug directory.")

    if not result.present:
        typer.secho(f"Not a PE file: {p.name}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command()
def types():
    """
    List the known debug type codes.
    """
    render_types()


if __name__ == "__main__":
    app()
