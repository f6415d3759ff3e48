"""Helpers shared by CLI commands."""
from __future__ import annotations

from pathlib import Path

import typer

from arueval.config import AruEvalConfig, load_config
from arueval.core.exceptions import AruEvalError
from arueval.core.models import ReportBundle
from arueval.io.readers import read_reports


def load_cli_config(path: Path | None) -> AruEvalConfig:
    """Load a YAML config, or defaults when no path is given.

    Raises:
        typer.BadParameter: If the config file does not exist.
    """
    if path is None:
        return AruEvalConfig()
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc)) from exc


def load_bundle(classifier: Path, main: Path) -> ReportBundle:
    """Read both reports, turning input problems into CLI errors.

    Raises:
        typer.BadParameter: If a file is missing, unsupported, or malformed.
    """
    try:
        return read_reports(classifier, main)
    except (FileNotFoundError, AruEvalError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def parse_species(species: str | None) -> list[str] | None:
    """Split a comma-separated species list (e.g. "OVEN,OSFL")."""
    if species is None:
        return None
    codes = [s.strip() for s in species.split(",") if s.strip()]
    return codes or None


def fail(exc: Exception) -> typer.Exit:
    """Report a domain error on stderr and return the exit to raise."""
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)
