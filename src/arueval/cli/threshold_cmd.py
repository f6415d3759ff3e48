"""arueval threshold — Pick the best threshold from a saved sweep."""
from __future__ import annotations

from pathlib import Path

import typer

from arueval.cli._common import load_cli_config
from arueval.core.exceptions import AruEvalError
from arueval.evaluation.metrics import select_best_threshold
from arueval.io.readers import read_metrics

threshold_app = typer.Typer(help="Select the score threshold that maximises F-score.")


@threshold_app.callback(invoke_without_command=True)
def threshold(
    ctx: typer.Context,  # noqa: ARG001
    metrics_path: Path = typer.Option(  # noqa: B008
        ..., "--metrics", "-m", help="threshold_metrics.json or .csv from 'evaluate'"
    ),
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", help="YAML configuration file"
    ),
) -> None:
    """Print the threshold with the highest rounded F-score."""
    config = load_cli_config(config_path)
    try:
        metrics = read_metrics(metrics_path)
    except (FileNotFoundError, AruEvalError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    best = select_best_threshold(metrics, decimals=config.evaluation.fscore_decimals)
    if best is None:
        typer.echo("No threshold has a defined F-score.", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(best))
