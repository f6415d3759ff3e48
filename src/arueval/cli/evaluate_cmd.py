"""arueval evaluate — Threshold sweep of classifier performance."""
from __future__ import annotations

from pathlib import Path

import typer

from arueval.cli._common import fail, load_bundle, load_cli_config, parse_species
from arueval.core.enums import Resolution
from arueval.core.exceptions import AruEvalError
from arueval.evaluation.runner import EvaluationRunner
from arueval.io.writers import write_metrics

evaluate_app = typer.Typer(help="Evaluate classifier precision, recall, and F-score.")


def _fmt(value: float | None) -> str:
    return "NA" if value is None else f"{value:.4f}"


@evaluate_app.callback(invoke_without_command=True)
def evaluate(
    ctx: typer.Context,  # noqa: ARG001
    classifier: Path = typer.Option(  # noqa: B008
        ..., "--classifier", "-c", help="Classifier report (.csv or .xlsx)"
    ),
    main: Path = typer.Option(  # noqa: B008
        ..., "--main", "-m", help="Main report with human tags (.csv or .xlsx)"
    ),
    resolution: str | None = typer.Option(  # noqa: B008
        None, "--resolution", "-r", help="task, minute, or recording"
    ),
    start: int | None = typer.Option(None, "--start", help="First score threshold"),  # noqa: B008
    end: int | None = typer.Option(None, "--end", help="Last score threshold"),  # noqa: B008
    species: str | None = typer.Option(  # noqa: B008
        None, "--species", help="Comma-separated species subset (e.g. OVEN,OSFL)"
    ),
    keep_disallowed: bool = typer.Option(  # noqa: B008
        False, "--keep-disallowed", help="Keep species not allowed in the project"
    ),
    output_dir: Path = typer.Option(  # noqa: B008
        Path("results"), "--output", "-o", help="Output directory"
    ),
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", help="YAML configuration file"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate inputs only"),  # noqa: B008
) -> None:
    """Sweep score thresholds and report precision, recall, and F-score."""
    config = load_cli_config(config_path)
    settings = config.evaluation

    try:
        res = Resolution(resolution) if resolution is not None else settings.resolution
    except ValueError as exc:
        raise typer.BadParameter(f"Unknown resolution: {resolution}") from exc
    thresholds = (
        start if start is not None else settings.thresholds[0],
        end if end is not None else settings.thresholds[1],
    )
    if thresholds[0] > thresholds[1]:
        raise typer.BadParameter(f"--start must not exceed --end: {thresholds}")

    bundle = load_bundle(classifier, main)
    typer.echo(
        f"Loaded {len(bundle.classifier)} detections and {len(bundle.main)} tags"
    )

    if dry_run:
        typer.echo("Dry run: inputs validated successfully.")
        return

    runner = EvaluationRunner(config)
    remove = settings.remove_disallowed_species and not keep_disallowed
    try:
        metrics = runner.evaluate(
            bundle,
            resolution=res,
            remove_disallowed_species=remove,
            species=parse_species(species),
            thresholds=thresholds,
        )
    except (AruEvalError, ValueError) as exc:
        raise fail(exc) from exc

    output_dir.mkdir(parents=True, exist_ok=True)
    write_metrics(metrics, output_dir / "threshold_metrics.json")
    write_metrics(metrics, output_dir / "threshold_metrics.csv")
    typer.echo(f"Metrics saved to {output_dir}/")

    best = runner.select_best_threshold(metrics)
    typer.echo("\n--- Classifier Performance ---")
    typer.echo(f"  Resolution:  {res}")
    typer.echo(f"  Thresholds:  {thresholds[0]}-{thresholds[1]}")
    if best is None:
        typer.echo("  Best threshold: NA (no defined F-score)")
        return
    m = next(x for x in metrics if x.threshold == best)
    typer.echo(f"  Best threshold: {best}")
    typer.echo(f"  Precision:   {_fmt(m.precision)}")
    typer.echo(f"  Recall:      {_fmt(m.recall)}")
    typer.echo(f"  F-score:     {_fmt(m.fscore)}")
