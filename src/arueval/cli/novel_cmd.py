"""arueval novel — Species the classifier found that no human tagged."""
from __future__ import annotations

from pathlib import Path

import typer

from arueval.cli._common import fail, load_bundle, load_cli_config
from arueval.core.enums import Resolution
from arueval.core.exceptions import AruEvalError, NoNovelDetectionsError
from arueval.evaluation.novel import RandomTieBreaker
from arueval.evaluation.runner import EvaluationRunner
from arueval.io.writers import write_novel_records

novel_app = typer.Typer(help="Find classifier detections with no human tag.")


@novel_app.callback(invoke_without_command=True)
def novel(
    ctx: typer.Context,  # noqa: ARG001
    classifier: Path = typer.Option(  # noqa: B008
        ..., "--classifier", "-c", help="Classifier report (.csv or .xlsx)"
    ),
    main: Path = typer.Option(  # noqa: B008
        ..., "--main", "-m", help="Main report with human tags (.csv or .xlsx)"
    ),
    threshold: int | None = typer.Option(  # noqa: B008
        None, "--threshold", "-t", help="Minimum classifier score"
    ),
    resolution: str | None = typer.Option(  # noqa: B008
        None, "--resolution", "-r", help="task, recording, location, or project"
    ),
    keep_disallowed: bool = typer.Option(  # noqa: B008
        False, "--keep-disallowed", help="Keep species not allowed in the project"
    ),
    tags: bool = typer.Option(  # noqa: B008
        False, "--tags", help="Also export the detections as tag upload rows"
    ),
    random_ties: bool = typer.Option(  # noqa: B008
        False, "--random-ties", help="Break score ties at random instead of first-by-order"
    ),
    seed: int | None = typer.Option(None, "--seed", "-s", help="Seed for --random-ties"),  # noqa: B008
    output_dir: Path = typer.Option(  # noqa: B008
        Path("results"), "--output", "-o", help="Output directory"
    ),
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", help="YAML configuration file"
    ),
) -> None:
    """Write the best detection of every species no human tagged."""
    config = load_cli_config(config_path)
    settings = config.novel

    try:
        res = Resolution(resolution) if resolution is not None else settings.resolution
    except ValueError as exc:
        raise typer.BadParameter(f"Unknown resolution: {resolution}") from exc
    score = threshold if threshold is not None else settings.threshold

    bundle = load_bundle(classifier, main)
    typer.echo(
        f"Loaded {len(bundle.classifier)} detections and {len(bundle.main)} tags"
    )

    tie_breaker: RandomTieBreaker | None = None
    if random_ties:
        tie_breaker = RandomTieBreaker(seed if seed is not None else settings.seed)
    runner = EvaluationRunner(config, tie_breaker=tie_breaker)

    remove = config.evaluation.remove_disallowed_species and not keep_disallowed
    output_dir.mkdir(parents=True, exist_ok=True)
    try:
        records = runner.find_novel_detections(
            bundle,
            remove_disallowed_species=remove,
            threshold=score,
            resolution=res,
            export_to_tags=tags,
            output_dir=output_dir,
        )
    except NoNovelDetectionsError as exc:
        typer.echo(str(exc))
        return
    except (AruEvalError, ValueError) as exc:
        raise fail(exc) from exc

    path = write_novel_records(records, output_dir / "novel_detections.csv")
    typer.echo(f"Found {len(records)} novel detection(s) at {res} resolution")
    typer.echo(f"Saved to {path}")
    if tags:
        typer.echo(f"Tags saved to {output_dir / config.tags.tags_filename}")
