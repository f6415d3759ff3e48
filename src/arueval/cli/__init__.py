"""arueval CLI — Typer application."""
from __future__ import annotations

import typer

from arueval.cli.evaluate_cmd import evaluate_app
from arueval.cli.novel_cmd import novel_app
from arueval.cli.threshold_cmd import threshold_app

app = typer.Typer(
    name="arueval",
    help="arueval: evaluate acoustic classifiers against human-verified tags.",
    add_completion=False,
)

app.add_typer(evaluate_app, name="evaluate")
app.add_typer(threshold_app, name="threshold")
app.add_typer(novel_app, name="novel")
