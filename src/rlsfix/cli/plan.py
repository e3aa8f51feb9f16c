"""The `plan` command: show the sequenced statements and lint them, offline."""

from __future__ import annotations

import click

from rlsfix.cli._output import render_plan
from rlsfix.cli._shared import load_source
from rlsfix.plan import sequence
from rlsfix.plan.lint import lint


@click.command("plan")
@click.argument("source")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def plan(source: str, output_format: str) -> None:
    """Print the statements SOURCE would run, in order, with lint warnings."""
    descriptor = load_source(source)
    statements = sequence(descriptor.statement_texts())
    click.echo(render_plan(descriptor, statements, lint(statements), output_format=output_format))
