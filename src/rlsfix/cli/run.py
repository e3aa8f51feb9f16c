"""The `run` command: bootstrap → disable → drop → create → enable against a target.

Statements run one at a time in descriptor order. A rejected statement is
reported and the run continues; the exit code follows the final
re-enable statement.
"""

from __future__ import annotations

import asyncio
import json

import click

from rlsfix.adapters._base import AdapterError, AdapterType, ConnectionConfig
from rlsfix.cli._output import render_plan, render_report
from rlsfix.cli._shared import AUTO_LABELS, echo_for, load_source, new_adapter, resolve_config
from rlsfix.plan import Statement, sequence
from rlsfix.plan.descriptor import MigrationDescriptor
from rlsfix.plan.lint import lint
from rlsfix.reconcile import BatchReport, ReconciliationDriver
from rlsfix.runlog import RunLog, cleanup_old_logs


async def _run_reconcile(
    statements: list[Statement],
    config: ConnectionConfig,
    *,
    descriptor: MigrationDescriptor,
    atomic: bool,
    echo,
) -> BatchReport:
    run_log = RunLog(descriptor=descriptor.label, target=config.name)
    labels = {**AUTO_LABELS, "run": run_log.run_id}

    adapter = new_adapter(config)
    await adapter.connect(config)
    try:
        driver = ReconciliationDriver(adapter, echo=echo, labels=labels, on_result=run_log.record)
        return await driver.run(
            statements, label=descriptor.label, target=config.name, atomic=atomic,
        )
    finally:
        await adapter.close()


def execute_descriptor(
    descriptor: MigrationDescriptor,
    *,
    target: str,
    atomic: bool = False,
    output_format: str = "text",
) -> int:
    """Run a descriptor against ``target``. Returns exit code."""
    statements = sequence(descriptor.statement_texts())

    # Exits before any remote call when credentials are missing.
    config = resolve_config(target)

    try:
        report = asyncio.run(
            _run_reconcile(
                statements,
                config,
                descriptor=descriptor,
                atomic=atomic,
                echo=echo_for(output_format),
            )
        )
    except AdapterError as e:
        if output_format == "json":
            click.echo(json.dumps({"succeeded": False, "error": str(e)}, indent=2))
        else:
            click.echo(f"error: {e}", err=True)
        return 1

    click.echo(render_report(report, output_format=output_format))
    return 0 if report.succeeded else 1


@click.command("run")
@click.argument("source")
@click.option(
    "--target",
    type=click.Choice([t.value for t in AdapterType]),
    default=AdapterType.SUPABASE.value,
    envvar="RLSFIX_TARGET",
    help="supabase: PostgREST RPC (default). postgres: direct connection.",
)
@click.option("--atomic", is_flag=True, help="Run every statement in one transaction (postgres only).")
@click.option("--dry-run", is_flag=True, help="Print the plan and exit without connecting.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def run(source: str, target: str, atomic: bool, dry_run: bool, output_format: str) -> None:
    """Reconcile row level security policies from a descriptor.

    SOURCE is a .toml descriptor, a .sql script, or the name of a bundled
    descriptor (e.g. users_policies).
    """
    cleanup_old_logs()
    descriptor = load_source(source)

    if dry_run:
        statements = sequence(descriptor.statement_texts())
        click.echo(
            render_plan(descriptor, statements, lint(statements), output_format=output_format)
        )
        return

    exit_code = execute_descriptor(
        descriptor, target=target, atomic=atomic, output_format=output_format,
    )
    if exit_code != 0:
        raise SystemExit(exit_code)
