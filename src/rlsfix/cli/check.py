"""The `check` command: verify the backend is reachable and ready."""

from __future__ import annotations

import asyncio
import json

import click

from rlsfix.adapters._base import AdapterError, ConnectionConfig
from rlsfix.cli._shared import new_adapter, resolve_config
from rlsfix.verify import REQUIRED_TABLES, CheckReport, check_backend


async def _check(config: ConnectionConfig, tables: tuple[str, ...]) -> CheckReport:
    adapter = new_adapter(config)
    await adapter.connect(config)
    try:
        return await check_backend(adapter, tables=tables)
    finally:
        await adapter.close()


@click.command("check")
@click.option(
    "--table",
    "tables",
    multiple=True,
    help="Table that must exist (repeatable). Defaults to the HR app tables.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def check(tables: tuple[str, ...], output_format: str) -> None:
    """Check the exec function and required tables on Supabase."""
    config = resolve_config("supabase")
    try:
        report = asyncio.run(_check(config, tables or REQUIRED_TABLES))
    except AdapterError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        function = config.params.get("exec_function", "exec_sql")
        state = "ok" if report.exec_function else "missing"
        click.echo(f"{function}(): {state}")
        for table, present in report.tables.items():
            click.echo(f"table {table}: {'ok' if present else 'missing'}")
        for what, error in report.errors.items():
            click.echo(f"  {what}: {error}", err=True)
        click.echo("backend ready" if report.ok else "backend not ready")

    if not report.ok:
        raise SystemExit(1)
