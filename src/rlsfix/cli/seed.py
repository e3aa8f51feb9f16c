"""The `seed` command group: reference data for the HR app."""

from __future__ import annotations

import asyncio
import json

import click

from rlsfix.adapters._base import AdapterError, ConnectionConfig
from rlsfix.cli._shared import echo_for, new_adapter, resolve_config
from rlsfix.seed import SeedReport, seed_departments


async def _seed_departments(config: ConnectionConfig, echo) -> SeedReport:
    adapter = new_adapter(config)
    await adapter.connect(config)
    try:
        return await seed_departments(adapter, echo=echo)
    finally:
        await adapter.close()


def run_seed_departments(output_format: str = "text") -> int:
    """Seed departments on Supabase. Returns exit code."""
    config = resolve_config("supabase")
    try:
        report = asyncio.run(_seed_departments(config, echo_for(output_format)))
    except AdapterError as e:
        click.echo(f"error: {e}", err=True)
        return 1

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        for row in report.rows:
            click.echo(f"  {row.get('id', '?')}: {row.get('name', '')}")
        if report.ok:
            click.echo("department seeding complete")
        else:
            click.echo(f"department seeding finished with {len(report.failed)} failure(s)")
    return 0 if report.ok else 1


@click.group("seed")
def seed() -> None:
    """Seed reference data."""


@seed.command("departments")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def departments(output_format: str) -> None:
    """Insert the default departments if the table is empty."""
    exit_code = run_seed_departments(output_format)
    if exit_code != 0:
        raise SystemExit(exit_code)
