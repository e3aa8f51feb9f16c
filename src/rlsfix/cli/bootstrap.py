"""The `bootstrap` command: make sure the generic-execute function exists."""

from __future__ import annotations

import asyncio

import click

from rlsfix.adapters._base import AdapterError, BootstrapError, ConnectionConfig
from rlsfix.cli._shared import new_adapter, resolve_config


async def _bootstrap(config: ConnectionConfig) -> bool:
    adapter = new_adapter(config)
    await adapter.connect(config)
    try:
        return await adapter.ensure_exec_function()
    finally:
        await adapter.close()


@click.command("bootstrap")
def bootstrap() -> None:
    """Create the exec function on Supabase if it is missing.

    Needs SUPABASE_DB_URL when the function has to be created.
    """
    config = resolve_config("supabase")
    try:
        created = asyncio.run(_bootstrap(config))
    except BootstrapError as e:
        click.echo(f"error: {e}", err=True)
        if e.manual_sql:
            click.echo("create it in the SQL editor with:", err=True)
            click.echo(e.manual_sql, err=True)
        raise SystemExit(1) from e
    except AdapterError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e

    function = config.params.get("exec_function", "exec_sql")
    if created:
        click.echo(f"created {function}()")
    else:
        click.echo(f"{function}() already exists")
