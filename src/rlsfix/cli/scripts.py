"""Standalone maintenance entry points. No flags: behaviour is fixed by the bundled data."""

from __future__ import annotations

import click

from rlsfix.cli._shared import load_source
from rlsfix.cli.run import execute_descriptor
from rlsfix.cli.seed import run_seed_departments
from rlsfix.runlog import cleanup_old_logs
from rlsfix.settings import load_env


@click.command()
def fix_users_policies() -> None:
    """Replace the recursive policies on public.users."""
    load_env()
    cleanup_old_logs()
    exit_code = execute_descriptor(load_source("users_policies"), target="supabase")
    if exit_code != 0:
        raise SystemExit(exit_code)


@click.command()
def seed_departments() -> None:
    """Seed the default departments."""
    load_env()
    exit_code = run_seed_departments()
    if exit_code != 0:
        raise SystemExit(exit_code)
