"""CLI entry point for `rlsfix`."""

from __future__ import annotations

import click

from rlsfix.cli.bootstrap import bootstrap
from rlsfix.cli.check import check
from rlsfix.cli.plan import plan
from rlsfix.cli.run import run
from rlsfix.cli.seed import seed
from rlsfix.settings import load_env


@click.group()
@click.version_option(package_name="rlsfix")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Load variables from this .env file (default: nearest .env upwards from cwd).",
)
def main(env_file: str | None) -> None:
    """rlsfix: reconcile row level security policies on a Supabase backend."""
    load_env(env_file)


main.add_command(plan)
main.add_command(run)
main.add_command(bootstrap)
main.add_command(check)
main.add_command(seed)
