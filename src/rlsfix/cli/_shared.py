"""Shared helpers for the CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from rlsfix.adapters._base import AdapterType, ConnectionConfig, StatementAdapter
from rlsfix.adapters._registry import get_adapter
from rlsfix.diagnostics import Diagnostic, codes
from rlsfix.diagnostics.render import render_text
from rlsfix.plan.descriptor import (
    DescriptorError,
    MigrationDescriptor,
    load_bundled,
    load_descriptor,
)
from rlsfix.settings import MissingCredentialError, connection_config

AUTO_LABELS = {"tool": "rlsfix"}


def stderr_echo(message: object | None = None, err: bool = False, **kwargs) -> None:
    """click.echo that always writes to stderr (keeps JSON stdout clean)."""
    click.echo(message, err=True, **kwargs)


def echo_for(output_format: str):
    return stderr_echo if output_format == "json" else click.echo


def resolve_config(target: str) -> ConnectionConfig:
    """Credentials for ``target`` from the environment; exit 1 if any is missing."""
    try:
        return connection_config(AdapterType(target))
    except MissingCredentialError as e:
        diag = Diagnostic.error(codes.MISSING_CREDENTIAL, str(e)).suggest(
            "export it or put it in a .env file (see --env-file)"
        )
        click.echo(render_text([diag]), err=True)
        raise SystemExit(1) from e


def new_adapter(config: ConnectionConfig) -> StatementAdapter:
    return get_adapter(config.adapter_type)()


def load_source(source: str) -> MigrationDescriptor:
    """Resolve SOURCE: a descriptor/.sql path, or the name of a bundled descriptor."""
    path = Path(source)
    try:
        if path.exists() or path.suffix:
            return load_descriptor(path)
        return load_bundled(source)
    except DescriptorError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1) from e
