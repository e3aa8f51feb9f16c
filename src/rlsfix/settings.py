"""Credentials and connection settings from the environment (optionally a .env file)."""

from __future__ import annotations

import os
from collections.abc import Mapping

from dotenv import find_dotenv, load_dotenv

from rlsfix.adapters._base import AdapterType, ConnectionConfig

ENV_URL = "SUPABASE_URL"
ENV_URL_FALLBACK = "VITE_SUPABASE_URL"  # name used by the frontend build
ENV_SERVICE_ROLE_KEY = "SUPABASE_SERVICE_ROLE_KEY"
ENV_DB_URL = "SUPABASE_DB_URL"
ENV_EXEC_FUNCTION = "RLSFIX_EXEC_FUNCTION"
ENV_TIMEOUT = "RLSFIX_TIMEOUT"


class MissingCredentialError(Exception):
    """A required environment variable is unset or empty."""

    def __init__(self, variable: str) -> None:
        super().__init__(f"missing required environment variable {variable}")
        self.variable = variable


def load_env(path: str | None = None) -> None:
    """Load a .env file into os.environ without overriding what is already set."""
    dotenv_path = path or find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)


def _require(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    raise MissingCredentialError(names[0])


def connection_config(
    adapter_type: AdapterType, environ: Mapping[str, str] | None = None
) -> ConnectionConfig:
    """Build a ConnectionConfig for ``adapter_type``.

    Raises MissingCredentialError naming the first missing variable. Nothing
    here touches the network.
    """
    env = os.environ if environ is None else environ

    if adapter_type == AdapterType.POSTGRES:
        return ConnectionConfig(
            name="postgres",
            adapter_type=adapter_type,
            params={"dsn": _require(env, ENV_DB_URL)},
        )

    params = {
        "url": _require(env, ENV_URL, ENV_URL_FALLBACK),
        "service_role_key": _require(env, ENV_SERVICE_ROLE_KEY),
    }
    for key, name in (
        ("db_url", ENV_DB_URL),
        ("exec_function", ENV_EXEC_FUNCTION),
        ("timeout", ENV_TIMEOUT),
    ):
        value = env.get(name, "").strip()
        if value:
            params[key] = value
    return ConnectionConfig(name="supabase", adapter_type=adapter_type, params=params)
