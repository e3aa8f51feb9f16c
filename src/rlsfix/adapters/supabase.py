"""Supabase adapter: statements dispatched through a PostgREST RPC function.

Every statement is sent as ``POST /rest/v1/rpc/<function>`` with body
``{"query": sql}``. The function is a SECURITY DEFINER wrapper around
plpgsql ``EXECUTE`` and has to exist before anything else can run; see
``ensure_exec_function``.
"""

from __future__ import annotations

import re
import time

import httpx

from rlsfix.adapters._base import (
    AdapterError,
    AdapterType,
    BootstrapError,
    ConnectionConfig,
)

DEFAULT_EXEC_FUNCTION = "exec_sql"
DEFAULT_TIMEOUT = 30.0

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# PGRST202: function not found in the schema cache. 42883: undefined_function.
_MISSING_FUNCTION_CODES = frozenset({"PGRST202", "42883"})


def exec_function_sql(name: str = DEFAULT_EXEC_FUNCTION) -> str:
    """DDL for the generic-execute function."""
    return (
        f"CREATE OR REPLACE FUNCTION {name}(query text)\n"
        "RETURNS void\n"
        "LANGUAGE plpgsql\n"
        "SECURITY DEFINER\n"
        "AS $$\n"
        "BEGIN\n"
        "  EXECUTE query;\n"
        "END;\n"
        "$$;"
    )


def _raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return

    code: str | None = None
    message = response.text.strip() or response.reason_phrase
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = body.get("code")
        message = body.get("message") or message
        for extra in ("details", "hint"):
            if body.get(extra):
                message = f"{message} ({extra}: {body[extra]})"

    raise AdapterError(
        f"Supabase request failed ({response.status_code}): {message}", code=code
    )


class SupabaseAdapter:
    """Supabase adapter using httpx (async) against the PostgREST API."""

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client: httpx.AsyncClient | None = None
        self._transport = transport
        self._function = DEFAULT_EXEC_FUNCTION
        self._db_url: str | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        url = config.params.get("url")
        key = config.params.get("service_role_key")
        if not url or not key:
            raise AdapterError(
                "Supabase requires 'url' and 'service_role_key' in connection params"
            )

        function = config.params.get("exec_function") or DEFAULT_EXEC_FUNCTION
        if not _IDENT_RE.match(function):
            raise AdapterError(f"Invalid exec function name: {function!r}")
        self._function = function
        self._db_url = config.params.get("db_url") or None

        try:
            timeout = float(config.params.get("timeout") or DEFAULT_TIMEOUT)
        except ValueError as e:
            raise AdapterError(f"Invalid timeout: {config.params['timeout']!r}") from e

        self._client = httpx.AsyncClient(
            base_url=url.rstrip("/"),
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise AdapterError("Not connected. Call connect() first.")
        return self._client

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        client = self._ensure_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise AdapterError(f"Supabase request failed: {e}") from e
        _raise_for_response(response)
        return response

    async def ensure_exec_function(self) -> bool:
        try:
            await self.execute("SELECT 1")
            return False
        except AdapterError as e:
            if e.code is None and isinstance(e.__cause__, httpx.HTTPError):
                # Unreachable backend, not a bootstrap problem.
                raise
            if e.code not in _MISSING_FUNCTION_CODES:
                raise BootstrapError(
                    f"probing {self._function}() failed: {e}", code=e.code
                ) from e

        await self._provision()
        return True

    async def _provision(self) -> None:
        manual_sql = exec_function_sql(self._function)
        if self._db_url is None:
            raise BootstrapError(
                f"{self._function}() does not exist and no database URL is "
                "configured to create it (set SUPABASE_DB_URL)",
                manual_sql=manual_sql,
            )

        try:
            from rlsfix.adapters.postgres import PostgresAdapter
        except ImportError as e:
            raise BootstrapError(
                f"creating {self._function}() needs the postgres driver. "
                "Install with: pip install 'rlsfix[postgres]'",
                manual_sql=manual_sql,
            ) from e

        pg = PostgresAdapter()
        try:
            await pg.connect(
                ConnectionConfig(
                    name="provision",
                    adapter_type=AdapterType.POSTGRES,
                    params={"dsn": self._db_url},
                )
            )
            await pg.execute(manual_sql)
            await pg.execute("NOTIFY pgrst, 'reload schema'")
        except AdapterError as e:
            raise BootstrapError(
                f"failed to create {self._function}(): {e}",
                code=e.code,
                manual_sql=manual_sql,
            ) from e
        finally:
            await pg.close()

    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> float:
        headers = {}
        if labels:
            headers["X-Client-Info"] = "rlsfix " + " ".join(
                f"{k}={v}" for k, v in labels.items()
            )

        t0 = time.monotonic()
        await self._request(
            "POST", f"/rest/v1/rpc/{self._function}", json={"query": sql}, headers=headers
        )
        return (time.monotonic() - t0) * 1000

    async def execute_atomic(
        self, statements: list[str], *, labels: dict[str, str] | None = None
    ) -> None:
        raise AdapterError(
            "Supabase RPC runs each statement in its own transaction; "
            "use the postgres adapter for atomic runs"
        )

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        limit: int | None = None,
        order: str | None = None,
    ) -> list[dict[str, object]]:
        """Read rows from a table exposed through PostgREST."""
        params: dict[str, str] = {"select": columns}
        if limit is not None:
            params["limit"] = str(limit)
        if order:
            params["order"] = order
        response = await self._request("GET", f"/rest/v1/{table}", params=params)
        return response.json()

    async def insert(self, table: str, row: dict[str, object]) -> None:
        await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=row,
            headers={"Prefer": "return=minimal"},
        )

    def adapter_type(self) -> AdapterType:
        return AdapterType.SUPABASE

    def supports_transactions(self) -> bool:
        return False
