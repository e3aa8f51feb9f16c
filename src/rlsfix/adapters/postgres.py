"""PostgreSQL adapter: direct execution, labels via SQL comments + application_name."""

from __future__ import annotations

import time

import psycopg

from rlsfix.adapters._base import (
    AdapterError,
    AdapterType,
    ConnectionConfig,
    StatementFailed,
)


def _label(sql: str, labels: dict[str, str] | None) -> str:
    if not labels:
        return sql
    label_str = ", ".join(f"{k}={v}" for k, v in labels.items())
    return f"/* rlsfix: {label_str} */ {sql}"


class PostgresAdapter:
    """PostgreSQL adapter using psycopg (async).

    Statements run directly on the connection, so no generic-execute
    function is needed and whole batches can run inside one transaction.
    """

    def __init__(self) -> None:
        self._conn: psycopg.AsyncConnection | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        dsn = config.params.get("dsn")
        if not dsn:
            raise AdapterError("PostgreSQL requires 'dsn' in connection params")
        try:
            self._conn = await psycopg.AsyncConnection.connect(
                dsn, autocommit=True, application_name="rlsfix"
            )
        except Exception as e:
            raise AdapterError(f"PostgreSQL connection failed: {e}") from e

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            raise AdapterError("Not connected. Call connect() first.")
        return self._conn

    async def ensure_exec_function(self) -> bool:
        self._ensure_conn()
        return False

    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> float:
        conn = self._ensure_conn()

        t0 = time.monotonic()
        try:
            async with conn.cursor() as cur:
                await cur.execute(_label(sql, labels))
        except psycopg.Error as e:
            raise AdapterError(f"PostgreSQL execution failed: {e}", code=e.sqlstate) from e
        except Exception as e:
            raise AdapterError(f"PostgreSQL execution failed: {e}") from e
        return (time.monotonic() - t0) * 1000

    async def execute_atomic(
        self, statements: list[str], *, labels: dict[str, str] | None = None
    ) -> None:
        conn = self._ensure_conn()

        index = 0
        try:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    for index, sql in enumerate(statements):
                        await cur.execute(_label(sql, labels))
        except psycopg.Error as e:
            raise StatementFailed(
                f"PostgreSQL execution failed: {e}", index=index, code=e.sqlstate
            ) from e

    def adapter_type(self) -> AdapterType:
        return AdapterType.POSTGRES

    def supports_transactions(self) -> bool:
        return True
