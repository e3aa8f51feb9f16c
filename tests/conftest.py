"""Root conftest: shared fixtures and markers."""

from __future__ import annotations

import copy
import os

import pytest

from rlsfix.adapters._base import (
    AdapterError,
    AdapterType,
    BootstrapError,
    ConnectionConfig,
    StatementFailed,
)
from rlsfix.plan import StatementKind, classify


def pytest_configure(config):
    config.addinivalue_line("markers", "postgres: requires running PostgreSQL container")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("RLSFIX_TEST_POSTGRES"):
        return

    skip_pg = pytest.mark.skip(reason="Postgres not available (set RLSFIX_TEST_POSTGRES=1)")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_pg)


class FakeStore:
    """In-memory stand-in for a backend reached through the exec function.

    Tracks, per table, whether row level security is on and which rules
    exist, and answers the way Postgres does: dropping a missing rule is
    42704 unless IF EXISTS, creating an existing one is 42710.
    """

    def __init__(
        self,
        tables: dict[str, set[str]] | None = None,
        *,
        fail_on: tuple[str, ...] = (),
        has_exec_function: bool = True,
        can_provision: bool = True,
        transactions: bool = False,
    ) -> None:
        tables = {"public.users": set()} if tables is None else tables
        self.tables = {name: {"rls": True, "rules": set(rules)} for name, rules in tables.items()}
        self.fail_on = fail_on
        self.has_exec_function = has_exec_function
        self.can_provision = can_provision
        self.transactions = transactions
        self.calls: list[str] = []
        self.labels: list[dict[str, str] | None] = []
        self.connected_with: ConnectionConfig | None = None
        self.closed = False

    def rules(self, table: str = "public.users") -> set[str]:
        return self.tables[table]["rules"]

    def rls(self, table: str = "public.users") -> bool:
        return self.tables[table]["rls"]

    # -- adapter protocol --

    async def connect(self, config: ConnectionConfig) -> None:
        self.connected_with = config

    async def close(self) -> None:
        self.closed = True

    async def ensure_exec_function(self) -> bool:
        if self.has_exec_function:
            return False
        if not self.can_provision:
            raise BootstrapError(
                "exec_sql() does not exist and no database URL is configured",
                manual_sql="CREATE OR REPLACE FUNCTION exec_sql(query text) ...",
            )
        self.has_exec_function = True
        return True

    async def execute(self, sql: str, *, labels: dict[str, str] | None = None) -> float:
        self.calls.append(sql)
        self.labels.append(labels)
        self._apply(sql)
        return 1.0

    async def execute_atomic(
        self, statements: list[str], *, labels: dict[str, str] | None = None
    ) -> None:
        if not self.transactions:
            raise AdapterError("no transactions here")
        snapshot = copy.deepcopy(self.tables)
        for index, sql in enumerate(statements):
            self.calls.append(sql)
            try:
                self._apply(sql)
            except AdapterError as e:
                self.tables = snapshot
                raise StatementFailed(str(e), index=index, code=e.code) from e

    def adapter_type(self) -> AdapterType:
        return AdapterType.POSTGRES if self.transactions else AdapterType.SUPABASE

    def supports_transactions(self) -> bool:
        return self.transactions

    # -- semantics --

    def _apply(self, sql: str) -> None:
        for needle in self.fail_on:
            if needle in sql:
                raise AdapterError(f"syntax error at or near {needle!r}", code="42601")

        statement = classify(sql)
        if statement.kind == StatementKind.OTHER:
            return
        if statement.table not in self.tables:
            raise AdapterError(
                f'relation "{statement.table}" does not exist', code="42P01"
            )

        table = self.tables[statement.table]
        if statement.kind == StatementKind.DISABLE_PROTECTION:
            table["rls"] = False
        elif statement.kind == StatementKind.ENABLE_PROTECTION:
            table["rls"] = True
        elif statement.kind == StatementKind.DROP_RULE:
            if statement.rule in table["rules"]:
                table["rules"].remove(statement.rule)
            elif not statement.if_exists:
                raise AdapterError(
                    f'policy "{statement.rule}" for table "{statement.table}" does not exist',
                    code="42704",
                )
        elif statement.kind == StatementKind.CREATE_RULE:
            if statement.rule in table["rules"]:
                raise AdapterError(
                    f'policy "{statement.rule}" for table "{statement.table}" already exists',
                    code="42710",
                )
            table["rules"].add(statement.rule)


@pytest.fixture
def fake_store():
    """Factory for FakeStore instances."""
    return FakeStore
