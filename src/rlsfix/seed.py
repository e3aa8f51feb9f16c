"""Reference-data seeding through PostgREST."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import click

from rlsfix.adapters._base import AdapterError
from rlsfix.adapters.supabase import SupabaseAdapter

DEPARTMENTS_TABLE = "departments"

DEFAULT_DEPARTMENTS: list[dict[str, object]] = [
    {"id": "env-eng", "name": "Environmental Engineering"},
    {"id": "green-bldg", "name": "Green Building"},
    {"id": "carbon", "name": "Carbon"},
    {"id": "esg", "name": "ESG"},
    {"id": "hr", "name": "HR"},
    {"id": "it", "name": "IT"},
    {"id": "finance", "name": "Finance"},
    {"id": "marketing", "name": "Marketing"},
    {"id": "operations", "name": "Operations"},
]


@dataclass
class SeedReport:
    skipped: bool = False
    inserted: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    rows: list[dict[str, object]] = field(default_factory=list)
    list_error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, object]:
        return {
            "skipped": self.skipped,
            "inserted": self.inserted,
            "failed": self.failed,
            "rows": self.rows,
            "list_error": self.list_error,
        }


async def seed_departments(
    adapter: SupabaseAdapter,
    *,
    departments: list[dict[str, object]] | None = None,
    table: str = DEPARTMENTS_TABLE,
    echo: Callable[..., None] = click.echo,
) -> SeedReport:
    """Insert the default departments when the table is empty.

    A table with any row is left alone. Rows are inserted one at a time so a
    single rejected row does not stop the rest. An error on the first read
    propagates as AdapterError; an error listing the result is reported.
    """
    departments = DEFAULT_DEPARTMENTS if departments is None else departments
    report = SeedReport()

    existing = await adapter.select(table, columns="id", limit=1)
    if existing:
        echo(f"{table} already has rows, skipping seeding")
        report.skipped = True
        report.rows = await adapter.select(table, order="name.asc")
        return report

    echo(f"{table} is empty, adding {len(departments)} defaults")
    for dept in departments:
        name = str(dept.get("name", dept.get("id", "?")))
        try:
            await adapter.insert(table, dept)
        except AdapterError as e:
            echo(f"  failed to add {name}: {e}", err=True)
            report.failed[name] = str(e)
        else:
            echo(f"  added {name}")
            report.inserted.append(name)

    try:
        report.rows = await adapter.select(table, order="name.asc")
    except AdapterError as e:
        echo(f"could not list {table}: {e}", err=True)
        report.list_error = str(e)
    return report
