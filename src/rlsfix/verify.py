"""Backend health check: generic-execute function and required tables."""

from __future__ import annotations

from dataclasses import dataclass, field

from rlsfix.adapters._base import AdapterError
from rlsfix.adapters.supabase import SupabaseAdapter

REQUIRED_TABLES = (
    "users",
    "departments",
    "time_off_requests",
    "room_bookings",
    "public_holidays",
)

# PGRST205: table not in schema cache. 42P01: undefined_table.
_MISSING_TABLE_CODES = frozenset({"PGRST205", "42P01"})


@dataclass
class CheckReport:
    exec_function: bool = False
    tables: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def missing_tables(self) -> list[str]:
        return [name for name, present in self.tables.items() if not present]

    @property
    def ok(self) -> bool:
        return self.exec_function and not self.missing_tables

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "exec_function": self.exec_function,
            "tables": self.tables,
            "errors": self.errors,
        }


async def check_backend(
    adapter: SupabaseAdapter, *, tables: tuple[str, ...] = REQUIRED_TABLES
) -> CheckReport:
    """Probe the backend without changing anything."""
    report = CheckReport()

    try:
        await adapter.execute("SELECT 1")
        report.exec_function = True
    except AdapterError as e:
        report.errors["exec_function"] = str(e)

    for table in tables:
        try:
            await adapter.select(table, columns="*", limit=1)
            report.tables[table] = True
        except AdapterError as e:
            report.tables[table] = False
            if e.code not in _MISSING_TABLE_CODES:
                report.errors[table] = str(e)

    return report
