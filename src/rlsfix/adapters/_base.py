"""Adapter protocol: the boundary between the reconciliation engine and transports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


class AdapterType(enum.Enum):
    SUPABASE = "supabase"
    POSTGRES = "postgres"


@dataclass
class ConnectionConfig:
    name: str
    adapter_type: AdapterType
    params: dict[str, str] = field(default_factory=dict)


class AdapterError(Exception):
    """Raised by adapters for connection/execution failures.

    ``code`` carries the SQLSTATE (or PostgREST error code) when the remote
    side reported one.
    """

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class BootstrapError(AdapterError):
    """The generic-execute function is missing and could not be provisioned.

    ``manual_sql`` is the DDL an operator can run by hand instead.
    """

    def __init__(
        self, message: str, *, code: str | None = None, manual_sql: str | None = None
    ) -> None:
        super().__init__(message, code=code)
        self.manual_sql = manual_sql


class StatementFailed(AdapterError):
    """A statement inside an atomic batch failed; the batch was rolled back."""

    def __init__(self, message: str, *, index: int, code: str | None = None) -> None:
        super().__init__(message, code=code)
        self.index = index


@runtime_checkable
class StatementAdapter(Protocol):
    async def connect(self, config: ConnectionConfig) -> None: ...
    async def close(self) -> None: ...
    async def ensure_exec_function(self) -> bool:
        """Make sure arbitrary statements can be dispatched.

        Returns True when the function had to be provisioned. Raises
        BootstrapError when it is missing and cannot be created.
        """
        ...
    async def execute(
        self, sql: str, *, labels: dict[str, str] | None = None
    ) -> float:
        """Execute one statement. Returns duration in milliseconds."""
        ...
    async def execute_atomic(
        self, statements: list[str], *, labels: dict[str, str] | None = None
    ) -> None: ...
    def adapter_type(self) -> AdapterType: ...
    def supports_transactions(self) -> bool: ...
