"""Statement adapters: implementations of the StatementAdapter protocol."""

from rlsfix.adapters._base import (
    AdapterError,
    AdapterType,
    BootstrapError,
    ConnectionConfig,
    StatementAdapter,
    StatementFailed,
)

__all__ = [
    "AdapterError",
    "AdapterType",
    "BootstrapError",
    "ConnectionConfig",
    "StatementAdapter",
    "StatementFailed",
]
