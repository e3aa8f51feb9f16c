"""Lazy adapter loading: imports driver modules only when needed."""

from __future__ import annotations

import importlib

from rlsfix.adapters._base import AdapterError, AdapterType, StatementAdapter

_ADAPTER_MAP: dict[AdapterType, tuple[str, str]] = {
    AdapterType.SUPABASE: ("rlsfix.adapters.supabase", "SupabaseAdapter"),
    AdapterType.POSTGRES: ("rlsfix.adapters.postgres", "PostgresAdapter"),
}

# Adapters whose driver is an optional extra.
_EXTRAS: dict[AdapterType, str] = {
    AdapterType.POSTGRES: "postgres",
}


def get_adapter(adapter_type: AdapterType) -> type[StatementAdapter]:
    """Lazy-load an adapter class by type.

    Raises AdapterError with install hint if the driver package is missing.
    """
    entry = _ADAPTER_MAP.get(adapter_type)
    if entry is None:
        raise AdapterError(f"No adapter registered for {adapter_type.value}")

    module_path, class_name = entry
    try:
        mod = importlib.import_module(module_path)
    except ImportError as e:
        extra = _EXTRAS.get(adapter_type)
        package = f"'rlsfix[{extra}]'" if extra else "rlsfix"
        raise AdapterError(
            f"Missing driver for {adapter_type.value}. "
            f"Install with: pip install {package}"
        ) from e

    return getattr(mod, class_name)
