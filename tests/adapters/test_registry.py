"""Test lazy adapter registry."""

from unittest.mock import patch

import pytest

from rlsfix.adapters._base import AdapterError, AdapterType
from rlsfix.adapters._registry import get_adapter


def test_get_supabase_adapter():
    cls = get_adapter(AdapterType.SUPABASE)
    assert cls.__name__ == "SupabaseAdapter"


def test_get_postgres_adapter():
    """Postgres adapter class can be loaded (psycopg may or may not be installed)."""
    try:
        cls = get_adapter(AdapterType.POSTGRES)
        assert cls.__name__ == "PostgresAdapter"
    except AdapterError as e:
        assert "Missing driver" in str(e)
        assert "rlsfix[postgres]" in str(e)


def test_every_adapter_is_registered():
    from rlsfix.adapters._registry import _ADAPTER_MAP

    for adapter_type in AdapterType:
        assert adapter_type in _ADAPTER_MAP


def test_core_adapter_hint_is_plain_install():
    with patch("rlsfix.adapters._registry.importlib.import_module", side_effect=ImportError("httpx")):
        with pytest.raises(AdapterError, match=r"Install with: pip install rlsfix$"):
            get_adapter(AdapterType.SUPABASE)


def test_optional_adapter_hint_names_extra():
    with patch("rlsfix.adapters._registry.importlib.import_module", side_effect=ImportError("psycopg")):
        with pytest.raises(AdapterError, match=r"rlsfix\[postgres\]"):
            get_adapter(AdapterType.POSTGRES)
