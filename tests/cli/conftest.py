"""CLI test fixtures: clean environment, isolated run log."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

_VARIABLES = (
    "SUPABASE_URL",
    "VITE_SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_DB_URL",
    "RLSFIX_EXEC_FUNCTION",
    "RLSFIX_TIMEOUT",
    "RLSFIX_TARGET",
)


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No ambient credentials, no .env discovery, logs under tmp_path."""
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ), patch("rlsfix.runlog._LOG_ROOT", tmp_path / "logs"):
        for name in _VARIABLES:
            os.environ.pop(name, None)
        yield tmp_path


@pytest.fixture
def credentials():
    os.environ["SUPABASE_URL"] = "https://demo.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
