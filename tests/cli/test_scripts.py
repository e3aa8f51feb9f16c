"""Tests for the flag-less maintenance entry points."""

from __future__ import annotations

from unittest.mock import patch

from click.testing import CliRunner

from rlsfix.cli.scripts import fix_users_policies, seed_departments


def test_fix_users_policies_reads_dotenv(isolated, fake_store):
    (isolated / ".env").write_text(
        "VITE_SUPABASE_URL=https://demo.supabase.co\nSUPABASE_SERVICE_ROLE_KEY=key\n"
    )
    store = fake_store({"public.users": {"Admins have full access"}})
    with patch("rlsfix.cli._shared.get_adapter") as get_adapter:
        get_adapter.return_value = lambda: store
        result = CliRunner().invoke(fix_users_policies, [])

    assert result.exit_code == 0, result.output
    assert "Admins have full access" not in store.rules()
    assert "result: succeeded" in result.stdout


def test_fix_users_policies_without_credentials():
    with patch("rlsfix.cli._shared.get_adapter") as get_adapter:
        result = CliRunner().invoke(fix_users_policies, [])
    assert result.exit_code == 1
    assert "SUPABASE_URL" in result.stderr
    get_adapter.assert_not_called()


def test_fix_users_policies_takes_no_flags():
    result = CliRunner().invoke(fix_users_policies, ["--atomic"])
    assert result.exit_code == 2


def test_seed_departments_without_credentials():
    result = CliRunner().invoke(seed_departments, [])
    assert result.exit_code == 1
    assert "SUPABASE_URL" in result.stderr
