"""Test script splitting on top-level semicolons."""

from __future__ import annotations

import pytest

from rlsfix.plan.split import ScriptError, split_script


def test_splits_in_order_and_keeps_semicolons():
    sql = """
    ALTER TABLE public.users DISABLE ROW LEVEL SECURITY;
    DROP POLICY IF EXISTS "a" ON public.users;
    ALTER TABLE public.users ENABLE ROW LEVEL SECURITY;
    """
    assert split_script(sql) == [
        "ALTER TABLE public.users DISABLE ROW LEVEL SECURITY;",
        'DROP POLICY IF EXISTS "a" ON public.users;',
        "ALTER TABLE public.users ENABLE ROW LEVEL SECURITY;",
    ]


def test_semicolon_inside_string_and_identifier():
    sql = "SELECT 'a;b'; DROP POLICY \"x;y\" ON t;"
    assert split_script(sql) == ["SELECT 'a;b';", 'DROP POLICY "x;y" ON t;']


def test_dollar_quoted_body_is_one_statement():
    sql = (
        "CREATE OR REPLACE FUNCTION f() RETURNS void LANGUAGE plpgsql AS $$\n"
        "BEGIN\n  PERFORM 1;\nEND;\n$$;\n"
        "SELECT 2;"
    )
    statements = split_script(sql)
    assert len(statements) == 2
    assert statements[0].startswith("CREATE OR REPLACE FUNCTION")
    assert statements[0].endswith("$$;")
    assert statements[1] == "SELECT 2;"


def test_trailing_statement_without_semicolon():
    assert split_script("SELECT 1; SELECT 2") == ["SELECT 1;", "SELECT 2"]


def test_comment_only_fragments_dropped():
    sql = "-- header\nSELECT 1;\n-- just a comment\n;\n/* block */"
    assert split_script(sql) == ["SELECT 1;"]


def test_empty_script():
    assert split_script("") == []
    assert split_script(" ;; ") == []


def test_unterminated_quote_raises():
    with pytest.raises(ScriptError, match="cannot tokenize"):
        split_script("SELECT 'oops;")
