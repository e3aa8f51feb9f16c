"""Test advisory plan checks."""

from __future__ import annotations

from rlsfix.diagnostics import Level, codes
from rlsfix.plan import sequence
from rlsfix.plan.lint import (
    check_drop_without_if_exists,
    check_protection_restored,
    check_rule_order,
    lint,
)


def _codes(diags):
    return [d.code for d in diags]


def test_safe_plan_is_clean():
    plan = sequence([
        "ALTER TABLE t DISABLE ROW LEVEL SECURITY;",
        'DROP POLICY IF EXISTS "a" ON t;',
        'CREATE POLICY "a" ON t FOR SELECT USING (true);',
        "ALTER TABLE t ENABLE ROW LEVEL SECURITY;",
    ])
    assert lint(plan) == []


def test_create_before_drop():
    plan = sequence([
        'CREATE POLICY "a" ON t FOR SELECT USING (true);',
        'DROP POLICY IF EXISTS "a" ON t;',
    ])
    diags = check_rule_order(plan)
    assert _codes(diags) == [codes.CREATE_BEFORE_DROP]
    assert diags[0].level == Level.WARNING
    assert "statement 2" in diags[0].message


def test_drop_then_create_same_rule_is_fine():
    plan = sequence([
        'DROP POLICY IF EXISTS "a" ON t;',
        'CREATE POLICY "a" ON t FOR SELECT USING (true);',
    ])
    assert check_rule_order(plan) == []


def test_same_rule_name_on_different_tables_is_fine():
    plan = sequence([
        'CREATE POLICY "a" ON t1 FOR SELECT USING (true);',
        'CREATE POLICY "a" ON t2 FOR SELECT USING (true);',
    ])
    assert check_rule_order(plan) == []


def test_duplicate_create():
    plan = sequence([
        'CREATE POLICY "a" ON t FOR SELECT USING (true);',
        'CREATE POLICY "a" ON t FOR SELECT USING (true);',
    ])
    assert _codes(check_rule_order(plan)) == [codes.DUPLICATE_RULE]


def test_protection_not_restored():
    plan = sequence([
        "ALTER TABLE t DISABLE ROW LEVEL SECURITY;",
        'DROP POLICY IF EXISTS "a" ON t;',
    ])
    diags = check_protection_restored(plan)
    assert _codes(diags) == [codes.PROTECTION_NOT_RESTORED]
    assert "t" in diags[0].message


def test_drop_without_if_exists_is_info():
    plan = sequence(['DROP POLICY "a" ON t;'])
    diags = check_drop_without_if_exists(plan)
    assert _codes(diags) == [codes.DROP_WITHOUT_IF_EXISTS]
    assert diags[0].level == Level.INFO
    assert diags[0].help


def test_unreadable_statement_flagged():
    plan = sequence(["SELECT 'broken"])
    assert _codes(lint(plan)) == [codes.UNREADABLE_SQL]


def test_lint_never_changes_plan():
    texts = [
        'CREATE POLICY "a" ON t FOR SELECT USING (true);',
        'DROP POLICY "a" ON t;',
    ]
    plan = sequence(texts)
    lint(plan)
    assert [s.text for s in plan] == texts
