"""Advisory checks on a statement sequence. Lint never reorders or drops anything."""

from __future__ import annotations

from rlsfix.diagnostics import Diagnostic, codes
from rlsfix.plan._types import Statement, StatementKind


def check_unreadable(statements: list[Statement]) -> list[Diagnostic]:
    return [
        Diagnostic.warning(codes.UNREADABLE_SQL, "statement could not be tokenized")
        .at(f"statement {i + 1}")
        .note("it will be sent as written and treated as an ordinary statement")
        for i, s in enumerate(statements)
        if not s.readable
    ]


def check_drop_without_if_exists(statements: list[Statement]) -> list[Diagnostic]:
    """Flag drops that fail (instead of no-op) when the rule is absent."""
    return [
        Diagnostic.info(
            codes.DROP_WITHOUT_IF_EXISTS,
            f"rule \"{s.rule}\" is dropped without IF EXISTS",
        )
        .at(f"statement {i + 1}: {s.short()}")
        .suggest("use DROP POLICY IF EXISTS so a missing rule is a no-op")
        for i, s in enumerate(statements)
        if s.kind == StatementKind.DROP_RULE and not s.if_exists
    ]


def check_rule_order(statements: list[Statement]) -> list[Diagnostic]:
    """Warn on rules dropped after creation, and rules created twice."""
    diagnostics: list[Diagnostic] = []
    created: dict[tuple[str | None, str | None], int] = {}

    for i, s in enumerate(statements):
        key = (s.table, s.rule)
        if s.kind == StatementKind.DROP_RULE and key in created:
            diagnostics.append(
                Diagnostic.warning(
                    codes.CREATE_BEFORE_DROP,
                    f"rule \"{s.rule}\" is dropped by statement {i + 1} after "
                    f"statement {created[key] + 1} creates it",
                ).note("the rule will be missing when the run finishes")
            )
            del created[key]
        elif s.kind == StatementKind.CREATE_RULE:
            if key in created:
                diagnostics.append(
                    Diagnostic.warning(
                        codes.DUPLICATE_RULE,
                        f"rule \"{s.rule}\" is created twice "
                        f"(statements {created[key] + 1} and {i + 1})",
                    ).note("the second create will be rejected as a duplicate")
                )
            created[key] = i
    return diagnostics


def check_protection_restored(statements: list[Statement]) -> list[Diagnostic]:
    """Warn when a table's protection is disabled and never re-enabled."""
    disabled: dict[str | None, int] = {}
    for i, s in enumerate(statements):
        if s.kind == StatementKind.DISABLE_PROTECTION:
            disabled[s.table] = i
        elif s.kind == StatementKind.ENABLE_PROTECTION:
            disabled.pop(s.table, None)

    return [
        Diagnostic.warning(
            codes.PROTECTION_NOT_RESTORED,
            f"row level security on {table or '<unknown table>'} is disabled by "
            f"statement {i + 1} and never re-enabled",
        )
        .at(table or "<unknown table>")
        .note("the table stays readable and writable by every role after the run")
        for table, i in disabled.items()
    ]


def lint(statements: list[Statement]) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for check in [
        check_unreadable,
        check_rule_order,
        check_protection_restored,
        check_drop_without_if_exists,
    ]:
        diagnostics.extend(check(statements))
    return diagnostics
