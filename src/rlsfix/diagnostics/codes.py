"""Stable, searchable error code registry.

Ranges:
- R0001  General (unreadable SQL)
- R01xx  Startup (credentials, connection, bootstrap)
- R02xx  Plan lint
- R03xx  Statement execution
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagnosticCode:
    value: int

    def __str__(self) -> str:
        return f"R{self.value:04d}"


# General
UNREADABLE_SQL = DiagnosticCode(1)

# Startup (R01xx)
MISSING_CREDENTIAL = DiagnosticCode(101)
CONNECTION_FAILED = DiagnosticCode(102)
BOOTSTRAP_FAILED = DiagnosticCode(103)
ATOMIC_UNSUPPORTED = DiagnosticCode(104)

# Plan lint (R02xx)
CREATE_BEFORE_DROP = DiagnosticCode(201)
PROTECTION_NOT_RESTORED = DiagnosticCode(202)
DROP_WITHOUT_IF_EXISTS = DiagnosticCode(203)
DUPLICATE_RULE = DiagnosticCode(204)

# Statement execution (R03xx)
STATEMENT_REJECTED = DiagnosticCode(301)
RULE_ALREADY_ABSENT = DiagnosticCode(302)
ROLLED_BACK = DiagnosticCode(303)
INCOMPLETE_RULE_SET = DiagnosticCode(304)
