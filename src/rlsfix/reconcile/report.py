"""Per-statement results and the aggregated batch report."""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field

from rlsfix.diagnostics import Diagnostic, codes, level_counts
from rlsfix.diagnostics.render import diagnostic_to_dict
from rlsfix.plan import Phase, Statement, StatementKind


class Outcome(enum.Enum):
    SUCCESS = "success"
    BENIGN_NOOP = "benign_noop"  # e.g. dropping a rule that was already gone
    WARNING = "warning"          # rejected by the remote store, run continued
    ROLLED_BACK = "rolled_back"  # atomic runs only
    SKIPPED = "skipped"          # atomic runs only, after the failing statement


@dataclass
class ExecutionResult:
    statement: Statement
    outcome: Outcome
    message: str | None = None
    code: str | None = None
    duration_ms: float | None = None
    diagnostic: Diagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.SUCCESS, Outcome.BENIGN_NOOP)

    def to_dict(self) -> dict[str, object]:
        return {
            "statement": self.statement.text,
            "kind": self.statement.kind.value,
            "phase": self.statement.phase.value,
            "outcome": self.outcome.value,
            "message": self.message,
            "code": self.code,
            "duration_ms": self.duration_ms,
        }


@dataclass
class BatchReport:
    label: str
    target: str
    results: list[ExecutionResult] = field(default_factory=list)
    phases: list[Phase] = field(default_factory=list)
    fatal: Diagnostic | None = None
    provisioned: bool = False
    atomic: bool = False

    @property
    def done(self) -> bool:
        return bool(self.phases) and self.phases[-1] == Phase.DONE

    @property
    def deciding_result(self) -> ExecutionResult | None:
        """The final ENABLE_PROTECTION result, or the final result if there is none."""
        for result in reversed(self.results):
            if result.statement.kind == StatementKind.ENABLE_PROTECTION:
                return result
        return self.results[-1] if self.results else None

    @property
    def succeeded(self) -> bool:
        if self.fatal is not None or not self.done:
            return False
        deciding = self.deciding_result
        return deciding is None or deciding.ok

    def counts(self) -> dict[str, int]:
        counter = Counter(r.outcome.value for r in self.results)
        return {o.value: counter.get(o.value, 0) for o in Outcome}

    def gaps(self) -> list[Diagnostic]:
        """Known half-migrated states the run left behind, per table."""
        diagnostics: list[Diagnostic] = []
        tables = dict.fromkeys(r.statement.table for r in self.results if r.statement.table)

        for table in tables:
            mine = [r for r in self.results if r.statement.table == table]
            failed_creates = [
                r for r in mine
                if r.statement.kind == StatementKind.CREATE_RULE and r.outcome == Outcome.WARNING
            ]
            enables = [r for r in mine if r.statement.kind == StatementKind.ENABLE_PROTECTION]
            disables = [r for r in mine if r.statement.kind == StatementKind.DISABLE_PROTECTION]

            if failed_creates and enables and enables[-1].ok:
                names = ", ".join(f'"{r.statement.rule}"' for r in failed_creates)
                diagnostics.append(
                    Diagnostic.warning(
                        codes.INCOMPLETE_RULE_SET,
                        f"{table} has row level security enabled but "
                        f"{len(failed_creates)} replacement rule(s) were not created: {names}",
                    )
                    .at(table)
                    .note("rows those rules would grant are inaccessible until they exist")
                    .suggest("fix the failing CREATE POLICY statements and run again")
                )
            if disables and disables[-1].ok and enables and not enables[-1].ok:
                diagnostics.append(
                    Diagnostic.warning(
                        codes.PROTECTION_NOT_RESTORED,
                        f"{table} was left with row level security disabled",
                    )
                    .at(table)
                    .note("every role can read and write the table until it is re-enabled")
                )
        return diagnostics

    def diagnostics(self) -> list[Diagnostic]:
        found = [r.diagnostic for r in self.results if r.diagnostic is not None]
        found.extend(self.gaps())
        if self.fatal is not None:
            found.append(self.fatal)
        return found

    def to_dict(self) -> dict[str, object]:
        deciding = self.deciding_result
        diagnostics = self.diagnostics()
        return {
            "descriptor": self.label,
            "target": self.target,
            "atomic": self.atomic,
            "provisioned": self.provisioned,
            "succeeded": self.succeeded,
            "phases": [p.value for p in self.phases],
            "counts": self.counts(),
            "decided_by": deciding.statement.text if deciding else None,
            "results": [r.to_dict() for r in self.results],
            "diagnostic_counts": level_counts(diagnostics),
            "diagnostics": [diagnostic_to_dict(d) for d in diagnostics],
        }
