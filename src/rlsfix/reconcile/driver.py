"""Reconciliation driver: bootstrap, then disable → drop → create → enable → done.

Every statement is attempted once, in order, whatever happened to the
ones before it. There is no rollback outside atomic mode: a failed create
after successful drops leaves the table protected with an incomplete rule
set, and the report says so.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from rlsfix.adapters._base import (
    AdapterError,
    BootstrapError,
    StatementAdapter,
    StatementFailed,
)
from rlsfix.diagnostics import Diagnostic, codes
from rlsfix.plan import Phase, Statement
from rlsfix.reconcile.executor import Echo, RemoteExecutor, classify_failure
from rlsfix.reconcile.report import BatchReport, ExecutionResult, Outcome


class ReconciliationDriver:
    def __init__(
        self,
        adapter: StatementAdapter,
        *,
        echo: Echo = click.echo,
        labels: dict[str, str] | None = None,
        on_result: Callable[[ExecutionResult], None] | None = None,
    ) -> None:
        self._adapter = adapter
        self._echo = echo
        self._labels = labels
        self._executor = RemoteExecutor(adapter, echo=echo, labels=labels, on_result=on_result)

    def _enter(self, report: BatchReport, phase: Phase) -> None:
        if report.phases and report.phases[-1] == phase:
            return
        report.phases.append(phase)
        self._echo(f"phase: {phase.value}")

    async def bootstrap(self, report: BatchReport) -> bool:
        """Make sure statements can be dispatched. Sets ``report.fatal`` on failure."""
        if report.atomic and not self._adapter.supports_transactions():
            report.fatal = Diagnostic.error(
                codes.ATOMIC_UNSUPPORTED,
                f"{self._adapter.adapter_type().value} cannot run statements atomically",
            ).suggest("run with --target postgres, or without --atomic")
            return False

        try:
            report.provisioned = await self._adapter.ensure_exec_function()
        except BootstrapError as e:
            diag = Diagnostic.error(codes.BOOTSTRAP_FAILED, str(e))
            if e.manual_sql:
                diag.suggest(f"create it in the SQL editor, then run again:\n{e.manual_sql}")
            report.fatal = diag
            return False
        except AdapterError as e:
            report.fatal = Diagnostic.error(codes.CONNECTION_FAILED, str(e))
            return False

        if report.provisioned:
            self._echo("provisioned the generic-execute function")
        return True

    async def run(
        self,
        statements: list[Statement],
        *,
        label: str = "adhoc",
        target: str = "",
        atomic: bool = False,
    ) -> BatchReport:
        report = BatchReport(label=label, target=target, atomic=atomic)
        self._echo(f"reconciling {label} on {target or 'target'} ({len(statements)} statements)")

        if not await self.bootstrap(report):
            # Abort the whole run, not just a phase.
            return report

        if atomic:
            await self._run_atomic(statements, report)
        else:
            for statement in statements:
                self._enter(report, statement.phase)
                report.results.append(await self._executor.execute(statement))

        self._enter(report, Phase.DONE)
        return report

    async def _run_atomic(self, statements: list[Statement], report: BatchReport) -> None:
        self._enter(report, Phase.EXECUTING)
        self._echo("executing all statements in one transaction")

        try:
            await self._adapter.execute_atomic(
                [s.text for s in statements], labels=self._labels
            )
        except StatementFailed as e:
            for i, statement in enumerate(statements):
                if i < e.index:
                    result = ExecutionResult(
                        statement=statement,
                        outcome=Outcome.ROLLED_BACK,
                        diagnostic=Diagnostic.info(codes.ROLLED_BACK, "rolled back"),
                    )
                elif i == e.index:
                    # Nothing is a no-op once the transaction aborted.
                    result = classify_failure(statement, e, allow_noop=False)
                else:
                    result = ExecutionResult(statement=statement, outcome=Outcome.SKIPPED)
                report.results.append(result)
                self._executor.emit(result)
            return
        except AdapterError as e:
            report.fatal = Diagnostic.error(codes.CONNECTION_FAILED, str(e))
            for statement in statements:
                result = ExecutionResult(statement=statement, outcome=Outcome.SKIPPED)
                report.results.append(result)
                self._executor.emit(result)
            return

        for statement in statements:
            result = ExecutionResult(statement=statement, outcome=Outcome.SUCCESS)
            report.results.append(result)
            self._executor.emit(result)
