"""Remote executor: one statement in, one ExecutionResult out, never raises on rejection."""

from __future__ import annotations

from collections.abc import Callable

import click

from rlsfix.adapters._base import AdapterError, StatementAdapter
from rlsfix.diagnostics import Diagnostic, codes
from rlsfix.plan import Statement, StatementKind
from rlsfix.reconcile.report import ExecutionResult, Outcome

# SQLSTATE 42704 = undefined_object (DROP POLICY on a missing policy).
_UNDEFINED_OBJECT = "42704"

Echo = Callable[..., None]


def classify_failure(
    statement: Statement, error: AdapterError, *, allow_noop: bool = True
) -> ExecutionResult:
    """Turn a rejection into a result.

    A drop of a rule that is not there is a benign no-op; everything
    else is a surfaced warning.
    """
    message = str(error)
    # The message is only trusted when the backend sent no SQLSTATE.
    absent = error.code == _UNDEFINED_OBJECT or (
        error.code is None and "does not exist" in message
    )
    if allow_noop and statement.kind == StatementKind.DROP_RULE and absent:
        return ExecutionResult(
            statement=statement,
            outcome=Outcome.BENIGN_NOOP,
            message=message,
            code=error.code,
            diagnostic=Diagnostic.info(
                codes.RULE_ALREADY_ABSENT,
                f"rule \"{statement.rule}\" was already absent",
            ),
        )

    diag = Diagnostic.warning(
        codes.STATEMENT_REJECTED, f"statement rejected: {message}"
    ).at(statement.table or statement.short(40))
    diag.note(f"statement: {statement.text}")
    if error.code:
        diag.note(f"code: {error.code}")
    return ExecutionResult(
        statement=statement,
        outcome=Outcome.WARNING,
        message=message,
        code=error.code,
        diagnostic=diag,
    )


class RemoteExecutor:
    """Dispatch statements through an adapter, one at a time.

    No retry, no backoff, no existence check before sending; statements are
    expected to be idempotent on their own (IF EXISTS, OR REPLACE).
    """

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
        self._on_result = on_result

    async def execute(self, statement: Statement) -> ExecutionResult:
        self._echo(f"executing: {statement.text}")
        try:
            duration_ms = await self._adapter.execute(statement.text, labels=self._labels)
        except AdapterError as e:
            result = classify_failure(statement, e)
        else:
            result = ExecutionResult(
                statement=statement, outcome=Outcome.SUCCESS, duration_ms=duration_ms,
            )
        self.emit(result)
        return result

    def emit(self, result: ExecutionResult) -> None:
        """Print the outcome line(s) and hand the result to the run log."""
        short = result.statement.short()
        if result.outcome == Outcome.SUCCESS:
            duration = (
                f" ({result.duration_ms:.0f}ms)" if result.duration_ms is not None else ""
            )
            self._echo(f"  ok{duration}")
        elif result.outcome == Outcome.BENIGN_NOOP:
            self._echo(f"  no-op: {result.diagnostic.message if result.diagnostic else short}")
        elif result.outcome == Outcome.WARNING:
            self._echo(f"  failed: {result.message}", err=True)
            # Full text so the operator can replay it by hand.
            self._echo(f"  statement: {result.statement.text}", err=True)
        elif result.outcome == Outcome.ROLLED_BACK:
            self._echo(f"  rolled back: {short}")
        else:
            self._echo(f"  skipped: {short}")

        if self._on_result is not None:
            self._on_result(result)
