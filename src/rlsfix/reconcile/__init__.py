"""Reconciliation engine: remote executor, driver, and batch report."""

from rlsfix.reconcile.driver import ReconciliationDriver
from rlsfix.reconcile.executor import RemoteExecutor, classify_failure
from rlsfix.reconcile.report import BatchReport, ExecutionResult, Outcome

__all__ = [
    "BatchReport",
    "ExecutionResult",
    "Outcome",
    "ReconciliationDriver",
    "RemoteExecutor",
    "classify_failure",
]
