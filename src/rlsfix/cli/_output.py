"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json

from rlsfix.diagnostics import Diagnostic, Level, level_counts, max_level
from rlsfix.diagnostics.render import diagnostic_to_dict, render_text
from rlsfix.plan import Statement
from rlsfix.plan.descriptor import MigrationDescriptor
from rlsfix.reconcile import BatchReport


def render_plan(
    descriptor: MigrationDescriptor,
    statements: list[Statement],
    diagnostics: list[Diagnostic],
    *,
    output_format: str = "text",
) -> str:
    if output_format == "json":
        return json.dumps(
            {
                "descriptor": descriptor.label,
                "description": descriptor.description,
                "statements": [
                    {
                        "index": i + 1,
                        "phase": s.phase.value,
                        "kind": s.kind.value,
                        "table": s.table,
                        "rule": s.rule,
                        "statement": s.text,
                    }
                    for i, s in enumerate(statements)
                ],
                "diagnostic_counts": level_counts(diagnostics),
                "diagnostics": [diagnostic_to_dict(d) for d in diagnostics],
            },
            indent=2,
        )

    lines = [f"plan: {descriptor.label} ({len(statements)} statements)"]
    if descriptor.description:
        lines.append(f"  {descriptor.description}")
    width = len(str(len(statements)))
    for i, s in enumerate(statements):
        lines.append(f"{i + 1:>{width}}. [{s.phase.value}] {s.text}")
    if diagnostics:
        lines.append("")
        lines.append(render_text(diagnostics))
    level = max_level(diagnostics)
    if level is not None and level >= Level.WARNING:
        lines.append("")
        lines.append("the plan has warnings; review it before running")
    return "\n".join(lines)


def render_report(report: BatchReport, *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(report.to_dict(), indent=2, default=str)

    counts = report.counts()
    lines = [
        "",
        f"summary: {counts['success']} succeeded, {counts['benign_noop']} no-op, "
        f"{counts['warning']} failed"
        + (
            f", {counts['rolled_back']} rolled back, {counts['skipped']} skipped"
            if report.atomic
            else ""
        ),
    ]

    # Per-statement warnings were already printed as they happened.
    trailing = report.gaps()
    if report.fatal is not None:
        trailing.append(report.fatal)
    if trailing:
        lines.append(render_text(trailing))

    deciding = report.deciding_result
    verdict = "succeeded" if report.succeeded else "failed"
    if deciding is not None and report.fatal is None:
        lines.append(f"result: {verdict} (decided by: {deciding.statement.short()})")
    else:
        lines.append(f"result: {verdict}")
    return "\n".join(lines)
