"""Render diagnostics for the terminal transcript and for JSON reports."""

from __future__ import annotations

from rlsfix.diagnostics.types import Diagnostic


def render_text(diagnostics: list[Diagnostic]) -> str:
    lines: list[str] = []
    for d in diagnostics:
        lines.append(f"{d.level.name.lower()}[{d.code}]: {d.message}")
        if d.location:
            lines.append(f"  --> {d.location}")
        lines.extend(f"  = note: {note}" for note in d.notes)
        lines.extend(f"  = help: {text}" for text in d.help)
    return "\n".join(lines)


def diagnostic_to_dict(d: Diagnostic) -> dict:
    data: dict = {
        "level": d.level.name.lower(),
        "code": str(d.code),
        "message": d.message,
        "notes": d.notes,
        "help": d.help,
    }
    if d.location is not None:
        data["location"] = d.location
    return data
