"""Diagnostic values shared by plan lint and statement execution.

Level doubles as the outcome severity of a statement: INFO is a benign
no-op, WARNING is a rejected statement that was surfaced and skipped over,
ERROR aborts the run.
"""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field

from rlsfix.diagnostics.codes import DiagnosticCode


class Level(enum.IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2


@dataclass
class Diagnostic:
    level: Level
    code: DiagnosticCode
    message: str
    # What the diagnostic is about: "statement 3", "public.users", ...
    location: str | None = None
    notes: list[str] = field(default_factory=list)
    help: list[str] = field(default_factory=list)

    @classmethod
    def error(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message)

    @classmethod
    def warning(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.WARNING, code=code, message=message)

    @classmethod
    def info(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.INFO, code=code, message=message)

    def at(self, location: str) -> Diagnostic:
        self.location = location
        return self

    def note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    def suggest(self, message: str) -> Diagnostic:
        self.help.append(message)
        return self


def max_level(diagnostics: list[Diagnostic]) -> Level | None:
    return max((d.level for d in diagnostics), default=None)


def level_counts(diagnostics: list[Diagnostic]) -> dict[str, int]:
    """Number of diagnostics per level name, every level present."""
    counter = Counter(d.level for d in diagnostics)
    return {level.name.lower(): counter[level] for level in Level}
