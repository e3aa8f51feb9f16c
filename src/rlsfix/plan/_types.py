"""Internal types for the plan layer."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class StatementKind(enum.Enum):
    DISABLE_PROTECTION = "disable_protection"  # ALTER TABLE ... DISABLE ROW LEVEL SECURITY
    DROP_RULE = "drop_rule"                    # DROP POLICY ...
    CREATE_RULE = "create_rule"                # CREATE POLICY ...
    ENABLE_PROTECTION = "enable_protection"    # ALTER TABLE ... ENABLE ROW LEVEL SECURITY
    OTHER = "other"


class Phase(enum.Enum):
    DISABLING = "disabling"
    DROPPING = "dropping"
    CREATING = "creating"
    ENABLING = "enabling"
    EXECUTING = "executing"
    DONE = "done"


_PHASE_BY_KIND = {
    StatementKind.DISABLE_PROTECTION: Phase.DISABLING,
    StatementKind.DROP_RULE: Phase.DROPPING,
    StatementKind.CREATE_RULE: Phase.CREATING,
    StatementKind.ENABLE_PROTECTION: Phase.ENABLING,
    StatementKind.OTHER: Phase.EXECUTING,
}


@dataclass(frozen=True)
class Statement:
    """One unit of remote mutation. ``text`` is sent exactly as written."""

    text: str
    kind: StatementKind = StatementKind.OTHER
    table: str | None = None
    rule: str | None = None
    if_exists: bool = False
    readable: bool = True

    @property
    def phase(self) -> Phase:
        return _PHASE_BY_KIND[self.kind]

    def short(self, width: int = 72) -> str:
        text = " ".join(self.text.split())
        if len(text) <= width:
            return text
        return text[: width - 3] + "..."
