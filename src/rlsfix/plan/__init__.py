"""Plan layer: split, classify and sequence statements; lint the result."""

from __future__ import annotations

from rlsfix.plan._types import Phase, Statement, StatementKind
from rlsfix.plan.classify import classify
from rlsfix.plan.split import DEFAULT_DIALECT


def sequence(texts: list[str], *, dialect: str = DEFAULT_DIALECT) -> list[Statement]:
    """Turn statement texts into an execution plan.

    The plan has the same length and order as ``texts``. Nothing is
    reordered, deduplicated or inferred; a safe order (disable → drop →
    create → enable) is the caller's responsibility.
    """
    return [classify(text, dialect=dialect) for text in texts]


__all__ = ["Phase", "Statement", "StatementKind", "classify", "sequence"]
