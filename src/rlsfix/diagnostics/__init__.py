"""Diagnostic system: types, codes, rendering."""

from rlsfix.diagnostics import codes
from rlsfix.diagnostics.codes import DiagnosticCode
from rlsfix.diagnostics.types import Diagnostic, Level, level_counts, max_level

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Level",
    "codes",
    "level_counts",
    "max_level",
]
