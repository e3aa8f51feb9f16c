"""Split SQL scripts into statements on top-level semicolons."""

from __future__ import annotations

from sqlglot.dialects.dialect import Dialect
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

DEFAULT_DIALECT = "postgres"


class ScriptError(ValueError):
    """Raised when a script cannot be tokenized (unterminated quote, etc.)."""


def tokenize(sql: str, *, dialect: str = DEFAULT_DIALECT) -> list[Token]:
    try:
        return Dialect.get_or_raise(dialect).tokenize(sql)
    except TokenError as e:
        raise ScriptError(f"cannot tokenize SQL: {e}") from e


def split_script(sql: str, *, dialect: str = DEFAULT_DIALECT) -> list[str]:
    """Return the statements of ``sql`` in order, each with its semicolon.

    Splitting is token-based, so semicolons inside string literals, quoted
    identifiers, comments and dollar-quoted bodies are left alone.
    Fragments that hold nothing but comments are dropped.
    """
    statements: list[str] = []
    start: int | None = None
    last_end = 0

    for token in tokenize(sql, dialect=dialect):
        if token.token_type == TokenType.SEMICOLON:
            if start is not None:
                statements.append(sql[start : token.end + 1].strip())
            start = None
            continue
        if start is None:
            start = token.start
        last_end = token.end

    if start is not None:
        statements.append(sql[start : last_end + 1].strip())

    return statements
