"""Classify statements by what they do to a table's policy set."""

from __future__ import annotations

from sqlglot.tokens import Token, TokenType

from rlsfix.plan._types import Statement, StatementKind
from rlsfix.plan.split import DEFAULT_DIALECT, ScriptError, tokenize

_QUOTED = (TokenType.IDENTIFIER, TokenType.STRING)
_NOT_A_NAME = (TokenType.SEMICOLON, TokenType.DOT, TokenType.L_PAREN, TokenType.R_PAREN)


class _Reader:
    """Forward-only cursor over the words of a token list.

    Multi-word keyword tokens are split into their words, so matching does
    not depend on which phrases the tokenizer happens to merge.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._items: list[tuple[str | None, Token]] = []
        for token in tokens:
            if token.token_type in _QUOTED:
                self._items.append((None, token))
            else:
                self._items.extend((w.upper(), token) for w in token.text.split())
        self._i = 0

    def _word(self, offset: int) -> str | None:
        idx = self._i + offset
        if idx >= len(self._items):
            return None
        return self._items[idx][0]

    def _token(self, offset: int = 0) -> Token | None:
        idx = self._i + offset
        if idx >= len(self._items):
            return None
        return self._items[idx][1]

    def accept(self, *words: str) -> bool:
        """Consume ``words`` if the next tokens spell them (case-insensitive)."""
        if all(self._word(n) == w for n, w in enumerate(words)):
            self._i += len(words)
            return True
        return False

    def read_name(self) -> str | None:
        """Consume a possibly schema-qualified name.

        Unquoted parts are folded to lowercase the way Postgres folds them.
        """
        parts: list[str] = []
        while True:
            token = self._token()
            if token is None or token.token_type in _NOT_A_NAME:
                break
            if token.token_type == TokenType.IDENTIFIER:
                parts.append(token.text)
            else:
                parts.append(token.text.lower())
            self._i += 1
            dot = self._token()
            if dot is not None and dot.token_type == TokenType.DOT and self._token(1) is not None:
                self._i += 1
                continue
            break
        return ".".join(parts) if parts else None


def classify(sql: str, *, dialect: str = DEFAULT_DIALECT) -> Statement:
    """Recognise RLS toggles and policy drops/creates.

    Anything else, including SQL the tokenizer rejects, is OTHER. The
    statement text is never modified.
    """
    try:
        tokens = tokenize(sql, dialect=dialect)
    except ScriptError:
        return Statement(text=sql, readable=False)

    r = _Reader(tokens)

    if r.accept("ALTER", "TABLE"):
        r.accept("IF", "EXISTS")
        r.accept("ONLY")
        table = r.read_name()
        if r.accept("DISABLE", "ROW", "LEVEL", "SECURITY"):
            return Statement(text=sql, kind=StatementKind.DISABLE_PROTECTION, table=table)
        if r.accept("ENABLE", "ROW", "LEVEL", "SECURITY"):
            return Statement(text=sql, kind=StatementKind.ENABLE_PROTECTION, table=table)
        return Statement(text=sql, table=table)

    if r.accept("DROP", "POLICY"):
        if_exists = r.accept("IF", "EXISTS")
        rule = r.read_name()
        table = r.read_name() if r.accept("ON") else None
        return Statement(
            text=sql, kind=StatementKind.DROP_RULE, table=table, rule=rule, if_exists=if_exists,
        )

    if r.accept("CREATE", "POLICY"):
        rule = r.read_name()
        table = r.read_name() if r.accept("ON") else None
        return Statement(text=sql, kind=StatementKind.CREATE_RULE, table=table, rule=rule)

    return Statement(text=sql)
