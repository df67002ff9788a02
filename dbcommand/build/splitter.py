"""Split multi-statement SQL text into executable statements."""
from __future__ import annotations

from dbcommand.build.scanner import Token, TokenKind, tokenize


def split(sql: str) -> list[str]:
    """Split ``sql`` at top-level semicolons.

    Semicolons inside string literals, quoted identifiers and comments do
    not split.  Each statement is stripped of surrounding whitespace and
    returned without its terminator; segments holding only whitespace and
    comments are dropped.

    Example::

        >>> split("INSERT INTO t VALUES ('a;b'); SELECT 1; -- done")
        ["INSERT INTO t VALUES ('a;b')", 'SELECT 1']
    """
    statements: list[str] = []
    current: list[Token] = []
    for token in tokenize(sql):
        if token.kind is TokenKind.TERMINATOR:
            _flush(current, statements)
        else:
            current.append(token)
    _flush(current, statements)
    return statements


def _flush(current: list[Token], statements: list[str]) -> None:
    if any(_is_executable(token) for token in current):
        statements.append("".join(token.text for token in current).strip())
    current.clear()


def _is_executable(token: Token) -> bool:
    if token.kind is TokenKind.COMMENT:
        return False
    if token.kind is TokenKind.CODE:
        return bool(token.text.strip())
    return True
