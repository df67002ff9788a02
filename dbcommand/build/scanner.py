"""Finite-state SQL scanner.

The scanner splits SQL text into a lossless sequence of :class:`Token`
objects: plain code, single-quoted string literals, quoted identifiers,
comments and statement terminators.  Concatenating the token texts always
reproduces the input exactly.

Three consumers share it:

* :func:`dbcommand.build.splitter.split` cuts statements at ``TERMINATOR``
  tokens only,
* :meth:`dbcommand.build.quoter.Quoter.expand_shorthand` rewrites
  ``{{table}}`` / ``[[column]]`` in ``CODE`` tokens only,
* :func:`find_placeholders` / :func:`replace_placeholders` look for
  ``:name`` and ``?`` markers in ``CODE`` tokens only.

so semicolons, shorthand and placeholder-like text inside literals and
comments is never touched.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    CODE = "code"
    STRING = "string"
    IDENTIFIER = "identifier"
    COMMENT = "comment"
    TERMINATOR = "terminator"


class _State(Enum):
    CODE = "code"
    SINGLE_QUOTE = "single_quote"
    DOUBLE_QUOTE = "double_quote"
    BACKTICK = "backtick"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"


_OPENERS: dict[str, _State] = {
    "'": _State.SINGLE_QUOTE,
    '"': _State.DOUBLE_QUOTE,
    "`": _State.BACKTICK,
}

_CLOSERS: dict[_State, str] = {
    _State.SINGLE_QUOTE: "'",
    _State.DOUBLE_QUOTE: '"',
    _State.BACKTICK: "`",
}

_TOKEN_KIND: dict[_State, TokenKind] = {
    _State.CODE: TokenKind.CODE,
    _State.SINGLE_QUOTE: TokenKind.STRING,
    _State.DOUBLE_QUOTE: TokenKind.IDENTIFIER,
    _State.BACKTICK: TokenKind.IDENTIFIER,
    _State.LINE_COMMENT: TokenKind.COMMENT,
    _State.BLOCK_COMMENT: TokenKind.COMMENT,
}


@dataclass(frozen=True)
class Token:
    """A contiguous run of SQL text in a single scanner state."""

    kind: TokenKind
    text: str


@dataclass(frozen=True)
class Placeholder:
    """A parameter marker found in SQL text.

    Attributes:
        start: Offset of the marker in the scanned text.
        end: Offset just past the marker.
        name: Parameter name without ``:``, or ``None`` for ``?``.
    """

    start: int
    end: int
    name: str | None

    @property
    def is_positional(self) -> bool:
        return self.name is None


def tokenize(sql: str) -> list[Token]:
    """Scan ``sql`` left to right and return its tokens.

    An unterminated literal or comment runs to the end of the input and is
    returned with the kind of the state it was opened in.
    """
    tokens: list[Token] = []
    buf: list[str] = []
    state = _State.CODE
    i = 0
    n = len(sql)

    def flush(kind: TokenKind) -> None:
        if buf:
            tokens.append(Token(kind, "".join(buf)))
            buf.clear()

    while i < n:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < n else ""

        if state is _State.CODE:
            if ch == ";":
                flush(TokenKind.CODE)
                tokens.append(Token(TokenKind.TERMINATOR, ch))
                i += 1
            elif ch in _OPENERS:
                flush(TokenKind.CODE)
                state = _OPENERS[ch]
                buf.append(ch)
                i += 1
            elif ch == "-" and nxt == "-":
                flush(TokenKind.CODE)
                state = _State.LINE_COMMENT
                buf.append("--")
                i += 2
            elif ch == "/" and nxt == "*":
                flush(TokenKind.CODE)
                state = _State.BLOCK_COMMENT
                buf.append("/*")
                i += 2
            else:
                buf.append(ch)
                i += 1

        elif state in _CLOSERS:
            closing = _CLOSERS[state]
            buf.append(ch)
            i += 1
            if ch == closing:
                if nxt == closing:
                    # Doubled quote is an escaped quote character.
                    buf.append(nxt)
                    i += 1
                else:
                    flush(_TOKEN_KIND[state])
                    state = _State.CODE

        elif state is _State.LINE_COMMENT:
            buf.append(ch)
            i += 1
            if ch == "\n":
                flush(TokenKind.COMMENT)
                state = _State.CODE

        else:  # block comment
            if ch == "*" and nxt == "/":
                buf.append("*/")
                i += 2
                flush(TokenKind.COMMENT)
                state = _State.CODE
            else:
                buf.append(ch)
                i += 1

    flush(_TOKEN_KIND[state])
    return tokens


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _scan_code(text: str) -> Iterator[Placeholder]:
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == ":":
            if i + 1 < n and text[i + 1] == ":":
                # PostgreSQL ``::type`` cast
                i += 2
                continue
            j = i + 1
            while j < n and _is_name_char(text[j]):
                j += 1
            if j > i + 1:
                yield Placeholder(i, j, text[i + 1 : j])
                i = j
                continue
        elif ch == "?":
            yield Placeholder(i, i + 1, None)
        i += 1


def find_placeholders(sql: str) -> list[Placeholder]:
    """Return every ``:name`` and ``?`` marker outside literals and comments."""
    found: list[Placeholder] = []
    offset = 0
    for token in tokenize(sql):
        if token.kind is TokenKind.CODE:
            found.extend(
                Placeholder(offset + p.start, offset + p.end, p.name)
                for p in _scan_code(token.text)
            )
        offset += len(token.text)
    return found


def replace_placeholders(sql: str, replace: Callable[[Placeholder, int], str]) -> str:
    """Rebuild ``sql`` with each placeholder replaced by ``replace(p, index)``.

    ``index`` counts positional ``?`` markers only, starting from 0.
    """
    parts: list[str] = []
    cursor = 0
    position = 0
    for placeholder in find_placeholders(sql):
        parts.append(sql[cursor : placeholder.start])
        parts.append(replace(placeholder, position))
        if placeholder.is_positional:
            position += 1
        cursor = placeholder.end
    parts.append(sql[cursor:])
    return "".join(parts)
