"""Identifier and literal quoting for a single dialect."""
from __future__ import annotations

import datetime
import decimal
from typing import Any

from dbcommand.build.scanner import TokenKind, tokenize
from dbcommand.errors import ConfigurationError, InvalidArgumentError
from dbcommand.schema.dialect import DialectConfig

_TABLE_OPEN, _TABLE_CLOSE = "{{", "}}"
_COLUMN_OPEN, _COLUMN_CLOSE = "[[", "]]"


def _is_shorthand_name(name: str) -> bool:
    """Names allowed inside ``{{...}}`` / ``[[...]]``."""
    return bool(name.strip()) and all(
        ch.isalnum() or ch in "_-. %" for ch in name
    )


class Quoter:
    """Quotes table names, column names and values for one dialect.

    Args:
        dialect: Immutable dialect configuration with the quote characters.
        table_prefix: Replaces ``%`` in ``{{%name}}`` table shorthand.
    """

    def __init__(self, dialect: DialectConfig, table_prefix: str = "") -> None:
        self._dialect = dialect
        self._table_prefix = table_prefix

    @property
    def dialect(self) -> DialectConfig:
        return self._dialect

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def quote_table_name(self, name: str) -> str:
        """Quote a possibly schema-qualified table name.

        ``{{name}}`` shorthand is unwrapped first.  Names containing ``(``
        are expressions and returned unchanged.
        """
        if name.startswith(_TABLE_OPEN) and name.endswith(_TABLE_CLOSE):
            name = self.apply_table_prefix(name[2:-2])
        if "(" in name:
            return name
        return ".".join(self.quote_simple_table_name(part) for part in self._segments(name))

    def quote_column_name(self, name: str) -> str:
        """Quote a column name, quoting a ``table.`` qualifier as a table."""
        if name.startswith(_COLUMN_OPEN) and name.endswith(_COLUMN_CLOSE):
            name = name[2:-2]
        if "(" in name:
            return name
        if _TABLE_OPEN in name:
            prefix, _, column = name.rpartition(".")
            return f"{self.quote_table_name(prefix)}.{self.quote_simple_column_name(column)}"
        segments = self._segments(name)
        column = segments[-1]
        quoted = self.quote_simple_column_name(column)
        if len(segments) > 1:
            return f"{self.quote_table_name('.'.join(segments[:-1]))}.{quoted}"
        return quoted

    def quote_simple_table_name(self, name: str) -> str:
        """Quote a single table name segment (idempotent)."""
        return self._quote(name, self._dialect.table_quote)

    def quote_simple_column_name(self, name: str) -> str:
        """Quote a single column name segment (idempotent); ``*`` stays bare."""
        if name == "*":
            return name
        return self._quote(name, self._dialect.column_quote)

    def _quote(self, name: str, quotes: tuple[str, str]) -> str:
        start, end = quotes
        if not name:
            raise ConfigurationError("Identifier must not be empty.")
        if "\x00" in name:
            raise ConfigurationError(f"Identifier {name!r} contains a NUL character.")
        if len(name) >= 2 and name.startswith(start) and name.endswith(end):
            return name
        return f"{start}{name.replace(end, end + end)}{end}"

    def _segments(self, name: str) -> list[str]:
        """Split on dots that are not inside already-quoted segments."""
        starts = {self._dialect.table_quote[0], self._dialect.column_quote[0]}
        segments: list[str] = []
        buf: list[str] = []
        closing: str | None = None
        for ch in name:
            if closing is not None:
                buf.append(ch)
                if ch == closing:
                    closing = None
            elif ch in starts and not buf:
                buf.append(ch)
                closing = (
                    self._dialect.table_quote[1]
                    if ch == self._dialect.table_quote[0]
                    else self._dialect.column_quote[1]
                )
            elif ch == ".":
                segments.append("".join(buf))
                buf = []
            else:
                buf.append(ch)
        segments.append("".join(buf))
        return segments

    def apply_table_prefix(self, name: str) -> str:
        return name.replace("%", self._table_prefix)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def quote_value(self, value: Any) -> str:
        """Render ``value`` as an inline SQL literal.

        Only used for diagnostics and deliberately inlined values; bound
        parameters never go through here.
        """
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, (int, float, decimal.Decimal)):
            return str(value)
        if isinstance(value, str):
            return "'" + value.replace("'", "''") + "'"
        if isinstance(value, (bytes, bytearray, memoryview)):
            return f"X'{bytes(value).hex().upper()}'"
        if isinstance(value, datetime.datetime):
            return f"'{value.isoformat(sep=' ')}'"
        if isinstance(value, (datetime.date, datetime.time)):
            return f"'{value.isoformat()}'"
        raise InvalidArgumentError(
            f"Cannot inline value of type '{type(value).__name__}'.",
            details={"type": type(value).__name__},
        )

    # ------------------------------------------------------------------
    # Shorthand
    # ------------------------------------------------------------------

    def expand_shorthand(self, sql: str) -> str:
        """Rewrite ``{{table}}`` and ``[[column]]`` outside literals and comments."""
        return "".join(
            self._expand_code(token.text) if token.kind is TokenKind.CODE else token.text
            for token in tokenize(sql)
        )

    def _expand_code(self, text: str) -> str:
        out: list[str] = []
        i = 0
        n = len(text)
        while i < n:
            if text.startswith(_TABLE_OPEN, i):
                end = text.find(_TABLE_CLOSE, i + 2)
                inner = text[i + 2 : end] if end != -1 else ""
                if end != -1 and _is_shorthand_name(inner):
                    out.append(self.quote_table_name(self.apply_table_prefix(inner.strip())))
                    i = end + 2
                    continue
            elif text.startswith(_COLUMN_OPEN, i):
                end = text.find(_COLUMN_CLOSE, i + 2)
                inner = text[i + 2 : end] if end != -1 else ""
                if end != -1 and _is_shorthand_name(inner) and "%" not in inner:
                    out.append(self.quote_column_name(inner.strip()))
                    i = end + 2
                    continue
            out.append(text[i])
            i += 1
        return "".join(out)
