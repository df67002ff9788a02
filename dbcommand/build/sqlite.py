"""SQLite dialect builder."""
from __future__ import annotations

from dbcommand.build.base import CommandBuilder


class SQLiteCommandBuilder(CommandBuilder):
    """Builds SQLite-flavoured SQL.

    Identifiers are quoted with backticks.  Upserts use
    ``ON CONFLICT (...) DO UPDATE SET col = excluded.col`` (SQLite 3.24+).

    Note: a SELECT used as the upsert source is wrapped as
    ``SELECT * FROM (...) WHERE true`` so SQLite does not parse ``ON CONFLICT``
    as a join constraint.
    """

    @property
    def dialect_name(self) -> str:
        return "sqlite"

    def excluded_column(self, column: str) -> str:
        return f"excluded.{self.quoter.quote_simple_column_name(column)}"

    def build_upsert_update(
        self,
        table: str,
        insert_sql: str,
        conflict: list[str],
        assignments: list[tuple[str, str]],
    ) -> str:
        target = ", ".join(self.quoter.quote_column_name(c) for c in conflict)
        sets = ", ".join(f"{self.quoter.quote_column_name(c)} = {v}" for c, v in assignments)
        return f"{insert_sql} ON CONFLICT ({target}) DO UPDATE SET {sets}"

    def build_upsert_do_nothing(self, table: str, insert_sql: str, conflict: list[str]) -> str:
        return f"{insert_sql} ON CONFLICT DO NOTHING"

    def wrap_upsert_select(self, sql: str) -> str:
        return f"SELECT * FROM ({sql}) WHERE true"
