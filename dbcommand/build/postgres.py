"""PostgreSQL dialect builder."""
from __future__ import annotations

from dbcommand.build.base import CommandBuilder


class PostgresCommandBuilder(CommandBuilder):
    """Builds PostgreSQL-flavoured SQL.

    Identifiers are quoted with double quotes.  Upserts use
    ``ON CONFLICT (...) DO UPDATE SET col = EXCLUDED.col``; the driver
    receives ``%(name)s`` placeholders (``psycopg``).
    """

    @property
    def dialect_name(self) -> str:
        return "postgres"

    def excluded_column(self, column: str) -> str:
        return f"EXCLUDED.{self.quoter.quote_simple_column_name(column)}"

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
        target = ", ".join(self.quoter.quote_column_name(c) for c in conflict)
        return f"{insert_sql} ON CONFLICT ({target}) DO NOTHING"
