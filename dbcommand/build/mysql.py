"""MySQL dialect builder."""
from __future__ import annotations

from dbcommand.build.base import CommandBuilder


class MySQLCommandBuilder(CommandBuilder):
    """Builds MySQL-flavoured SQL.

    MySQL has no conflict target clause: ``ON DUPLICATE KEY UPDATE`` fires
    for any unique key.  The proposed row is referenced as
    ``VALUES(col)``; "do nothing" assigns the first key column to itself.

    Identifiers are quoted with backticks (`` ` ``) rather than double-quotes.
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def excluded_column(self, column: str) -> str:
        return f"VALUES({self.quoter.quote_simple_column_name(column)})"

    def build_upsert_update(
        self,
        table: str,
        insert_sql: str,
        conflict: list[str],
        assignments: list[tuple[str, str]],
    ) -> str:
        sets = ", ".join(f"{self.quoter.quote_column_name(c)} = {v}" for c, v in assignments)
        return f"{insert_sql} ON DUPLICATE KEY UPDATE {sets}"

    def build_upsert_do_nothing(self, table: str, insert_sql: str, conflict: list[str]) -> str:
        key = self.quoter.quote_simple_column_name(conflict[0])
        return (
            f"{insert_sql} ON DUPLICATE KEY UPDATE "
            f"{key} = {self.quoter.quote_table_name(table)}.{key}"
        )
