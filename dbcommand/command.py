"""The Command: build SQL, execute it, expose what was run.

A command holds one SQL text and one :class:`~dbcommand.build.params.ParameterSet`.
Build operations (``insert``, ``batch_insert``, ``upsert``) replace both;
``execute`` and the ``query_*`` methods split the text into statements,
check that every placeholder is bound, run the statements in order and
translate native failures::

    command = connection.create_command(
        "SELECT * FROM {{customer}} WHERE [[id]] = :id", {"id": 1}
    )
    command.get_sql()      # SELECT * FROM `customer` WHERE `id` = :id
    command.get_raw_sql()  # SELECT * FROM `customer` WHERE `id` = 1
    command.query_one()
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from dbcommand.build.base import BuiltSQL, UpdateSpec
from dbcommand.build.params import Key, ParameterSet, interpolate, render
from dbcommand.build.splitter import split
from dbcommand.errors import SQL_CONTEXT_PREFIX, InvalidArgumentError
from dbcommand.execute.driver import NativeError, Result
from dbcommand.logging import get_logger
from dbcommand.schema.values import SelectQuery

if TYPE_CHECKING:
    from dbcommand.connection import Connection

logger = get_logger(__name__)


class Command:
    """One build-then-execute cycle against a :class:`Connection`.

    Args:
        connection: The connection supplying builder, driver and classifier.
        sql: Optional SQL text; ``{{table}}`` / ``[[column]]`` are expanded.
        params: Optional named mapping or positional sequence of values.
    """

    def __init__(
        self,
        connection: Connection,
        sql: str | None = None,
        params: Mapping[Key, Any] | Sequence[Any] | None = None,
    ) -> None:
        self._connection = connection
        self._sql = ""
        self._params = ParameterSet()
        if sql is not None:
            self.set_sql(sql)
        if params:
            self.bind_values(params)

    # ------------------------------------------------------------------
    # SQL and parameters
    # ------------------------------------------------------------------

    def set_sql(self, sql: str) -> Command:
        """Replace the SQL text and clear bound parameters."""
        self._apply(self._connection.builder.raw(sql))
        return self

    def bind_value(self, name: Key, value: Any) -> Command:
        """Bind one value; later bindings override earlier ones."""
        return self.bind_values({name: value})

    def bind_values(self, params: Mapping[Key, Any] | Sequence[Any]) -> Command:
        """Merge ``params`` into the bound parameters.

        :class:`SelectQuery` and :class:`RawSql` values are inlined at their
        placeholder instead of being bound.
        """
        built = self._connection.builder.raw(self._sql, params)
        self._sql = built.sql
        self._params = self._params.merge(built.params)
        return self

    def get_sql(self) -> str:
        """Return the SQL text with shorthand expanded and placeholders intact."""
        return self._sql

    def get_params(self) -> dict[Key, Any]:
        """Return the bound parameters, names without the leading colon."""
        return self._params.as_dict()

    def get_raw_sql(self) -> str:
        """Return the SQL with parameter values inlined, for diagnostics only."""
        return interpolate(self._sql, self._params, self._connection.quoter)

    # ------------------------------------------------------------------
    # Build operations
    # ------------------------------------------------------------------

    def insert(self, table: str, columns: Mapping[str, Any] | SelectQuery) -> Command:
        """Prepare an INSERT from a column mapping or a select query."""
        self._apply(self._connection.builder.insert(table, columns))
        return self

    def batch_insert(
        self,
        table: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> Command:
        """Prepare a multi-row INSERT."""
        self._apply(self._connection.builder.batch_insert(table, columns, rows))
        return self

    def upsert(
        self,
        table: str,
        insert_columns: Mapping[str, Any] | SelectQuery,
        update_columns: UpdateSpec = True,
    ) -> Command:
        """Prepare an insert that updates or skips rows colliding on a key."""
        self._apply(self._connection.builder.upsert(table, insert_columns, update_columns))
        return self

    def _apply(self, built: BuiltSQL) -> None:
        self._sql = built.sql
        self._params = built.params

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self) -> int:
        """Execute every statement and return the total affected row count."""
        affected, _ = self._run()
        return affected

    def query_all(self) -> list[dict[str, Any]]:
        """Execute and return the rows of the final statement."""
        _, last = self._run()
        if last is None or not last.is_query:
            return []
        return list(last.rows)

    def query_one(self) -> dict[str, Any] | None:
        """Execute and return the first row, or ``None``."""
        rows = self.query_all()
        return rows[0] if rows else None

    def query_column(self) -> list[Any]:
        """Execute and return the first column of every row."""
        return [next(iter(row.values())) for row in self.query_all() if row]

    def query_scalar(self) -> Any:
        """Execute and return the first column of the first row, or ``None``."""
        row = self.query_one()
        return next(iter(row.values())) if row else None

    def _run(self) -> tuple[int, Result | None]:
        statements = split(self._sql)
        if not statements:
            return 0, None
        param_sets = self._params.partition(statements)

        for sql, params in zip(statements, param_sets):
            missing = params.missing(sql)
            if missing:
                raise InvalidArgumentError(
                    f"No value bound for placeholder(s) {', '.join(missing)}.\n"
                    f"{SQL_CONTEXT_PREFIX}{sql}",
                    details={"placeholders": missing, "sql": sql},
                )

        connection = self._connection
        logger.debug(
            "command.execute",
            dialect=connection.dialect.name,
            statements=len(statements),
            params=[str(k) for k in self._params],
        )

        affected = 0
        last: Result | None = None
        for index, (sql, params) in enumerate(zip(statements, param_sets)):
            handle = connection.driver.prepare(render(sql, connection.dialect.param_style))
            for key, value in params.items():
                connection.driver.bind(handle, key, value)
            try:
                last = connection.driver.execute(handle)
            except NativeError as exc:
                error = connection.classifier.classify(
                    exc.code, exc.message, interpolate(sql, params, connection.quoter)
                )
                logger.warning(
                    "command.failed",
                    kind=error.kind,
                    native_code=error.native_code,
                    statement=index,
                )
                raise error from exc
            if last.rowcount > 0:
                affected += last.rowcount
        return affected, last

    def __repr__(self) -> str:
        return f"Command(sql={self._sql!r})"


__all__ = ["Command"]
