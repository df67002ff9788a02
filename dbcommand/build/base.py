"""Builder abstractions: BuiltSQL and the CommandBuilder ABC.

The Template Method pattern is used:
- ``CommandBuilder`` owns the algorithm for every logical operation
  (insert, insert-from-select, batch insert, upsert, raw passthrough).
- ``SQLiteCommandBuilder``, ``PostgresCommandBuilder`` and
  ``MySQLCommandBuilder`` override the dialect-specific steps (the upsert
  clause, how the "excluded" row is referenced, select-source wrapping).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from dbcommand.build.params import ParameterSet
from dbcommand.build.quoter import Quoter
from dbcommand.build.scanner import replace_placeholders
from dbcommand.errors import InvalidArgumentError, NotSupportedError
from dbcommand.schema.table import SchemaProvider, TableSchema
from dbcommand.schema.values import (
    Cell,
    RawSqlToken,
    ScalarValue,
    SelectQuery,
    StructuredQueryRef,
    to_cell,
)

#: Raised for query objects whose parameters or columns cannot be merged.
ENUMERATED_SELECT_REQUIRED = "Expected select query object with enumerated (named) parameters"

#: Prefix of generated parameter names (``qp0``, ``qp1``, ...).
PARAM_PREFIX = "qp"

UpdateSpec = bool | Sequence[str] | Mapping[str, Any]


@dataclass
class BuiltSQL:
    """The output of a build operation.

    Attributes:
        sql: Dialect SQL with ``:name`` placeholders, shorthand expanded.
        params: Every value the SQL references, generated and caller-supplied.
    """

    sql: str
    params: ParameterSet


@dataclass
class RuntimeContext:
    """Accumulates parameters during a single build.

    Generated names continue from the number of parameters already bound
    and skip names that are taken, so they never collide.
    """

    params: ParameterSet = field(default_factory=ParameterSet)
    _counter: int = 0

    def __post_init__(self) -> None:
        self._counter = len(self.params)

    def add_value(self, value: Any) -> str:
        """Store a value and return its placeholder name."""
        name = f"{PARAM_PREFIX}{self._counter}"
        while name in self.params:
            self._counter += 1
            name = f"{PARAM_PREFIX}{self._counter}"
        self._counter += 1
        self.params.bind(name, value)
        return name

    def merge(self, params: ParameterSet | Mapping[str, Any]) -> None:
        """Add a nested expression's own parameters.

        Raises:
            InvalidArgumentError: A name is already bound to a different value.
        """
        for name, value in ParameterSet(params).items():
            if name in self.params and self.params[name] != value:
                raise InvalidArgumentError(
                    f"Parameter '{name}' is bound twice with different values.",
                    details={"name": name},
                )
            self.params.bind(name, value)


class CommandBuilder(ABC):
    """Lowers logical write operations and raw SQL into dialect SQL.

    Args:
        quoter: Quoter configured for the target dialect.
        schema: Table metadata provider; required for :meth:`upsert`.
    """

    def __init__(self, quoter: Quoter, schema: SchemaProvider | None = None) -> None:
        self._quoter = quoter
        self._schema = schema

    @property
    def quoter(self) -> Quoter:
        return self._quoter

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def raw(self, sql: str, params: ParameterSet | Mapping[str, Any] | Sequence[Any] | None = None) -> BuiltSQL:
        """Expand shorthand in ``sql`` and pass the parameters through.

        Parameter values that are :class:`SelectQuery` or :class:`RawSql`
        objects are inlined at their placeholder (a query as ``(<sql>)``);
        the query's named parameters are merged in.
        """
        plain: dict[Any, Any] = {}
        inline: dict[str, str] = {}
        ctx = RuntimeContext()
        items = (
            params.items()
            if isinstance(params, (ParameterSet, Mapping))
            else enumerate(params or [])
        )
        for name, value in items:
            cell = to_cell(value)
            if isinstance(cell, ScalarValue):
                plain[name] = cell.value
                continue
            if not isinstance(name, str):
                raise InvalidArgumentError(
                    "Query and raw SQL parameters must be bound by name.",
                    details={"position": name},
                )
            inline[name.lstrip(":")] = self._inline_cell(cell, ctx)

        if inline:
            sql = replace_placeholders(
                sql,
                lambda p, _: inline[p.name] if p.name in inline else sql_marker(p.name),
            )
        merged = ctx
        if plain:
            merged = RuntimeContext(ParameterSet(plain))
            merged.merge(ctx.params)
        return BuiltSQL(sql=self._quoter.expand_shorthand(sql), params=merged.params)

    def insert(
        self,
        table: str,
        columns: Mapping[str, Any] | SelectQuery,
        params: ParameterSet | None = None,
    ) -> BuiltSQL:
        """Build ``INSERT INTO table (...) VALUES (...)`` or insert-from-select."""
        ctx = RuntimeContext(params.copy() if params is not None else ParameterSet())
        sql, _ = self._build_insert(ctx, table, columns)
        return BuiltSQL(sql=self._quoter.expand_shorthand(sql), params=ctx.params)

    def batch_insert(
        self,
        table: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        params: ParameterSet | None = None,
    ) -> BuiltSQL:
        """Build a multi-row ``INSERT``; no rows yields an empty statement."""
        ctx = RuntimeContext(params.copy() if params is not None else ParameterSet())
        rows = [list(row) for row in rows]
        arity = len(columns) if columns else (len(rows[0]) if rows else 0)
        for index, row in enumerate(rows):
            if len(row) != arity:
                raise InvalidArgumentError(
                    f"Row {index} has {len(row)} values but {arity} columns were given.",
                    details={"row": index, "expected": arity, "actual": len(row)},
                )
        if not rows:
            return BuiltSQL(sql="", params=ctx.params)

        groups: list[str] = []
        for row in rows:
            values: list[str] = []
            for value in row:
                cell = to_cell(value)
                if isinstance(cell, RawSqlToken) and cell.params:
                    raise NotSupportedError(
                        "Raw SQL values with their own parameters are not supported in batch insert.",
                        feature="batch_insert_raw_params",
                    )
                values.append(self._inline_cell(cell, ctx))
            groups.append(f"({', '.join(values)})")

        sql = f"INSERT INTO {self._quoter.quote_table_name(table)}"
        if columns:
            sql += f" ({', '.join(self._quoter.quote_column_name(c) for c in columns)})"
        sql += f" VALUES {', '.join(groups)}"
        return BuiltSQL(sql=self._quoter.expand_shorthand(sql), params=ctx.params)

    def upsert(
        self,
        table: str,
        insert_columns: Mapping[str, Any] | SelectQuery,
        update_columns: UpdateSpec = True,
        params: ParameterSet | None = None,
    ) -> BuiltSQL:
        """Build an insert that updates (or skips) rows colliding on a key.

        Args:
            table: Target table.
            insert_columns: Column-to-value mapping or a :class:`SelectQuery`.
            update_columns: ``True`` to update every column outside the
                conflict target, ``False`` to do nothing on conflict, a list
                of columns to update from the excluded row, or a mapping of
                explicit column values.
            params: Parameters already bound on the command.

        Raises:
            InvalidArgumentError: If the table is unknown, the insert data is
                empty or an update column is not part of the insert.
        """
        table_schema = self._require_schema(table)
        if isinstance(insert_columns, Mapping) and not insert_columns:
            raise InvalidArgumentError(
                "Upsert requires at least one insert column.", details={"table": table}
            )

        ctx = RuntimeContext(params.copy() if params is not None else ParameterSet())
        insert_sql, insert_names = self._build_insert(ctx, table, insert_columns, upsert=True)
        conflict = table_schema.conflict_target()
        if not conflict:
            return BuiltSQL(sql=self._quoter.expand_shorthand(insert_sql), params=ctx.params)

        assignments = self._assignments(ctx, insert_names, conflict, update_columns)
        if assignments:
            sql = self.build_upsert_update(table, insert_sql, conflict, assignments)
        else:
            sql = self.build_upsert_do_nothing(table, insert_sql, conflict)
        return BuiltSQL(sql=self._quoter.expand_shorthand(sql), params=ctx.params)

    # ------------------------------------------------------------------
    # Dialect-specific steps
    # ------------------------------------------------------------------

    @abstractmethod
    def excluded_column(self, column: str) -> str:
        """Return the expression for ``column`` of the row proposed for insertion."""

    @abstractmethod
    def build_upsert_update(
        self,
        table: str,
        insert_sql: str,
        conflict: list[str],
        assignments: list[tuple[str, str]],
    ) -> str:
        """Append the dialect's conflict-update clause to ``insert_sql``."""

    @abstractmethod
    def build_upsert_do_nothing(self, table: str, insert_sql: str, conflict: list[str]) -> str:
        """Turn ``insert_sql`` into an insert that skips conflicting rows."""

    def wrap_upsert_select(self, sql: str) -> str:
        """Return the select source used inside an upsert."""
        return sql

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def _build_insert(
        self,
        ctx: RuntimeContext,
        table: str,
        columns: Mapping[str, Any] | SelectQuery,
        upsert: bool = False,
    ) -> tuple[str, list[str]]:
        quoted_table = self._quoter.quote_table_name(table)
        if isinstance(columns, SelectQuery):
            if not (columns.has_named_params and columns.has_enumerated_columns):
                raise InvalidArgumentError(
                    ENUMERATED_SELECT_REQUIRED,
                    details={"columns": list(columns.columns)},
                )
            ctx.merge(columns.params)  # type: ignore[arg-type]
            names = [_target_column(c) for c in columns.columns]
            select_sql = self.wrap_upsert_select(columns.sql) if upsert else columns.sql
            cols = ", ".join(self._quoter.quote_column_name(n) for n in names)
            return f"INSERT INTO {quoted_table} ({cols}) {select_sql}", names

        if not isinstance(columns, Mapping):
            raise InvalidArgumentError(
                "Insert data must be a mapping of columns to values or a SelectQuery.",
                details={"type": type(columns).__name__},
            )
        if not columns:
            return f"INSERT INTO {quoted_table} DEFAULT VALUES", []

        names = list(columns)
        values = [self._inline_cell(to_cell(v), ctx) for v in columns.values()]
        cols = ", ".join(self._quoter.quote_column_name(n) for n in names)
        return f"INSERT INTO {quoted_table} ({cols}) VALUES ({', '.join(values)})", names

    def _inline_cell(self, cell: Cell, ctx: RuntimeContext) -> str:
        """Return the SQL for one cell, binding scalars into ``ctx``."""
        if isinstance(cell, ScalarValue):
            return f":{ctx.add_value(cell.value)}"
        if isinstance(cell, RawSqlToken):
            ctx.merge(cell.params)
            return cell.sql
        if isinstance(cell, StructuredQueryRef):
            if not cell.query.has_named_params:
                raise InvalidArgumentError(ENUMERATED_SELECT_REQUIRED)
            ctx.merge(cell.query.params)  # type: ignore[arg-type]
            return f"({cell.query.sql})"
        raise InvalidArgumentError(f"Unknown value type: {type(cell).__name__}")

    def _assignments(
        self,
        ctx: RuntimeContext,
        insert_names: list[str],
        conflict: list[str],
        update_columns: UpdateSpec,
    ) -> list[tuple[str, str]]:
        if update_columns is False:
            return []
        if update_columns is True:
            return [
                (name, self.excluded_column(name))
                for name in insert_names
                if name not in conflict
            ]
        if isinstance(update_columns, Mapping):
            return [
                (name, self._inline_cell(to_cell(value), ctx))
                for name, value in update_columns.items()
            ]
        unknown = [c for c in update_columns if c not in insert_names]
        if unknown:
            raise InvalidArgumentError(
                f"Update columns {unknown} are not part of the inserted columns.",
                details={"columns": unknown},
            )
        return [(name, self.excluded_column(name)) for name in update_columns]

    def _require_schema(self, table: str) -> TableSchema:
        name = _plain_table_name(self._quoter, table)
        table_schema = None
        if self._schema is not None:
            table_schema = self._schema.get_table_schema(name)
            if table_schema is None and "." in name:
                table_schema = self._schema.get_table_schema(name.rsplit(".", 1)[1])
        if table_schema is None:
            raise InvalidArgumentError(
                f"Table '{name}' does not exist or has no schema information.",
                details={"table": name},
            )
        return table_schema


def sql_marker(name: str | None) -> str:
    """Return the placeholder text for ``name`` (``?`` when positional)."""
    return "?" if name is None else f":{name}"


def _plain_table_name(quoter: Quoter, table: str) -> str:
    if table.startswith("{{") and table.endswith("}}"):
        table = quoter.apply_table_prefix(table[2:-2])
    start, end = quoter.dialect.table_quote
    return ".".join(
        part[1:-1] if len(part) >= 2 and part.startswith(start) and part.endswith(end) else part
        for part in table.split(".")
    )


def _target_column(select_column: str) -> str:
    """Map a select-list entry (``t.name AS alias``) to the insert column."""
    column = select_column.strip()
    lowered = column.lower()
    if " as " in lowered:
        column = column[lowered.rindex(" as ") + 4 :].strip()
    return column.rsplit(".", 1)[-1]
