"""dbcommand – Dialect-aware SQL commands.

Write SQL once with ``{{table}}`` / ``[[column]]`` shorthand and ``:name``
placeholders; run it on SQLite, PostgreSQL or MySQL.

Public API
----------
``Connection``
    Wraps a driver and a dialect; creates commands and quotes names.

``Command``
    Builds (``insert``, ``batch_insert``, ``upsert``), binds, executes and
    reports the SQL it ran (``get_sql``, ``get_params``, ``get_raw_sql``).

``create_command``
    Shortcut for ``Connection.sqlite(...).create_command(...)``.

Re-exported types
-----------------
``DialectConfig``, ``SchemaSnapshot``, ``TableSchema``, ``RawSql``,
``SelectQuery``, ``CommandSettings`` and all error classes.

Extensibility
-------------
New dialect builders can be registered via::

    from dbcommand.build.registry import BuilderFactory

    @BuilderFactory.register("oracle")
    class OracleCommandBuilder(CommandBuilder):
        ...
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from dbcommand.build import (
    BuilderFactory,
    BuiltSQL,
    CommandBuilder,
    MySQLCommandBuilder,
    ParameterSet,
    PostgresCommandBuilder,
    Quoter,
    SQLiteCommandBuilder,
    split,
)
from dbcommand.command import Command
from dbcommand.connection import Connection
from dbcommand.errors import (
    ConfigurationError,
    DbCommandError,
    ExecutionError,
    IntegrityError,
    InvalidArgumentError,
    NotSupportedError,
)
from dbcommand.execute import DBAPIDriver, Driver, ErrorClassifier, PsycopgDriver, SQLiteDriver
from dbcommand.logging import configure_logging
from dbcommand.schema import (
    ColumnInfo,
    DialectConfig,
    RawSql,
    SchemaSnapshot,
    SelectQuery,
    TableSchema,
    schema_from_sqlalchemy,
)
from dbcommand.settings import CommandSettings, get_settings

__all__ = [
    # Entry points
    "Connection",
    "Command",
    "create_command",
    # Schema types
    "DialectConfig",
    "ColumnInfo",
    "SchemaSnapshot",
    "TableSchema",
    "RawSql",
    "SelectQuery",
    "schema_from_sqlalchemy",
    # Building
    "BuilderFactory",
    "BuiltSQL",
    "CommandBuilder",
    "MySQLCommandBuilder",
    "ParameterSet",
    "PostgresCommandBuilder",
    "Quoter",
    "SQLiteCommandBuilder",
    "split",
    # Execution
    "DBAPIDriver",
    "Driver",
    "ErrorClassifier",
    "PsycopgDriver",
    "SQLiteDriver",
    # Configuration
    "CommandSettings",
    "configure_logging",
    "get_settings",
    # Errors
    "DbCommandError",
    "InvalidArgumentError",
    "ConfigurationError",
    "NotSupportedError",
    "ExecutionError",
    "IntegrityError",
]


def create_command(
    sql: str | None = None,
    params: Mapping[Any, Any] | Sequence[Any] | None = None,
    *,
    database: str = ":memory:",
    schema: SchemaSnapshot | None = None,
) -> Command:
    """Open a SQLite connection and create a command on it.

    Example::

        rows = dbcommand.create_command("SELECT :x AS x", {"x": 1}).query_all()

    Args:
        sql: Optional SQL text.
        params: Optional parameters to bind.
        database: SQLite database path.
        schema: Optional table metadata, required for upserts.

    Returns:
        A :class:`Command` bound to a fresh :class:`Connection`.
    """
    return Connection.sqlite(database, schema=schema).create_command(sql, params)
