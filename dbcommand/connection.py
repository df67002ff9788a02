"""Connection: wires dialect, quoter, builder, driver and classifier together.

Connection acquisition and pooling stay outside this package; a
:class:`Connection` wraps an already-open driver::

    from dbcommand import Connection, SchemaSnapshot

    conn = Connection.sqlite(":memory:", foreign_keys=True)
    conn.create_command("CREATE TABLE {{customer}} ([[id]] INTEGER PRIMARY KEY)").execute()
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from dbcommand.build.base import CommandBuilder
from dbcommand.build.params import Key
from dbcommand.build.quoter import Quoter
from dbcommand.build.registry import BuilderFactory
from dbcommand.command import Command
from dbcommand.errors import ConfigurationError
from dbcommand.execute.classifier import ErrorClassifier
from dbcommand.execute.driver import Driver
from dbcommand.execute.postgres import PsycopgDriver
from dbcommand.execute.sqlite import SQLiteDriver
from dbcommand.logging import get_logger
from dbcommand.schema.dialect import DialectConfig
from dbcommand.schema.table import SchemaProvider, TableSchema
from dbcommand.settings import CommandSettings, get_settings

logger = get_logger(__name__)


class Connection:
    """Creates commands bound to one driver and one dialect.

    Args:
        driver: Driver collaborator executing statements.
        dialect: Dialect configuration (quote characters, placeholder style).
        schema: Optional table metadata provider, required for upserts.
        table_prefix: Replaces ``%`` in ``{{%table}}`` shorthand.
    """

    def __init__(
        self,
        driver: Driver,
        dialect: DialectConfig,
        schema: SchemaProvider | None = None,
        table_prefix: str = "",
    ) -> None:
        self._driver = driver
        self._dialect = dialect
        self._schema = schema
        self._quoter = Quoter(dialect, table_prefix)
        self._builder = BuilderFactory.create(dialect.name, self._quoter, schema)
        self._classifier = ErrorClassifier(dialect)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def sqlite(
        cls,
        database: str = ":memory:",
        *,
        schema: SchemaProvider | None = None,
        table_prefix: str = "",
        foreign_keys: bool = False,
    ) -> Connection:
        """Open an autocommit SQLite connection."""
        driver = SQLiteDriver(database=database, foreign_keys=foreign_keys)
        logger.info("connection.opened", dialect="sqlite", database=database)
        return cls(driver, DialectConfig.for_target("sqlite"), schema, table_prefix)

    @classmethod
    def from_settings(
        cls,
        settings: CommandSettings | None = None,
        schema: SchemaProvider | None = None,
    ) -> Connection:
        """Open a connection described by :class:`CommandSettings`.

        Raises:
            ConfigurationError: If no driver ships for the configured dialect,
                or the driver cannot connect.
        """
        settings = settings or get_settings()
        dialect = DialectConfig.for_target(settings.dialect)
        if dialect.name == "sqlite":
            driver: Driver = SQLiteDriver(database=settings.dsn, foreign_keys=settings.foreign_keys)
        elif dialect.name == "postgres":
            driver = PsycopgDriver(dsn=settings.dsn)
        else:
            raise ConfigurationError(
                f"No bundled driver for dialect '{dialect.name}'; "
                "wrap a DB-API connection in DBAPIDriver and pass it to Connection()."
            )
        logger.info("connection.opened", dialect=dialect.name)
        return cls(driver, dialect, schema, settings.table_prefix)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def dialect(self) -> DialectConfig:
        return self._dialect

    @property
    def quoter(self) -> Quoter:
        return self._quoter

    @property
    def builder(self) -> CommandBuilder:
        return self._builder

    @property
    def classifier(self) -> ErrorClassifier:
        return self._classifier

    def get_table_schema(self, name: str) -> TableSchema | None:
        return self._schema.get_table_schema(name) if self._schema is not None else None

    # ------------------------------------------------------------------
    # Commands and quoting
    # ------------------------------------------------------------------

    def create_command(
        self,
        sql: str | None = None,
        params: Mapping[Key, Any] | Sequence[Any] | None = None,
    ) -> Command:
        """Create a command for ``sql`` with ``params`` bound."""
        return Command(self, sql, params)

    def quote_sql(self, sql: str) -> str:
        """Expand ``{{table}}`` / ``[[column]]`` shorthand in ``sql``."""
        return self._quoter.expand_shorthand(sql)

    def quote_table_name(self, name: str) -> str:
        return self._quoter.quote_table_name(name)

    def quote_column_name(self, name: str) -> str:
        return self._quoter.quote_column_name(name)

    def quote_value(self, value: Any) -> str:
        return self._quoter.quote_value(value)

    def close(self) -> None:
        self._driver.close()
        logger.info("connection.closed", dialect=self._dialect.name)

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
