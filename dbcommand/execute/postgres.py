"""PostgreSQL driver adapter on top of ``psycopg`` (v3).

Install the optional dependency before using this module::

    pip install "dbcommand[postgres]"
"""
from __future__ import annotations

from typing import Any

from dbcommand.errors import ConfigurationError
from dbcommand.execute.driver import DBAPIDriver


class PsycopgDriver(DBAPIDriver):
    """Executes statements through ``psycopg``.

    Native codes are SQLSTATE strings (``23505`` unique violation, ``23503``
    foreign-key violation, ...).

    Args:
        connection: An existing ``psycopg`` connection, or ``None`` to
            connect to ``dsn`` in autocommit mode.
        dsn: libpq connection string.
    """

    def __init__(self, connection: Any | None = None, *, dsn: str | None = None) -> None:
        try:
            import psycopg
        except ImportError as exc:
            raise ConfigurationError(
                "psycopg is required for the postgres dialect. "
                'Install it with: pip install "dbcommand[postgres]"'
            ) from exc

        if connection is None:
            if not dsn:
                raise ConfigurationError("A DSN is required to open a PostgreSQL connection.")
            try:
                connection = psycopg.connect(dsn, autocommit=True)
            except psycopg.Error as exc:
                raise ConfigurationError(f"Cannot connect to PostgreSQL: {exc}") from exc
        super().__init__(connection, error_types=(psycopg.Error,))
