"""SQLite driver adapter on top of the standard ``sqlite3`` module."""
from __future__ import annotations

import sqlite3

from dbcommand.execute.driver import DBAPIDriver

#: Primary result codes used when the exception carries no ``sqlite_errorcode``.
_FALLBACK_CODES: dict[type[BaseException], int] = {
    sqlite3.IntegrityError: 19,  # SQLITE_CONSTRAINT
    sqlite3.OperationalError: 1,  # SQLITE_ERROR
}


class SQLiteDriver(DBAPIDriver):
    """Executes statements through ``sqlite3``.

    Error codes are reduced to SQLite primary result codes (``19`` for
    every ``SQLITE_CONSTRAINT_*`` variant), which is what
    :class:`~dbcommand.execute.classifier.ErrorClassifier` matches against.

    Args:
        connection: An existing ``sqlite3`` connection.  When omitted, a
            connection to ``database`` is opened in autocommit mode.
        database: Database path, ``":memory:"`` by default.
        foreign_keys: Issue ``PRAGMA foreign_keys = ON`` after connecting.
    """

    def __init__(
        self,
        connection: sqlite3.Connection | None = None,
        *,
        database: str = ":memory:",
        foreign_keys: bool = False,
    ) -> None:
        if connection is None:
            connection = sqlite3.connect(database, isolation_level=None)
        super().__init__(connection, error_types=(sqlite3.Error,))
        if foreign_keys:
            connection.execute("PRAGMA foreign_keys = ON")

    def error_code(self, exc: BaseException) -> str | None:
        code = getattr(exc, "sqlite_errorcode", None)
        if code is None:
            code = next(
                (c for t, c in _FALLBACK_CODES.items() if isinstance(exc, t)), None
            )
        return None if code is None else str(code & 0xFF)

    def error_message(self, exc: BaseException) -> str:
        return str(exc)
