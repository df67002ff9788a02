"""Driver collaborator interface and a generic DB-API 2.0 implementation.

The command layer talks to the engine through three calls only::

    handle = driver.prepare(sql)
    driver.bind(handle, "name", value)      # or a 0-based position
    result = driver.execute(handle)         # raises NativeError on failure

:class:`DBAPIDriver` implements them on top of any PEP 249 connection;
engine-specific subclasses only refine how native error codes are read.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class NativeError(Exception):
    """A failure reported by the engine, reduced to code and message.

    Args:
        code: Native error code as a string (SQLSTATE, engine code), or ``None``.
        message: Native error message.
    """

    def __init__(self, code: str | None, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class PreparedStatement:
    """SQL text plus the values bound to it so far."""

    sql: str
    values: dict[str | int, Any] = field(default_factory=dict)

    def driver_params(self) -> dict[str, Any] | list[Any]:
        """Return bound values as a mapping, or a list when bound by position."""
        if self.values and all(isinstance(k, int) for k in self.values):
            return [self.values[k] for k in sorted(self.values)]  # type: ignore[type-var]
        return dict(self.values)  # type: ignore[arg-type]


@dataclass
class Result:
    """Outcome of one executed statement.

    Attributes:
        rowcount: Affected rows as reported by the driver (``-1`` if unknown).
        rows: Result rows as column-name dicts, or ``None`` when the
            statement returned no result set.
    """

    rowcount: int = -1
    rows: list[dict[str, Any]] | None = None

    @property
    def is_query(self) -> bool:
        return self.rows is not None


class Driver(ABC):
    """Abstract driver collaborator."""

    def prepare(self, sql: str) -> PreparedStatement:
        return PreparedStatement(sql=sql)

    def bind(self, handle: PreparedStatement, key: str | int, value: Any) -> None:
        handle.values[key] = value

    @abstractmethod
    def execute(self, handle: PreparedStatement) -> Result:
        """Execute ``handle``.

        Raises:
            NativeError: If the engine rejects the statement.
        """

    def close(self) -> None:
        """Release the underlying connection."""


class DBAPIDriver(Driver):
    """Runs statements on a PEP 249 connection.

    Args:
        connection: An open DB-API connection.
        error_types: Exception classes treated as native failures, usually
            the driver module's ``Error``.  Defaults to ``Exception``.
    """

    def __init__(self, connection: Any, error_types: tuple[type[BaseException], ...] = ()) -> None:
        self._connection = connection
        self._error_types = error_types or (Exception,)

    @property
    def connection(self) -> Any:
        return self._connection

    def execute(self, handle: PreparedStatement) -> Result:
        cursor = self._connection.cursor()
        try:
            cursor.execute(handle.sql, handle.driver_params())
            if cursor.description is None:
                return Result(rowcount=cursor.rowcount)
            names = [d[0] for d in cursor.description]
            rows = [dict(zip(names, row)) for row in cursor.fetchall()]
            return Result(rowcount=cursor.rowcount, rows=rows)
        except self._error_types as exc:
            raise NativeError(self.error_code(exc), self.error_message(exc)) from exc
        finally:
            cursor.close()

    def error_code(self, exc: BaseException) -> str | None:
        """Extract the native code: SQLSTATE when available, else a leading int arg."""
        sqlstate = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
        if sqlstate:
            return str(sqlstate)
        if exc.args and isinstance(exc.args[0], int):
            return str(exc.args[0])
        return None

    def error_message(self, exc: BaseException) -> str:
        if len(exc.args) >= 2 and isinstance(exc.args[0], int):
            return str(exc.args[1])
        return str(exc).strip()

    def close(self) -> None:
        self._connection.close()
