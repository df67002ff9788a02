"""Custom exception hierarchy for dbcommand.

All public errors inherit from DbCommandError so callers can catch the base
class for any dbcommand-specific failure.
"""
from __future__ import annotations

from typing import Any

#: Separator between the native message and the diagnostic SQL.
SQL_CONTEXT_PREFIX = "The SQL being executed was: "


class DbCommandError(Exception):
    """Base exception for all dbcommand errors."""

    kind: str = "Error"

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for API payloads."""
        return {"error": self.kind, "message": str(self)}


class InvalidArgumentError(DbCommandError):
    """Raised when call-site input is malformed.

    Covers unbound placeholders, non-scalar parameter values, row arity
    mismatches and query objects without enumerated named parameters.

    Args:
        message: Human-readable description.
        details: Extra context (offending names, expected arity, ...).
    """

    kind = "InvalidArgumentError"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        return {**super().to_error_response(), "details": self.details}


class ConfigurationError(DbCommandError):
    """Raised when the dialect, connection or identifier setup is invalid."""

    kind = "ConfigurationError"


class NotSupportedError(DbCommandError):
    """Raised when an operation cannot be represented in the target dialect.

    Args:
        message: Human-readable description.
        feature: The feature that was requested.
    """

    kind = "NotSupportedError"

    def __init__(self, message: str, feature: str | None = None) -> None:
        super().__init__(message)
        self.feature = feature


class ExecutionError(DbCommandError):
    """Raised when the driver reports a failure while executing a statement.

    The message is the native message followed by the fully interpolated SQL
    of the failing statement.

    Args:
        native_message: Message reported by the driver.
        native_code: Driver / engine error code, if any.
        raw_sql: SQL shown for diagnostics.
    """

    kind = "ExecutionError"

    def __init__(
        self,
        native_message: str,
        native_code: str | None = None,
        raw_sql: str | None = None,
    ) -> None:
        message = native_message
        if raw_sql is not None:
            message = f"{native_message}\n{SQL_CONTEXT_PREFIX}{raw_sql}"
        super().__init__(message)
        self.native_message = native_message
        self.native_code = native_code
        self.raw_sql = raw_sql

    def to_error_response(self) -> dict[str, Any]:
        return {
            **super().to_error_response(),
            "native_code": self.native_code,
            "raw_sql": self.raw_sql,
        }


class IntegrityError(ExecutionError):
    """Raised on a native constraint violation (unique, foreign key, not null)."""

    kind = "IntegrityError"
