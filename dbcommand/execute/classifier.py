"""Map native driver failures onto the structured error taxonomy."""
from __future__ import annotations

from dbcommand.errors import ExecutionError, IntegrityError
from dbcommand.schema.dialect import DialectConfig


class ErrorClassifier:
    """Classifies native failures for one dialect.

    Constraint violations (unique, foreign key, not null, check) become
    :class:`IntegrityError`; everything else becomes :class:`ExecutionError`.
    Both carry the native message followed by the interpolated SQL.
    """

    def __init__(self, dialect: DialectConfig) -> None:
        self._dialect = dialect

    def is_integrity_violation(self, native_code: str | int | None) -> bool:
        if native_code is None:
            return False
        code = str(native_code)
        return code in self._dialect.integrity_codes or any(
            code.startswith(prefix) for prefix in self._dialect.integrity_code_prefixes
        )

    def classify(
        self,
        native_code: str | int | None,
        native_message: str,
        raw_sql: str,
    ) -> ExecutionError:
        """Build (but do not raise) the error for a failed statement."""
        code = None if native_code is None else str(native_code)
        error_cls = IntegrityError if self.is_integrity_violation(code) else ExecutionError
        return error_cls(native_message, native_code=code, raw_sql=raw_sql)
