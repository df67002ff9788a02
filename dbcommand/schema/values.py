"""Typed cell values for insert, batch-insert and upsert data.

Callers hand the builder plain Python scalars, :class:`RawSql` fragments
(e.g. ``RawSql("[[price]] * 2")``) or :class:`SelectQuery` objects produced
by a query builder.  :func:`to_cell` resolves each of them once, at build
time, into one member of the :data:`Cell` union so the SQL builder never
has to inspect raw types itself.

Usage::

    from dbcommand.schema.values import RawSql, to_cell

    to_cell(42)                        # ScalarValue(kind='scalar', value=42)
    to_cell(RawSql("CURRENT_TIMESTAMP"))  # RawSqlToken(kind='raw', ...)
"""

from __future__ import annotations

import datetime
import decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from dbcommand.errors import InvalidArgumentError

_FROZEN = ConfigDict(extra="forbid", frozen=True)

#: Python types passed through to the driver untouched.
SCALAR_TYPES: tuple[type, ...] = (
    type(None),
    bool,
    int,
    float,
    str,
    bytes,
    decimal.Decimal,
    datetime.date,
    datetime.datetime,
    datetime.time,
)


# ---------------------------------------------------------------------------
# Caller-facing value types
# ---------------------------------------------------------------------------


class RawSql(BaseModel):
    """A SQL fragment inlined verbatim instead of being bound.

    Used for column or table references (``RawSql("[[t.price]]")``) and
    engine functions (``RawSql("CURRENT_TIMESTAMP")``).  ``params`` holds
    values for placeholders the fragment references itself.
    """

    model_config = _FROZEN

    sql: str
    params: dict[str, Any] = Field(default_factory=dict)

    def __init__(self, sql: str, params: dict[str, Any] | None = None, **data: Any) -> None:
        super().__init__(sql=sql, params=params or {}, **data)


class SelectQuery(BaseModel):
    """An already-assembled SELECT statement.

    Attributes:
        sql: The SELECT statement text.
        params: Named (mapping) or positional (sequence) parameters.
        columns: Enumerated select-list column names, in order.
    """

    model_config = _FROZEN

    sql: str
    params: dict[str, Any] | list[Any] = Field(default_factory=dict)
    columns: list[str] = Field(default_factory=list)

    @property
    def has_named_params(self) -> bool:
        """``True`` unless the query carries positional parameters."""
        return isinstance(self.params, dict) or not self.params

    @property
    def has_enumerated_columns(self) -> bool:
        """``True`` when every select column is an explicit name."""
        return bool(self.columns) and all(
            c.strip() and c.strip() != "*" and not c.strip().endswith(".*")
            for c in self.columns
        )


# ---------------------------------------------------------------------------
# Resolved cell variants
# ---------------------------------------------------------------------------


class ScalarValue(BaseModel):
    """A value bound as a parameter."""

    model_config = _FROZEN

    kind: Literal["scalar"] = "scalar"
    value: Any = None


class RawSqlToken(BaseModel):
    """A raw SQL fragment inlined into the statement."""

    model_config = _FROZEN

    kind: Literal["raw"] = "raw"
    sql: str
    params: dict[str, Any] = Field(default_factory=dict)


class StructuredQueryRef(BaseModel):
    """A sub-select inlined as ``(<sql>)`` with its named params merged."""

    model_config = _FROZEN

    kind: Literal["query"] = "query"
    query: SelectQuery


Cell = Annotated[
    ScalarValue | RawSqlToken | StructuredQueryRef,
    Field(discriminator="kind"),
]


def is_scalar(value: Any) -> bool:
    """Return ``True`` if ``value`` may be bound directly."""
    return isinstance(value, SCALAR_TYPES)


def to_cell(value: Any) -> Cell:
    """Resolve a caller-supplied value into a typed :data:`Cell`.

    Raises:
        InvalidArgumentError: For sequences, mappings and other non-scalar
            values that are not a :class:`RawSql` or :class:`SelectQuery`.
    """
    if isinstance(value, (ScalarValue, RawSqlToken, StructuredQueryRef)):
        return value
    if isinstance(value, RawSql):
        return RawSqlToken(sql=value.sql, params=value.params)
    if isinstance(value, SelectQuery):
        return StructuredQueryRef(query=value)
    if is_scalar(value):
        return ScalarValue(value=value)
    raise InvalidArgumentError(
        f"Unsupported parameter value of type '{type(value).__name__}'. "
        "Only scalars, RawSql and SelectQuery values can be used.",
        details={"type": type(value).__name__},
    )
