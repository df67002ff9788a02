"""Pydantic models for table metadata used by the SQL builders.

Schema introspection itself is an external concern: the caller supplies a
:class:`SchemaProvider` (e.g. a :class:`SchemaSnapshot` filled by hand or by
:func:`~dbcommand.schema.converters.schema_from_sqlalchemy`).  The builders
only ask for primary keys and unique constraints to derive upsert conflict
targets.
"""
from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class ColumnInfo(BaseModel):
    """Metadata for a single column.

    Attributes:
        name: Column name.
        type: SQL type string (e.g. ``'TEXT'``, ``'INTEGER'``).
        nullable: Whether the column can be NULL.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str = ""
    nullable: bool = True


class TableSchema(BaseModel):
    """Metadata for a single table.

    Attributes:
        name: Table name.
        columns: Ordered list of column metadata.
        primary_key: Primary-key column names, in key order.
        unique_constraints: Column lists of each UNIQUE constraint.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    columns: list[ColumnInfo] = Field(default_factory=list)
    primary_key: list[str] = Field(default_factory=list)
    unique_constraints: list[list[str]] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        """Returns all column names for this table."""
        return [c.name for c in self.columns]

    def conflict_target(self) -> list[str]:
        """Return the columns an upsert collides on.

        The primary key wins; otherwise the first unique constraint is used.
        An empty list means the table declares no such constraint.
        """
        if self.primary_key:
            return list(self.primary_key)
        for constraint in self.unique_constraints:
            if constraint:
                return list(constraint)
        return []


class SchemaProvider(Protocol):
    """Anything that can look up table metadata by name."""

    def get_table_schema(self, name: str) -> TableSchema | None: ...


class SchemaSnapshot(BaseModel):
    """A static set of table schemas implementing :class:`SchemaProvider`."""

    model_config = ConfigDict(extra="forbid")

    tables: list[TableSchema] = Field(default_factory=list)

    def get_table_schema(self, name: str) -> TableSchema | None:
        """Returns the TableSchema for the given table name, or ``None``."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    @property
    def table_names(self) -> list[str]:
        """Returns all table names in the snapshot."""
        return [t.name for t in self.tables]
