"""Utilities for building a SchemaSnapshot from external sources.

SQLAlchemy converter
--------------------
:func:`schema_from_sqlalchemy` reflects a live database engine and returns a
:class:`~dbcommand.schema.table.SchemaSnapshot` with primary keys and unique
constraints, which is all the upsert builder needs.

Install the optional dependency before using this module::

    pip install "dbcommand[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from dbcommand.schema.converters import schema_from_sqlalchemy

    engine = create_engine("sqlite:///mydb.db")
    snapshot = schema_from_sqlalchemy(engine)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dbcommand.schema.table import ColumnInfo, SchemaSnapshot, TableSchema

if TYPE_CHECKING:
    from sqlalchemy import Engine, MetaData


def schema_from_sqlalchemy(
    engine: Engine,
    *,
    include_tables: list[str] | None = None,
    schema: str | None = None,
) -> SchemaSnapshot:
    """Build a :class:`SchemaSnapshot` by reflecting a SQLAlchemy engine.

    Args:
        engine: A connected :class:`sqlalchemy.engine.Engine` instance.
        include_tables: Optional allowlist of table names to reflect.
            When ``None`` all tables in the schema are reflected.
        schema: Optional database schema name (e.g. ``"public"`` for
            PostgreSQL).  Passed directly to
            :meth:`sqlalchemy.schema.MetaData.reflect`.

    Returns:
        A fully populated :class:`SchemaSnapshot`.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
    """
    try:
        from sqlalchemy import MetaData as _MetaData
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for schema_from_sqlalchemy(). "
            'Install it with: pip install "dbcommand[sqlalchemy]"'
        ) from exc

    metadata = _MetaData()
    with engine.connect() as conn:
        metadata.reflect(bind=conn, only=include_tables, schema=schema)

    return _metadata_to_snapshot(metadata)


def _metadata_to_snapshot(metadata: MetaData) -> SchemaSnapshot:
    """Convert a reflected :class:`~sqlalchemy.schema.MetaData` into a
    :class:`SchemaSnapshot`.
    """
    from sqlalchemy import UniqueConstraint

    tables: list[TableSchema] = []
    for table in metadata.sorted_tables:
        unique: list[list[str]] = [
            [col.name for col in constraint.columns]
            for constraint in table.constraints
            if isinstance(constraint, UniqueConstraint)
        ]
        # CREATE UNIQUE INDEX is reflected as an Index, not a constraint.
        for index in table.indexes:
            cols = [col.name for col in index.columns]
            if index.unique and cols and cols not in unique:
                unique.append(cols)

        tables.append(
            TableSchema(
                name=table.name,
                columns=[
                    ColumnInfo(
                        name=col.name,
                        type=str(col.type),
                        nullable=col.nullable is not False,
                    )
                    for col in table.columns
                ],
                primary_key=[col.name for col in table.primary_key.columns],
                unique_constraints=unique,
            )
        )

    return SchemaSnapshot(tables=tables)
