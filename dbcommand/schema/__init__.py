"""dbcommand schema models: dialect configuration, table metadata, cell values."""
from dbcommand.schema.converters import schema_from_sqlalchemy
from dbcommand.schema.dialect import MYSQL, POSTGRES, SQLITE, DialectConfig
from dbcommand.schema.table import ColumnInfo, SchemaProvider, SchemaSnapshot, TableSchema
from dbcommand.schema.values import (
    Cell,
    RawSql,
    RawSqlToken,
    ScalarValue,
    SelectQuery,
    StructuredQueryRef,
    to_cell,
)

__all__ = [
    "DialectConfig",
    "MYSQL",
    "POSTGRES",
    "SQLITE",
    "ColumnInfo",
    "SchemaProvider",
    "SchemaSnapshot",
    "TableSchema",
    "schema_from_sqlalchemy",
    "Cell",
    "RawSql",
    "RawSqlToken",
    "ScalarValue",
    "SelectQuery",
    "StructuredQueryRef",
    "to_cell",
]
