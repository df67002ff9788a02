"""Shared pytest fixtures for dbcommand unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from dbcommand.build.mysql import MySQLCommandBuilder
from dbcommand.build.postgres import PostgresCommandBuilder
from dbcommand.build.quoter import Quoter
from dbcommand.build.sqlite import SQLiteCommandBuilder
from dbcommand.connection import Connection
from dbcommand.schema.dialect import MYSQL, POSTGRES, SQLITE
from dbcommand.schema.table import SchemaSnapshot
from tests.fixtures import load_ddl, load_schema_snapshot


@pytest.fixture(scope="session")
def snapshot() -> SchemaSnapshot:
    """Canonical schema snapshot shared across all tests."""
    return load_schema_snapshot()


@pytest.fixture(scope="session")
def sq_quoter() -> Quoter:
    return Quoter(SQLITE)


@pytest.fixture(scope="session")
def pg_quoter() -> Quoter:
    return Quoter(POSTGRES)


@pytest.fixture(scope="session")
def sq_builder(snapshot: SchemaSnapshot) -> SQLiteCommandBuilder:
    return SQLiteCommandBuilder(Quoter(SQLITE), snapshot)


@pytest.fixture(scope="session")
def pg_builder(snapshot: SchemaSnapshot) -> PostgresCommandBuilder:
    return PostgresCommandBuilder(Quoter(POSTGRES), snapshot)


@pytest.fixture(scope="session")
def my_builder(snapshot: SchemaSnapshot) -> MySQLCommandBuilder:
    return MySQLCommandBuilder(Quoter(MYSQL), snapshot)


@pytest.fixture()
def db(snapshot: SchemaSnapshot) -> Iterator[Connection]:
    """In-memory SQLite connection with the sample schema and FK enforcement."""
    conn = Connection.sqlite(":memory:", schema=snapshot, foreign_keys=True)
    conn.create_command(load_ddl("sqlite")).execute()
    yield conn
    conn.close()
