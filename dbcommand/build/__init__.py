"""dbcommand build layer: logical operations and raw SQL → dialect SQL."""
from dbcommand.build.base import BuiltSQL, CommandBuilder
from dbcommand.build.mysql import MySQLCommandBuilder
from dbcommand.build.params import ParameterSet
from dbcommand.build.postgres import PostgresCommandBuilder
from dbcommand.build.quoter import Quoter
from dbcommand.build.registry import BuilderFactory
from dbcommand.build.splitter import split
from dbcommand.build.sqlite import SQLiteCommandBuilder

BuilderFactory.register_class("sqlite", SQLiteCommandBuilder)
BuilderFactory.register_class("postgres", PostgresCommandBuilder)
BuilderFactory.register_class("mysql", MySQLCommandBuilder)

__all__ = [
    "BuiltSQL",
    "CommandBuilder",
    "BuilderFactory",
    "MySQLCommandBuilder",
    "ParameterSet",
    "PostgresCommandBuilder",
    "Quoter",
    "SQLiteCommandBuilder",
    "split",
]
