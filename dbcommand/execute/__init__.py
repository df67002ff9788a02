"""dbcommand execution layer: driver adapters and error classification."""
from dbcommand.execute.classifier import ErrorClassifier
from dbcommand.execute.driver import DBAPIDriver, Driver, NativeError, PreparedStatement, Result
from dbcommand.execute.postgres import PsycopgDriver
from dbcommand.execute.sqlite import SQLiteDriver

__all__ = [
    "DBAPIDriver",
    "Driver",
    "ErrorClassifier",
    "NativeError",
    "PreparedStatement",
    "PsycopgDriver",
    "Result",
    "SQLiteDriver",
]
