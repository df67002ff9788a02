"""Environment-based configuration.

Settings are read from ``DBCOMMAND_*`` environment variables (and an optional
``.env`` file) with Pydantic BaseSettings::

    DBCOMMAND_DIALECT=postgres
    DBCOMMAND_DSN="host=localhost dbname=app"
    DBCOMMAND_TABLE_PREFIX=app_
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dbcommand.schema.dialect import DialectTarget


class CommandSettings(BaseSettings):
    """Connection and logging settings for dbcommand.

    Attributes:
        dialect: Target dialect name.
        dsn: SQLite database path or libpq connection string.
        table_prefix: Substituted for ``%`` in ``{{%table}}`` shorthand.
        foreign_keys: Enable SQLite foreign-key enforcement on connect.
        log_level: Level for the ``dbcommand`` logger.
        log_json: Render log events as JSON instead of console key/values.
    """

    model_config = SettingsConfigDict(
        env_prefix="DBCOMMAND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dialect: DialectTarget = Field(default="sqlite", description="Target dialect")
    dsn: str = Field(default=":memory:", description="Database path or DSN")
    table_prefix: str = Field(default="", description="Table prefix for {{%name}}")
    foreign_keys: bool = Field(default=False, description="SQLite PRAGMA foreign_keys")
    log_level: str = Field(default="WARNING", description="Logging level")
    log_json: bool = Field(default=False, description="JSON log rendering")


@lru_cache(maxsize=1)
def get_settings() -> CommandSettings:
    """Return the process-wide settings instance."""
    return CommandSettings()
