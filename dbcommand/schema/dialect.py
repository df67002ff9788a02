"""Immutable per-dialect configuration.

A :class:`DialectConfig` carries everything the quoter, builders and error
classifier need to know about a target engine: quote characters, the
driver's placeholder style and which native error codes denote integrity
violations.  Instances are frozen and passed explicitly at construction
time::

    from dbcommand.schema.dialect import DialectConfig
    from dbcommand.build.quoter import Quoter

    quoter = Quoter(DialectConfig.for_target("sqlite"))
    quoter.quote_table_name("customer")   # '`customer`'
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from dbcommand.errors import ConfigurationError

#: Supported dialect targets.
DialectTarget = Literal["sqlite", "postgres", "mysql"]

#: Placeholder styles understood by :func:`dbcommand.build.params.render`.
ParamStyle = Literal["named", "pyformat"]


class DialectConfig(BaseModel):
    """Quoting, placeholder and error-code rules for one SQL dialect.

    Attributes:
        name: Canonical dialect name.
        table_quote: Opening and closing quote characters for table names.
        column_quote: Opening and closing quote characters for column names.
        param_style: Placeholder style expected by the native driver.
        integrity_codes: Native error codes that denote a constraint violation.
        integrity_code_prefixes: Code prefixes (SQLSTATE classes) that denote
            a constraint violation.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    table_quote: tuple[str, str] = ('"', '"')
    column_quote: tuple[str, str] = ('"', '"')
    param_style: ParamStyle = "named"
    integrity_codes: frozenset[str] = Field(default_factory=frozenset)
    integrity_code_prefixes: tuple[str, ...] = ()

    @classmethod
    def for_target(cls, target: str) -> DialectConfig:
        """Return the built-in configuration for ``target``.

        Raises:
            ConfigurationError: If ``target`` is not a known dialect.
        """
        config = _BUILTIN.get(target)
        if config is None:
            raise ConfigurationError(
                f"Unsupported dialect target: '{target}'. Known targets: {sorted(_BUILTIN)}."
            )
        return config


SQLITE = DialectConfig(
    name="sqlite",
    table_quote=("`", "`"),
    column_quote=("`", "`"),
    param_style="named",
    # SQLITE_CONSTRAINT; extended codes are reduced to the primary code by the driver.
    integrity_codes=frozenset({"19"}),
)

POSTGRES = DialectConfig(
    name="postgres",
    param_style="pyformat",
    integrity_code_prefixes=("23",),
)

MYSQL = DialectConfig(
    name="mysql",
    table_quote=("`", "`"),
    column_quote=("`", "`"),
    param_style="pyformat",
    integrity_codes=frozenset(
        {"1022", "1048", "1052", "1062", "1169", "1216", "1217", "1451", "1452", "1557", "1586"}
    ),
)

_BUILTIN: dict[str, DialectConfig] = {c.name: c for c in (SQLITE, POSTGRES, MYSQL)}
