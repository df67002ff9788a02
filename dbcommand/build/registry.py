"""Builder registry (Open/Closed Principle).

``BuilderFactory``
    Central registry for :class:`~dbcommand.build.base.CommandBuilder`
    implementations.  Register a new builder once; connections look it up
    automatically by dialect name.

Usage::

    from dbcommand.build.registry import BuilderFactory

    @BuilderFactory.register("oracle")
    class OracleCommandBuilder(CommandBuilder):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from dbcommand.build.base import CommandBuilder
from dbcommand.build.quoter import Quoter
from dbcommand.errors import ConfigurationError
from dbcommand.schema.table import SchemaProvider


class BuilderFactory:
    """Registry mapping dialect names to :class:`CommandBuilder` classes.

    Example::

        builder = BuilderFactory.create("sqlite", Quoter(SQLITE), snapshot)
    """

    _builders: ClassVar[dict[str, type[CommandBuilder]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[CommandBuilder]], type[CommandBuilder]]:
        """Decorator that registers a builder class under ``name``.

        Args:
            name: The dialect name (e.g. ``"postgres"``).

        Returns:
            A decorator that registers and returns the builder class.
        """

        def decorator(builder_cls: type[CommandBuilder]) -> type[CommandBuilder]:
            cls._builders[name] = builder_cls
            return builder_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, builder_cls: type[CommandBuilder]) -> None:
        """Register a builder class without using the decorator form."""
        cls._builders[name] = builder_cls

    @classmethod
    def create(
        cls,
        name: str,
        quoter: Quoter,
        schema: SchemaProvider | None = None,
    ) -> CommandBuilder:
        """Instantiate the builder registered for ``name``.

        Raises:
            ConfigurationError: If no builder is registered for ``name``.
        """
        builder_cls = cls._builders.get(name)
        if builder_cls is None:
            registered = sorted(cls._builders)
            raise ConfigurationError(
                f"Unsupported dialect: '{name}'. Registered dialects: {registered}."
            )
        return builder_cls(quoter, schema)

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(cls._builders)
