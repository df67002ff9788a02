"""Structured logging for dbcommand using structlog.

Events are emitted under the ``dbcommand`` stdlib logger hierarchy so host
applications keep control of handlers; :func:`configure_logging` attaches a
stream handler and the structlog processor chain (ISO-8601 timestamps, log
level, logger name, console or JSON rendering).

Usage:
    >>> from dbcommand.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("command.execute", dialect="sqlite", statements=2)
"""
from __future__ import annotations

import logging
from typing import Any

import structlog
from structlog.types import Processor

_ROOT_LOGGER = "dbcommand"
_configured = False


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure structlog and the ``dbcommand`` logger.

    Args:
        level: Level name; defaults to ``CommandSettings.log_level``.
        json: JSON rendering; defaults to ``CommandSettings.log_json``.
    """
    global _configured
    if level is None or json is None:
        from dbcommand.settings import get_settings

        settings = get_settings()
        level = level or settings.log_level
        json = settings.log_json if json is None else json

    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.propagate = False

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger, configuring logging on first use.

    Args:
        name: Logger name (typically ``__name__`` of the calling module)
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
