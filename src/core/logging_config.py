"""Logging setup for recordguard.

Library modules only create loggers (`logging.getLogger(__name__)`); the
CLI calls `configure_logging` once at startup. Output goes through Rich so
log lines match the rest of the terminal UI.

Typical usage::

    from core.logging_config import configure_logging

    log = configure_logging(settings.log_level)
    log.info("recordguard started")
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOGGER_NAME = "recordguard"

_configured = False


def _parse_level(value: str | int | None) -> int:
    """Map 'DEBUG'/'info'/20 to a logging constant (WARNING if unknown)."""

    if isinstance(value, int):
        return value
    if not value:
        return logging.WARNING
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(
    level: str | int | None = None,
    *,
    console: Console | None = None,
    force: bool = False,
) -> logging.Logger:
    """Install a RichHandler on the root logger and return the service logger.

    Calling it again is a no-op unless `force=True`.
    """

    global _configured
    if _configured and not force:
        return logging.getLogger(DEFAULT_LOGGER_NAME)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=_parse_level(level),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    _configured = True
    return logging.getLogger(DEFAULT_LOGGER_NAME)


__all__ = ["DEFAULT_LOGGER_NAME", "configure_logging"]
