"""Logger hierarchy for sitecraft modules and the CLI console handler."""

from __future__ import annotations

import logging

_LOGGER_NAME = "sitecraft"
_CONSOLE_HANDLER = "sitecraft-console"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``sitecraft.<name>``, or the package logger without a name."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send sitecraft log records to stderr.

    Calling this again replaces the console handler rather than adding a
    second one, so commands invoked repeatedly in one process (as the tests
    do) print each record once.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if handler.get_name() == _CONSOLE_HANDLER:
            logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.set_name(_CONSOLE_HANDLER)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[sitecraft] %(levelname)s %(message)s"))
    logger.addHandler(console)
    return logger


__all__ = ["configure_logging", "get_logger"]
