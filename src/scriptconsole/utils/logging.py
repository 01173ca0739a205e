"""Logging setup for the scriptconsole CLI and endpoint."""

from __future__ import annotations

import logging
import sys

from scriptconsole.config.settings import LoggingConfig

PACKAGE_LOGGER = "scriptconsole"

# Handlers installed by setup_logging, replaced on every call.
_installed: list[logging.Handler] = []


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Route the ``scriptconsole`` loggers to stderr and an optional file.

    Safe to call more than once: handlers from a previous call are
    removed and closed, so reconfiguring never duplicates log lines.
    Handlers added by other code are left alone.

    Args:
        config: Logging section of the settings. Defaults to INFO on stderr.

    Returns:
        The package logger.
    """
    if config is None:
        config = LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    while _installed:
        handler = _installed.pop()
        package_logger.removeHandler(handler)
        handler.close()

    level = logging.getLevelName(config.level.upper())
    package_logger.setLevel(level if isinstance(level, int) else logging.INFO)

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        _installed.append(handler)

    package_logger.debug("Logging initialized at %s level", logging.getLevelName(package_logger.level))
    return package_logger
