"""Logging setup utilities for mockshell.

Configures the ``mockshell`` logger and the ``asyncssh`` transport
logger from the logging configuration settings. Both share the same
handlers; asyncssh gets its own, usually quieter, level.
"""

from __future__ import annotations

import logging
import sys

import asyncssh

from mockshell.config.settings import LoggingConfig

APP_LOGGER_NAME = "mockshell"
TRANSPORT_LOGGER_NAME = "asyncssh"


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _install(logger: logging.Logger, handlers: list[logging.Handler]) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure server and transport logging.

    Safe to call more than once: handlers from an earlier call are
    closed and replaced rather than duplicated.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, asyncssh at WARNING, stderr output).

    Returns:
        The configured ``mockshell`` logger.
    """
    if config is None:
        config = LoggingConfig()

    handlers = _build_handlers(config)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    _install(app_logger, handlers)

    asyncssh.set_log_level(getattr(logging, config.library_level.upper(), logging.WARNING))
    _install(logging.getLogger(TRANSPORT_LOGGER_NAME), handlers)

    app_logger.debug(
        "Logging initialized at %s level (asyncssh at %s)", config.level, config.library_level
    )
    return app_logger
