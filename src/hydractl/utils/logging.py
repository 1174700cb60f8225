"""Logging setup for hydractl.

The service logs every request and response line through the
``hydractl`` logger; this module wires that logger to stderr and an
optional log file.
"""

from __future__ import annotations

import logging
import sys

from hydractl.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the 'hydractl' logger from a LoggingConfig.

    Calling this again replaces the handlers installed by the previous
    call instead of stacking duplicates.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    app_logger = logging.getLogger("hydractl")
    app_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    app_logger.addHandler(stderr_handler)

    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    app_logger.info("Logging initialized at %s level", config.level)
    return app_logger
