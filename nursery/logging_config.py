"""Logging setup for applications embedding the nursery core."""

from __future__ import annotations

import logging
import os
from typing import Iterable

from nursery.exceptions import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV = "NURSERY_LOG_LEVEL"


def configure_logging(
    *,
    level: str | None = None,
    verbose_modules: Iterable[str] | None = None,
) -> logging.Logger:
    """Route the ``nursery`` loggers to stderr.

    The nursery modules only ever log through ``logging.getLogger(__name__)``;
    embedding applications call this once at start-up to get readable output.

    Args:
        level: Level name for the package. Falls back to ``NURSERY_LOG_LEVEL``,
            then INFO.
        verbose_modules: Submodules (``"trough"``, ``"tracker"``...) to run at
            DEBUG regardless of ``level``, e.g. to trace one simulation.

    Returns:
        The package logger (``nursery``).

    Raises:
        ConfigurationError: ``level`` is not a logging level name.
    """
    resolved_level = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    if not isinstance(logging.getLevelName(resolved_level), int):
        raise ConfigurationError(f"Unknown log level: {resolved_level!r}")
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    app_logger = logging.getLogger("nursery")
    app_logger.setLevel(resolved_level)

    for module in verbose_modules or ():
        logging.getLogger(f"nursery.{module}").setLevel(logging.DEBUG)

    app_logger.debug("Logging configured at %s", resolved_level)
    return app_logger
