"""Logging setup for the schedule CLI.

Every module logs through logging.getLogger(__name__), so all loggers sit
under the "src" package logger. One stdout handler there covers both
src.common and src.nada_schedule.
"""

from __future__ import annotations

import logging
import sys

from .config import settings

PACKAGE_LOGGER = "src"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: int | str | None = None) -> int:
    """Turn "debug", "INFO", 10 or None (use settings.log_level) into a level number.

    Raises:
        ValueError: If the name is not a logging level.
    """
    if level is None:
        level = settings.log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(level: int | str | None = None, verbose: bool = False) -> logging.Logger:
    """Attach the stdout handler to the package logger and set its level.

    Safe to call repeatedly: the handler is added once and later calls only
    change the level. verbose forces DEBUG.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = logging.DEBUG if verbose else resolve_level(level)

    handler = next((h for h in logger.handlers if h.get_name() == PACKAGE_LOGGER), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(PACKAGE_LOGGER)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(resolved)
    handler.setLevel(resolved)
    return logger
