"""Logging configuration using loguru.

Library modules log through ``loguru.logger`` but stay silent until the
application calls setup_logging(); stdlib logging is routed through the
same sink.
"""

from __future__ import annotations

import logging
import os
import sys

from loguru import logger

LOG_LEVEL_ENV = "NODEWS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


class _InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk the call stack so loguru reports the real call-site
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def default_level(verbose: bool = False) -> str:
    """DEBUG when verbose, else $NODEWS_LOG_LEVEL, else WARNING."""
    if verbose:
        return "DEBUG"
    return os.environ.get(LOG_LEVEL_ENV, "").strip().upper() or DEFAULT_LOG_LEVEL


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Send nodews (and stdlib) logs to stderr at level. Call once at startup."""
    level = level.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
    )
    logger.enable("nodews")

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    logger.debug("Logging initialised (level={})", level)
