"""Logging utilities for streamcast.

Every module obtains its logger through :func:`get_logger`, so the whole
package shares one handler layout and one level switch. The initial level is
read from the ``STREAMCAST_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

_LEVEL_ENV_VAR = "STREAMCAST_LOG_LEVEL"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _parse_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


_DEFAULT_LEVEL = _parse_level(os.getenv(_LEVEL_ENV_VAR, "WARNING"))

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached to avoid duplicate handlers. The logger name should
    typically be `__name__` from the calling module.

    Args:
        name: Logger name (typically `__name__`). If None, returns the package
            logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from streamcast.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Re-estimated AR(2) coefficients")
    """
    if name is None:
        name = "streamcast"

    logger_name = name if name.startswith("streamcast") else f"streamcast.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    # Only configure if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_FORMAT))

        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the logging level for all streamcast loggers.

    Args:
        level: Logging level (logging.DEBUG, logging.INFO, etc.) or string
            ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
    """
    level = _parse_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure logging for streamcast.

    Replaces the handler of every cached logger. Loggers created afterwards
    pick up the new level but keep the default stderr handler.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses default.
        stream: Output stream (default: sys.stderr).

    Example:
        >>> import logging
        >>> from streamcast.logging import configure_logging
        >>> configure_logging(level=logging.DEBUG)
    """
    level = _parse_level(level)

    if stream is None:
        stream = sys.stderr

    formatter = logging.Formatter(format_string or _FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level
