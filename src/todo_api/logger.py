"""
Centralized logging configuration.

All modules should use `get_logger(__name__)` to obtain a logger instance.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


# PUBLIC_INTERFACE
def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once.

    Calling again only adjusts the level when one is given, so the app factory
    can apply LOG_LEVEL after modules have already created their loggers.
    """
    global _initialized
    root = logging.getLogger()
    if not _initialized:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        _initialized = True
    if level:
        root.setLevel(getattr(logging, level.upper(), logging.INFO))


# PUBLIC_INTERFACE
def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    configure_logging()
    return logging.getLogger(name)
