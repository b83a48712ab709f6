"""Logging wrapper for the GitHub Content Utility."""

from __future__ import annotations

import logging

from ..constants import DEFAULT_LOG_LEVEL


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Return a configured logger with a default format.

    The handler is attached once per logger; ``level`` (e.g. ``"DEBUG"``)
    overrides ``LOG_LEVEL`` on every call.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel((level or DEFAULT_LOG_LEVEL).upper())
    elif level:
        logger.setLevel(level.upper())
    return logger
