"""Logging configuration for the model service and its jobs."""
from __future__ import annotations

import logging
import os
from typing import Mapping

LOG_LEVEL_ENV = "GY4K_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that are chatty at INFO; held at WARNING unless debugging.
NOISY_LOGGERS: Mapping[str, int] = {
    "apscheduler": logging.WARNING,
    "urllib3": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def resolve_level(level: str | int | None) -> int:
    """Translate a name, number or ``None`` into a numeric level.

    ``None`` reads ``GY4K_LOG_LEVEL``; unknown names fall back to INFO.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    mapping = logging.getLevelNamesMapping()
    return mapping.get(level.strip().upper(), logging.INFO)


def configure_logging(level: str | int | None = None, *, force: bool = False) -> int:
    """Configure root console logging and return the level applied.

    When the root logger already has handlers only the level changes,
    unless ``force`` is set.
    """

    resolved = resolve_level(level)
    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved)
    else:
        logging.basicConfig(level=resolved, format=LOG_FORMAT, force=force)

    for name, floor in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(resolved if resolved <= logging.DEBUG else floor)
    return resolved


__all__ = ["configure_logging", "resolve_level", "LOG_LEVEL_ENV"]
