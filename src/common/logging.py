"""Logging configuration for the autoblog engine.

Every component logs through ``setup_logging(module_name=...)``. The level
comes from ``LOG_LEVEL`` (DEBUG, INFO, WARNING, ...) unless given explicitly;
unknown names fall back to INFO.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def level_from_env(default: int = logging.INFO) -> int:
    name = os.getenv("LOG_LEVEL", "").strip().upper()
    level = getattr(logging, name, None) if name else None
    return level if isinstance(level, int) else default


def setup_logging(
    level: Optional[int] = None,
    module_name: str = "autoblog",
) -> logging.Logger:
    """Return a stdout logger for ``module_name``.

    Calling this twice for the same name does not add a second handler.

    Args:
        level: Logging level; None reads ``LOG_LEVEL``.
        module_name: Logger name, usually the dotted component path.
    """
    logger = logging.getLogger(module_name)
    if logger.handlers:
        return logger

    if level is None:
        level = level_from_env()
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    return logger
