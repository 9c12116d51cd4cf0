# -*- coding: utf-8 -*-
"""Logging utilities."""
import logging
import os
import sys
from typing import Optional

from sudoku_engine.common.constants import LOG_LEVEL_ENV_VAR

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(filename)s:%(lineno)d] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_root_name = "sudoku_engine"


def _resolve_level(level: Optional[str | int]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return level


def get_logger(name: Optional[str] = None, level: Optional[str | int] = None) -> logging.Logger:
    """Get a logger under the package root.

    Args:
        name (`str`): Logger name. Names outside the package are nested under
            the package root logger so one handler serves them all.
        level (`str` or `int`): Overrides the level read from
            `SUDOKU_ENGINE_LOG_LEVEL`.

    Returns:
        `logging.Logger`: The configured logger.
    """
    root = logging.getLogger(_root_name)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        root.setLevel(_resolve_level(None))

    if name is None or name == _root_name:
        logger = root
    elif name.startswith(_root_name + "."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{_root_name}.{name}")

    if level is not None:
        logger.setLevel(_resolve_level(level))
    return logger
