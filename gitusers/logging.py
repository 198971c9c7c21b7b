"""Provides a JSON-formatted logger for gitusers components."""

import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from .context import get_application_config

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def getLogger(name: str, stream=sys.stderr) -> logging.Logger:
    """
    Wrapper for :func:`logging.getLogger` that applies configuration.

    Parameters
    ----------
    name : str
    stream : IOBase

    Returns
    -------
    :class:`logging.Logger`

    """
    logger = logging.getLogger(name)
    if not any(getattr(h, '_gitusers', False) for h in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter(
            FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        ))
        handler._gitusers = True  # type: ignore
        logger.addHandler(handler)
    logger.setLevel(_level())
    return logger


def _level() -> int:
    config = get_application_config()
    level: Optional[str] = config.get('LOGLEVEL')
    try:
        return int(level) if level is not None else logging.INFO
    except (TypeError, ValueError):
        return logging.INFO
