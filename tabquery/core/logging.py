"""
Logging for the tabquery client.

Every module logs through ``get_logger(__name__)`` so output is grouped
under the ``tabquery`` namespace and honours ``TABQUERY_LOG_LEVEL``.
"""
from __future__ import annotations

import logging
import sys

from tabquery.core.config import get_settings


def get_logger(name: str) -> logging.Logger:
    settings = get_settings()
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger
