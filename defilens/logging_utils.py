"""Shared logging helpers for DeFi Lens."""

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _env_level(default: int) -> int:
    raw = os.getenv("DEFILENS_LOG_LEVEL")
    if not raw:
        return default
    val = raw.strip().upper()
    if val.isdigit():
        return int(val)
    return getattr(logging, val, default)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the ``defilens`` logger tree (console + optional file).

    Module loggers are plain ``logging.getLogger(__name__)`` children of this one.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Optional path for an additional file handler

    Returns:
        The package root logger
    """
    logger = logging.getLogger("defilens")
    logger.handlers = []
    logger.setLevel(_env_level(logging.DEBUG if verbose else logging.INFO))

    formatter = logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
