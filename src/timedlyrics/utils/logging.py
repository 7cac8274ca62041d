"""Logging configuration for TimedLyrics."""

import logging
import sys
from pathlib import Path
from typing import Optional

_QUIET_LOGGERS = ("urllib3", "requests")


def setup_logging(
    level: str = "INFO", log_file: Optional[Path] = None, verbose: bool = False
) -> logging.Logger:
    """Configure the package logger and return it.

    Console output goes to stderr so rendered lyrics can be piped from stdout.
    Calling this again replaces the previous handlers.
    """
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("timedlyrics")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    fmt = (
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        if verbose
        else "%(levelname)s: %(message)s"
    )
    formatter = logging.Formatter(fmt)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str = "timedlyrics") -> logging.Logger:
    return logging.getLogger(name)
