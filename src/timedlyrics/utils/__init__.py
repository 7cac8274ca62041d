"""Utility modules."""

from .logging import setup_logging, get_logger
from .validation import (
    validate_track_id,
    validate_format,
    validate_duration,
    validate_output_path,
)
from .cache import TimelineCache

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_track_id",
    "validate_format",
    "validate_duration",
    "validate_output_path",
    "TimelineCache",
]
