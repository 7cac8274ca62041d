"""Validation utilities."""

import logging
import re
from pathlib import Path
from typing import Optional

from ..config import SUPPORTED_FORMATS
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

_TRACK_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{2,127}$")
_SONG_URL_RE = re.compile(r"/song/([A-Za-z0-9_-]+)/?(?:[?#].*)?$")


def validate_track_id(track_id: str) -> str:
    """Validate a track identifier, accepting a song page URL as well."""
    if not track_id or not track_id.strip():
        raise ValidationError("Track id cannot be empty")

    track_id = track_id.strip()
    match = _SONG_URL_RE.search(track_id)
    if match:
        track_id = match.group(1)

    if not _TRACK_ID_RE.match(track_id):
        raise ValidationError(f"Invalid track id: {track_id}")
    return track_id


def validate_format(fmt: str) -> str:
    """Validate output format name."""
    fmt = (fmt or "").lower().strip()
    if fmt not in SUPPORTED_FORMATS:
        raise ValidationError(
            f"Unsupported format: {fmt!r}. Use one of: {', '.join(SUPPORTED_FORMATS)}"
        )
    return fmt


def validate_duration(duration: Optional[float]) -> Optional[float]:
    """Validate an explicit duration hint."""
    if duration is None:
        return None
    if duration <= 0:
        raise ValidationError("Duration must be positive")
    return duration


def validate_output_path(path: str, fmt: str) -> Path:
    """Validate and normalize output path."""
    output_path = Path(path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ValidationError(f"Cannot create output directory: {e}")

    if output_path.suffix.lower() != f".{fmt}":
        raise ValidationError(f"Output file must have .{fmt} extension")

    return output_path
