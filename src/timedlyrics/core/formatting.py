"""Render reconciled timelines as LRC or SRT text.

This module handles:
- LRC timestamps ``[MM:SS.hh]`` (start instants only)
- SRT timestamps ``HH:MM:SS,mmm`` with numbered start/end cues
"""

import math
from typing import List, Sequence

from ..exceptions import ValidationError
from ..utils.validation import validate_format
from .models import LineTiming


def _split_seconds(seconds: float):
    # Work in whole milliseconds so 1.23 does not floor to 1.229
    total_ms = int(math.floor(max(seconds, 0.0) * 1000 + 1e-6))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return hours, minutes, secs, millis


def format_lrc_time(seconds: float) -> str:
    """Format seconds as an LRC tag; minutes keep counting past an hour."""
    hours, minutes, secs, millis = _split_seconds(seconds)
    return f"[{hours * 60 + minutes:02d}:{secs:02d}.{millis // 10:02d}]"


def format_srt_time(seconds: float) -> str:
    hours, minutes, secs, millis = _split_seconds(seconds)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def _require_lines(timings: Sequence[LineTiming]) -> None:
    if not timings:
        raise ValidationError("No timed lyrics to render")


def to_lrc(timings: Sequence[LineTiming]) -> str:
    """One ``[MM:SS.hh]text`` line per entry."""
    _require_lines(timings)
    return "\n".join(f"{format_lrc_time(t.start)}{t.text}" for t in timings)


def to_srt(timings: Sequence[LineTiming]) -> str:
    """Numbered SRT cues separated by blank lines."""
    _require_lines(timings)
    cues: List[str] = []
    for index, timing in enumerate(timings, start=1):
        cues.append(
            f"{index}\n"
            f"{format_srt_time(timing.start)} --> {format_srt_time(timing.end)}\n"
            f"{timing.text}\n"
        )
    return "\n".join(cues)


def render_timed_text(timings: Sequence[LineTiming], fmt: str = "lrc") -> str:
    fmt = validate_format(fmt)
    if fmt == "srt":
        return to_srt(timings)
    return to_lrc(timings)
