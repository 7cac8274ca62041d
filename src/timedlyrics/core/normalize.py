"""Final pass that turns candidate timing into committed LineTiming values."""

import math
from statistics import median
from typing import List, Optional, Sequence

from ..config import DEFAULT_LINE_DURATION, MIN_LINE_DURATION
from ..utils.logging import get_logger
from .models import CandidateTiming, LineTiming
from .scale import apply_scale

logger = get_logger(__name__)

_MIN_LINE_MS = int(round(MIN_LINE_DURATION * 1000))


def _to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def fallback_duration(candidates: Sequence[CandidateTiming]) -> float:
    """Median of the valid positive durations, or the default."""
    durations = [
        c.end - c.start for c in candidates if c.is_valid and c.end > c.start
    ]
    return median(durations) if durations else DEFAULT_LINE_DURATION


def _commit(start_ms: int, end_ms: int, limit_ms: Optional[int]):
    """Apply bounds and the minimum line length in whole milliseconds."""
    if limit_ms is not None:
        start_ms = min(start_ms, limit_ms - _MIN_LINE_MS)
        end_ms = min(end_ms, limit_ms)
    start_ms = max(start_ms, 0)
    end_ms = max(end_ms, start_ms + _MIN_LINE_MS)

    # Millisecond values are not exact in binary; keep the float comparison true
    if end_ms / 1000 < start_ms / 1000 + MIN_LINE_DURATION:
        if limit_ms is not None and end_ms + 1 > limit_ms and start_ms > 0:
            start_ms -= 1
        else:
            end_ms += 1
    return start_ms, end_ms


def normalize_timings(
    candidates: Sequence[CandidateTiming],
    duration: Optional[float] = None,
    scale: float = 1.0,
) -> List[LineTiming]:
    """Produce an ordered, bounded, millisecond-rounded timeline.

    Starts never decrease, every line lasts at least ``MIN_LINE_DURATION``,
    and with a known duration every value lies in ``[0, duration]``.
    Missing or inverted ends borrow the next line's start, else the median
    observed line duration. Sequences with no usable timestamp give ``[]``.
    """
    scaled = apply_scale(candidates, scale)
    starts = [c.start for c in scaled if c.start is not None]
    if not starts and not any(c.end is not None for c in scaled):
        return []

    shift = max(0.0, -min(starts)) if starts else 0.0
    fallback = fallback_duration(scaled)
    limit_ms = int(math.floor(duration * 1000 + 1e-6)) if duration else None

    shifted_starts = [c.start + shift if c.start is not None else None for c in scaled]

    timings: List[LineTiming] = []
    prev_start_ms = 0
    prev_end = 0.0
    for i, candidate in enumerate(scaled):
        start = shifted_starts[i]
        if start is None:
            start = prev_end
        start_ms = max(_to_ms(start), prev_start_ms)
        start = start_ms / 1000
        end = candidate.end + shift if candidate.end is not None else None

        if end is None or end <= start:
            next_start = shifted_starts[i + 1] if i + 1 < len(scaled) else None
            if next_start is not None and next_start > start:
                end = next_start
            else:
                end = start + fallback

        start_ms, end_ms = _commit(start_ms, max(_to_ms(end), start_ms), limit_ms)

        timings.append(
            LineTiming(text=candidate.text, start=start_ms / 1000, end=end_ms / 1000)
        )
        prev_start_ms = start_ms
        prev_end = end_ms / 1000

    if shift:
        logger.debug(f"Shifted timeline by {shift:.3f}s to start at zero")
    return timings
