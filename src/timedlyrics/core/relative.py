"""Detect and expand relative (duration-only) line timing."""

from statistics import median
from typing import List, Optional, Sequence, Tuple

from ..config import (
    DEFAULT_RELATIVE_WEIGHT,
    RELATIVE_MAX_END,
    RELATIVE_MAX_END_RATIO,
    RELATIVE_MIN_DISTINCT_STARTS,
    RELATIVE_MIN_DURATION,
    RELATIVE_ZERO_START_RATIO,
)
from ..utils.logging import get_logger
from .models import CandidateTiming
from .selection import count_monotonic_breaks
from .waveform import expand_with_envelope

logger = get_logger(__name__)

_ZERO_EPSILON = 1e-3


def is_relative_timing(
    candidates: Sequence[CandidateTiming], duration: Optional[float] = None
) -> bool:
    """Return True when timestamps look like per-line durations, not offsets.

    Two signals: every line ends within the first few seconds of a long
    track, or nearly every line starts at zero while the starts are either
    out of order or barely distinct.
    """
    if not candidates:
        return False

    ends = [c.end for c in candidates if c.end is not None]
    if duration is not None and duration > RELATIVE_MIN_DURATION and ends:
        if max(ends) < min(RELATIVE_MAX_END, RELATIVE_MAX_END_RATIO * duration):
            logger.debug(
                f"Relative timing: max end {max(ends):.3f}s in a {duration:.1f}s track"
            )
            return True

    starts = [c.start for c in candidates if c.start is not None]
    zero_starts = sum(1 for s in starts if abs(s) <= _ZERO_EPSILON)
    if zero_starts >= RELATIVE_ZERO_START_RATIO * len(candidates):
        distinct = {round(s, 3) for s in starts}
        if count_monotonic_breaks(candidates) > 0 or len(distinct) < RELATIVE_MIN_DISTINCT_STARTS:
            logger.debug(
                f"Relative timing: {zero_starts}/{len(candidates)} starts at zero"
            )
            return True
    return False


def relative_weights(candidates: Sequence[CandidateTiming]) -> List[float]:
    """Per-line relative weight: span when present, else bare end.

    Missing or non-positive weights fall back to the median observed weight.
    """
    raw: List[Optional[float]] = []
    for c in candidates:
        weight = None
        if c.start is not None and c.end is not None and c.end - c.start > 0:
            weight = c.end - c.start
        elif c.end is not None and c.end > 0:
            weight = c.end
        raw.append(weight)

    observed = [w for w in raw if w is not None]
    fallback = median(observed) if observed else DEFAULT_RELATIVE_WEIGHT
    return [w if w is not None else fallback for w in raw]


def line_boundaries(weights: Sequence[float], total_seconds: float) -> List[float]:
    """Lay weights back-to-back from zero, scaled to fill ``total_seconds``."""
    boundaries = [0.0]
    weight_sum = sum(weights)
    scale = total_seconds / weight_sum if weight_sum > 0 else 1.0
    for weight in weights:
        boundaries.append(boundaries[-1] + weight * scale)
    return boundaries


def expand_uniform(
    candidates: Sequence[CandidateTiming], duration: Optional[float] = None
) -> List[CandidateTiming]:
    weights = relative_weights(candidates)
    total = duration if duration is not None else sum(weights)
    boundaries = line_boundaries(weights, total)
    return [
        CandidateTiming(text=c.text, start=boundaries[i], end=boundaries[i + 1])
        for i, c in enumerate(candidates)
    ]


def expand_relative_timing(
    candidates: Sequence[CandidateTiming],
    duration: Optional[float] = None,
    envelope: Optional[Sequence[float]] = None,
) -> Tuple[List[CandidateTiming], str]:
    """Turn relative timing into an absolute timeline.

    Envelope guidance is preferred when an envelope and a duration are both
    available; otherwise lines are laid out uniformly by weight.

    Returns:
        Tuple of (expanded candidates, method) with method "envelope" or "uniform".
    """
    if not candidates:
        return [], "uniform"

    weights = relative_weights(candidates)
    if envelope and duration is not None:
        boundaries = expand_with_envelope(weights, envelope, duration)
        if boundaries is not None:
            expanded = [
                CandidateTiming(text=c.text, start=boundaries[i], end=boundaries[i + 1])
                for i, c in enumerate(candidates)
            ]
            return expanded, "envelope"
        logger.debug("Envelope guidance unavailable, expanding uniformly")

    return expand_uniform(candidates, duration), "uniform"
