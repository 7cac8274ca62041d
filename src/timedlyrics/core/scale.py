"""Infer the unit multiplier of ambiguous provider timestamps."""

from typing import Iterable, List, Optional, Sequence

from ..config import MILLISECOND_HINT, SCALE_CANDIDATES, SCALE_TOLERANCE
from ..utils.logging import get_logger
from .models import CandidateTiming

logger = get_logger(__name__)


def timestamp_values(candidates: Sequence[CandidateTiming]) -> List[float]:
    values: List[float] = []
    for candidate in candidates:
        if candidate.start is not None:
            values.append(candidate.start)
        if candidate.end is not None:
            values.append(candidate.end)
    return values


def infer_scale(values: Iterable[float], duration: Optional[float] = None) -> float:
    """Return the multiplier that converts raw timestamps to seconds.

    With a known duration, the candidate whose scaled maximum lands closest
    to it wins, provided it is within the tolerance. Without one, very large
    values are taken to be milliseconds.
    """
    values = list(values)
    if not values:
        return 1.0
    peak = max(values)
    if peak <= 0:
        return 1.0

    if duration is None:
        return 0.001 if peak > MILLISECOND_HINT else 1.0

    best_scale = 1.0
    best_deviation = None
    for multiplier in SCALE_CANDIDATES:
        deviation = abs(peak * multiplier - duration) / duration
        if best_deviation is None or deviation < best_deviation:
            best_scale, best_deviation = multiplier, deviation

    if best_deviation is not None and best_deviation <= SCALE_TOLERANCE:
        if best_scale != 1.0:
            logger.debug(
                f"Inferred timestamp scale x{best_scale} "
                f"(max {peak:.3f} vs duration {duration:.3f})"
            )
        return best_scale
    return 1.0


def apply_scale(
    candidates: Sequence[CandidateTiming], scale: float
) -> List[CandidateTiming]:
    if scale == 1.0:
        return list(candidates)
    return [
        CandidateTiming(
            text=c.text,
            start=c.start * scale if c.start is not None else None,
            end=c.end * scale if c.end is not None else None,
        )
        for c in candidates
    ]
