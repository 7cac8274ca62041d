"""Reconcile provider line timing into a clean synchronized timeline.

Stages run in order, each producing a new sequence:

1. select the word- or line-derived timing candidate
2. infer the timestamp unit scale and detect relative timing
3. expand relative timing (envelope guided when possible)
4. resolve into LineTiming values
5. restore lines missing versus the reference lyrics
6. final normalization enforcing ordering and bounds
"""

from typing import Any, List, Optional, Sequence

from ..utils.cache import TimelineCache
from ..utils.logging import get_logger
from .models import (
    LineTiming,
    RawLine,
    ReconciliationContext,
    ReconciliationResult,
)
from .normalize import normalize_timings
from .payload import parse_payload
from .relative import expand_relative_timing, is_relative_timing
from .repair import repair_missing_lines
from .scale import apply_scale, infer_scale, timestamp_values
from .selection import select_timing_source

logger = get_logger(__name__)


def reconcile_timings(
    lines: Sequence[RawLine], context: Optional[ReconciliationContext] = None
) -> ReconciliationResult:
    """Run the full reconciliation pipeline over one provider response.

    Never raises on malformed numeric input; an empty or fully unusable
    line sequence yields an empty timeline.
    """
    context = context or ReconciliationContext()
    duration = context.duration

    usable = [line for line in lines if line.display_text]
    if not usable:
        return ReconciliationResult(timings=[])

    source, candidates, word_score, line_score = select_timing_source(usable)

    scale = infer_scale(timestamp_values(candidates), duration)
    scaled = apply_scale(candidates, scale)

    relative = is_relative_timing(scaled, duration)
    expansion = "none"
    if relative:
        scaled, expansion = expand_relative_timing(scaled, duration, context.envelope)
        logger.info(f"Expanded relative timing ({expansion}) for {len(scaled)} lines")

    resolved = normalize_timings(scaled, duration)
    if not resolved:
        logger.warning("No usable timestamps in aligned lyrics")
        return ReconciliationResult(
            timings=[],
            source=source,
            word_score=word_score,
            line_score=line_score,
            scale=scale,
            relative=relative,
            expansion=expansion,
        )

    repair = repair_missing_lines(resolved, context.reference_text, duration)
    timings = resolved
    if repair.inserted_count:
        timings = normalize_timings(
            [t.as_candidate() for t in repair.timings], duration
        )

    return ReconciliationResult(
        timings=timings,
        source=source,
        word_score=word_score,
        line_score=line_score,
        scale=scale,
        relative=relative,
        expansion=expansion,
        inserted_count=repair.inserted_count,
    )


class TimingReconciler:
    """Reconciles provider payloads and remembers results per track.

    Only non-empty timelines are cached, so a track whose lyrics were not
    ready yet is retried on the next request.
    """

    def __init__(self, cache: Optional[TimelineCache] = None):
        self.cache = cache if cache is not None else TimelineCache()

    def reconcile(
        self,
        track_id: str,
        lines: Sequence[RawLine],
        context: Optional[ReconciliationContext] = None,
    ) -> List[LineTiming]:
        cached = self.cache.get(track_id)
        if cached is not None:
            logger.debug(f"Using cached timeline for {track_id}")
            return cached

        result = reconcile_timings(lines, context)
        if result.timings:
            self.cache.put(track_id, result.timings)
        return list(result.timings)

    def reconcile_payload(
        self,
        track_id: str,
        payload: Any,
        duration: Optional[float] = None,
        envelope: Optional[Sequence[float]] = None,
        reference_text: Optional[str] = None,
    ) -> List[LineTiming]:
        """Parse a provider response and reconcile it.

        An explicit ``duration`` wins over the hint found in the payload.
        """
        cached = self.cache.get(track_id)
        if cached is not None:
            return cached

        parsed = parse_payload(payload)
        context = ReconciliationContext(
            duration=duration if duration is not None else parsed.duration,
            envelope=tuple(envelope) if envelope is not None else None,
            reference_text=reference_text,
        )
        return self.reconcile(track_id, parsed.lines, context)

    @staticmethod
    def is_current(track_id: str, current_track_id: Optional[str]) -> bool:
        """Callers drop results whose track is no longer the one on screen."""
        return bool(current_track_id) and track_id == current_track_id

    def invalidate(self, track_id: Optional[str] = None) -> None:
        self.cache.invalidate(track_id)
