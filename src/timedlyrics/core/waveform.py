"""Energy-envelope guided placement of relative line timing.

The envelope is a coarse amplitude-over-time signal sampled uniformly across
the track. It is used as a proxy for vocal activity: lines are spread over
the window where the envelope is active, with louder stretches receiving
proportionally more of the timeline.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import (
    ACTIVATION_WEIGHT,
    EMPHASIS_EXPONENT,
    EMPHASIS_FLOOR,
    ENVELOPE_HIGH_PERCENTILE,
    ENVELOPE_LOW_PERCENTILE,
    ENVELOPE_SMOOTH_RADIUS,
    LEAD_IN_SECONDS,
    LEAD_OUT_SECONDS,
    MIN_BOUNDARY_GAP,
    MIN_ENVELOPE_SAMPLES,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)


def smooth_envelope(
    envelope: Sequence[float], radius: int = ENVELOPE_SMOOTH_RADIUS
) -> np.ndarray:
    """Centered moving average; edges average over the samples available."""
    samples = np.asarray(envelope, dtype=float)
    n = len(samples)
    if n == 0:
        return samples
    cumulative = np.concatenate(([0.0], np.cumsum(samples)))
    idx = np.arange(n)
    lo = np.maximum(idx - radius, 0)
    hi = np.minimum(idx + radius + 1, n)
    return (cumulative[hi] - cumulative[lo]) / (hi - lo)


def activity_levels(smoothed: np.ndarray) -> Optional[Tuple[float, float, float]]:
    """Return (low, high, threshold) from the positive samples, or None."""
    positive = smoothed[smoothed > 0]
    if positive.size == 0:
        return None
    low = float(np.percentile(positive, ENVELOPE_LOW_PERCENTILE))
    high = float(np.percentile(positive, ENVELOPE_HIGH_PERCENTILE))
    if high <= low:
        return None
    threshold = low + ACTIVATION_WEIGHT * (high - low)
    return low, high, threshold


def find_vocal_window(
    smoothed: np.ndarray, threshold: float, duration: float
) -> Optional[Tuple[int, int]]:
    """First/last active sample, widened by lead-in and lead-out margins."""
    n = len(smoothed)
    active = np.nonzero(smoothed > threshold)[0]
    if active.size == 0 or n < 2:
        return None

    seconds_per_sample = duration / (n - 1)
    lead_in = max(1, int(round(LEAD_IN_SECONDS / seconds_per_sample)))
    lead_out = int(round(LEAD_OUT_SECONDS / seconds_per_sample))

    start = max(0, int(active[0]) - lead_in)
    end = min(n - 1, int(active[-1]) + lead_out)
    return start, end


def emphasis_weights(
    window: np.ndarray, threshold: float, high: float
) -> np.ndarray:
    lifted = np.maximum(window - threshold, 0.0) / (high - threshold)
    return EMPHASIS_FLOOR + lifted ** EMPHASIS_EXPONENT


def enforce_min_gap(boundaries: List[float], gap: float = MIN_BOUNDARY_GAP) -> List[float]:
    """Push later boundaries forward so neighbours are at least ``gap`` apart."""
    fixed = list(boundaries)
    for i in range(1, len(fixed)):
        if fixed[i] < fixed[i - 1] + gap:
            fixed[i] = fixed[i - 1] + gap
    return fixed


def fit_to_window(
    boundaries: List[float], window_start: float, window_end: float
) -> List[float]:
    """Apply the minimum gap, then squeeze back into the window if it overflowed.

    The squeeze is anchored at ``window_start``; the gap is enforced again
    afterwards, so the final boundary may still sit slightly past the end.
    """
    fixed = enforce_min_gap(boundaries)
    if fixed[-1] > window_end and fixed[-1] > window_start:
        factor = (window_end - window_start) / (fixed[-1] - window_start)
        fixed = [window_start + (b - window_start) * factor for b in fixed]
        fixed = enforce_min_gap(fixed)
    return fixed


def expand_with_envelope(
    weights: Sequence[float], envelope: Sequence[float], duration: float
) -> Optional[List[float]]:
    """Place line boundaries along the envelope's cumulative emphasis curve.

    Args:
        weights: Relative weight of each line
        envelope: Non-negative samples uniformly spanning ``duration``
        duration: Track duration in seconds

    Returns:
        ``len(weights) + 1`` boundaries in seconds, or None when the envelope
        gives no usable vocal window.
    """
    n = len(envelope)
    if not weights or n < 2 or duration <= 0:
        return None

    smoothed = smooth_envelope(envelope)
    levels = activity_levels(smoothed)
    if levels is None:
        logger.debug("Envelope has no dynamic range")
        return None
    _low, high, threshold = levels

    window = find_vocal_window(smoothed, threshold, duration)
    if window is None:
        return None
    start, end = window

    # Short envelopes only need to offer a window covering half their samples
    min_samples = min(MIN_ENVELOPE_SAMPLES, max(2, n // 2))
    if end - start + 1 < min_samples:
        logger.debug(f"Vocal window too short ({end - start + 1} samples)")
        return None

    emphasis = emphasis_weights(smoothed[start:end + 1], threshold, high)
    # Trapezoidal accumulation so curve[k] sits exactly on sample start + k
    curve = np.concatenate(([0.0], np.cumsum((emphasis[:-1] + emphasis[1:]) / 2.0)))
    total = float(curve[-1])

    seconds_per_sample = duration / (n - 1)
    weight_sum = float(sum(weights))
    fractions = np.concatenate(([0.0], np.cumsum(weights))) / weight_sum

    boundaries: List[float] = []
    for fraction in fractions:
        target = float(fraction) * total
        bucket = int(np.searchsorted(curve, target, side="left"))
        if bucket <= 0:
            index = float(start)
        else:
            bucket = min(bucket, len(curve) - 1)
            span = curve[bucket] - curve[bucket - 1]
            offset = (target - curve[bucket - 1]) / span if span > 0 else 0.0
            index = start + (bucket - 1) + min(max(offset, 0.0), 1.0)
        boundaries.append(index * seconds_per_sample)

    window_start = start * seconds_per_sample
    window_end = end * seconds_per_sample
    boundaries = fit_to_window(boundaries, window_start, window_end)

    logger.debug(
        f"Envelope window {window_start:.2f}s-{window_end:.2f}s "
        f"for {len(weights)} lines"
    )
    return boundaries
