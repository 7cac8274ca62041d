"""Restore lines the provider timeline dropped, using the reference lyrics.

Provider timelines sometimes skip lines that are present in the lyric text
the track was generated from. Resolved lines are matched in order against
the reference lines; reference lines left between two matches (or before
the first match) are given synthetic timing inside the gap.
"""

import re
from statistics import median
from typing import List, Optional, Sequence, Tuple

from ..config import (
    COLLAPSE_OFFSET,
    DEFAULT_SECONDS_PER_UNIT,
    LEAD_WINDOW_MIN,
    LEAD_WINDOW_PER_LINE,
    MIN_SAMPLE_LINE_DURATION,
    SECONDS_PER_UNIT_RANGE,
    STRUCTURAL_LINE_DURATION,
    SYNTH_DURATION_RANGE,
    SYNTH_MIN_FITTED_DURATION,
)
from ..utils.logging import get_logger
from .models import LineTiming, RepairResult

logger = get_logger(__name__)

# Whitespace plus Latin and CJK punctuation
_STRIP_RE = re.compile(
    r"[\s.,!?;:'\"`~\-–—_()\[\]{}<>/\\|@#$%^&*+=…·"
    r"、。，．！？；：「」『』（）【】《》〈〉〔〕“”‘’〜～・♪]+"
)
_STRUCTURAL_RE = re.compile(r"^\s*[\[(（【].*[\])）】]\s*$")


def normalize_lyric_text(text: str) -> str:
    return _STRIP_RE.sub("", (text or "").lower())


def lyric_units(text: str) -> int:
    return len(normalize_lyric_text(text))


def is_structural_line(text: str) -> bool:
    """Section markers such as "[Chorus]" or "(Instrumental)"."""
    return bool(_STRUCTURAL_RE.match(text or ""))


def reference_lines(reference_text: str) -> List[str]:
    return [line.strip() for line in reference_text.splitlines() if line.strip()]


def match_reference_lines(
    timings: Sequence[LineTiming], references: Sequence[str]
) -> List[Optional[int]]:
    """Greedy in-order match of resolved lines to reference line indices."""
    normalized_refs = [normalize_lyric_text(r) for r in references]
    matches: List[Optional[int]] = []
    cursor = 0
    for timing in timings:
        text = normalize_lyric_text(timing.text)
        found = None
        if text:
            for idx in range(cursor, len(normalized_refs)):
                ref = normalized_refs[idx]
                if ref and (ref == text or text in ref or ref in text):
                    found = idx
                    break
        matches.append(found)
        if found is not None:
            cursor = found + 1
    return matches


def seconds_per_unit(timings: Sequence[LineTiming]) -> float:
    """Median singing rate of the resolved, non-structural lines."""
    samples = []
    for timing in timings:
        if is_structural_line(timing.text):
            continue
        units = lyric_units(timing.text)
        if timing.duration > MIN_SAMPLE_LINE_DURATION and units > 0:
            samples.append(timing.duration / units)
    if not samples:
        return DEFAULT_SECONDS_PER_UNIT
    low, high = SECONDS_PER_UNIT_RANGE
    return min(max(median(samples), low), high)


def estimate_line_duration(text: str, rate: float) -> float:
    if is_structural_line(text):
        return STRUCTURAL_LINE_DURATION
    low, high = SYNTH_DURATION_RANGE
    return min(max(lyric_units(text) * rate, low), high)


def fit_missing_lines(
    texts: Sequence[str], window_start: float, window_end: float, rate: float
) -> List[Tuple[float, str]]:
    """Place missing lines back-to-back so the last one ends at ``window_end``.

    Estimated durations shrink proportionally (down to a floor) when they do
    not fit; a window too small to hold anything collapses every line onto
    one instant just before its end.
    """
    window = window_end - window_start
    if window <= SYNTH_MIN_FITTED_DURATION:
        instant = max(window_start, window_end - COLLAPSE_OFFSET)
        return [(instant, text) for text in texts]

    durations = [estimate_line_duration(text, rate) for text in texts]
    total = sum(durations)
    if total > window:
        factor = window / total
        durations = [max(d * factor, SYNTH_MIN_FITTED_DURATION) for d in durations]
        total = sum(durations)
        if total > window:
            durations = [window / len(texts)] * len(texts)
            total = window

    placed: List[Tuple[float, str]] = []
    cursor = window_end - total
    for text, line_duration in zip(texts, durations):
        placed.append((cursor, text))
        cursor += line_duration
    return placed


def _expand_starts(
    starts: Sequence[Tuple[float, str]], duration: Optional[float]
) -> List[LineTiming]:
    """End every line at the next start; the last gets the median gap."""
    gaps = [
        starts[i + 1][0] - starts[i][0]
        for i in range(len(starts) - 1)
        if starts[i + 1][0] - starts[i][0] > 0
    ]
    tail = median(gaps) if gaps else SYNTH_DURATION_RANGE[0]

    timings: List[LineTiming] = []
    for i, (start, text) in enumerate(starts):
        end = starts[i + 1][0] if i + 1 < len(starts) else start + tail
        if duration is not None:
            start = min(max(start, 0.0), duration)
            end = min(max(end, 0.0), duration)
        timings.append(LineTiming(text=text, start=start, end=end))
    return timings


def repair_missing_lines(
    timings: Sequence[LineTiming],
    reference_text: Optional[str],
    duration: Optional[float] = None,
) -> RepairResult:
    """Insert reference lines missing from the resolved timeline.

    Strictly additive: when nothing is missing, or no resolved line can be
    found in the reference text, the input comes back unchanged.
    """
    timings = list(timings)
    if not timings or not reference_text:
        return RepairResult(timings=timings)

    references = reference_lines(reference_text)
    matches = match_reference_lines(timings, references)
    if all(m is None for m in matches):
        logger.debug("No resolved line found in reference text, skipping repair")
        return RepairResult(timings=timings)

    rate = seconds_per_unit(timings)
    rebuilt: List[Tuple[float, str]] = []
    inserted = 0
    previous_match: Optional[int] = None

    for i, (timing, match) in enumerate(zip(timings, matches)):
        if match is not None:
            missing: List[str] = []
            window_start = 0.0
            if previous_match is None and match > 0:
                missing = references[:match]
                lead = max(LEAD_WINDOW_MIN, LEAD_WINDOW_PER_LINE * len(missing))
                window_start = max(0.0, timing.start - lead)
                if i > 0:
                    window_start = max(window_start, timings[i - 1].start)
            elif previous_match is not None and match - previous_match > 1:
                missing = references[previous_match + 1:match]
                previous = timings[i - 1]
                window_start = previous.start
                # Do not overlap what the previous line actually sings
                if previous.start < previous.end <= timing.start:
                    window_start = previous.end

            if missing:
                rebuilt.extend(
                    fit_missing_lines(missing, window_start, timing.start, rate)
                )
                inserted += len(missing)
            previous_match = match
        rebuilt.append((timing.start, timing.text))

    if not inserted:
        return RepairResult(timings=timings)

    logger.info(f"Restored {inserted} line(s) missing from the aligned lyrics")
    return RepairResult(
        timings=_expand_starts(rebuilt, duration),
        inserted_count=inserted,
    )
