"""Choose between word-derived and line-derived timing candidates."""

from typing import List, Sequence, Tuple

from ..config import MONOTONIC_TOLERANCE
from ..utils.logging import get_logger
from .models import CandidateTiming, RawLine, TimingScore

logger = get_logger(__name__)


def words_candidate(lines: Sequence[RawLine]) -> List[CandidateTiming]:
    """Aggregate nested token bounds: earliest token start, latest token end."""
    candidates: List[CandidateTiming] = []
    for line in lines:
        starts = [t.start for t in line.tokens if t.start is not None]
        ends = [t.end for t in line.tokens if t.end is not None]
        candidates.append(
            CandidateTiming(
                text=line.display_text,
                start=min(starts) if starts else None,
                end=max(ends) if ends else None,
            )
        )
    return candidates


def lines_candidate(lines: Sequence[RawLine]) -> List[CandidateTiming]:
    """Use each line's own start/end fields."""
    return [
        CandidateTiming(text=line.display_text, start=line.start, end=line.end)
        for line in lines
    ]


def count_monotonic_breaks(candidates: Sequence[CandidateTiming]) -> int:
    """Count adjacent start inversions larger than the tolerance."""
    breaks = 0
    previous = None
    for candidate in candidates:
        if candidate.start is None:
            continue
        if previous is not None and candidate.start < previous - MONOTONIC_TOLERANCE:
            breaks += 1
        previous = candidate.start
    return breaks


def score_timing(candidates: Sequence[CandidateTiming]) -> TimingScore:
    return TimingScore(
        valid_count=sum(1 for c in candidates if c.is_valid),
        monotonic_breaks=count_monotonic_breaks(candidates),
        total=len(candidates),
    )


def select_timing_source(
    lines: Sequence[RawLine],
) -> Tuple[str, List[CandidateTiming], TimingScore, TimingScore]:
    """Pick the more trustworthy candidate.

    Word timing is finer-grained but can be missing on whole lines, so it
    wins only when it looks good and breaks ordering no more often than the
    line timing does.

    Returns:
        Tuple of (source name, chosen candidates, word score, line score).
        The source name is "words" or "lines".
    """
    word_timing = words_candidate(lines)
    line_timing = lines_candidate(lines)
    word_score = score_timing(word_timing)
    line_score = score_timing(line_timing)

    if word_score.looks_good and word_score.monotonic_breaks <= line_score.monotonic_breaks:
        source, chosen = "words", word_timing
    elif line_score.looks_good or line_score.valid_ratio >= word_score.valid_ratio:
        source, chosen = "lines", line_timing
    else:
        source, chosen = "words", word_timing

    logger.debug(
        f"Timing source: {source} "
        f"(words valid={word_score.valid_count}/{word_score.total} "
        f"breaks={word_score.monotonic_breaks}; "
        f"lines valid={line_score.valid_count}/{line_score.total} "
        f"breaks={line_score.monotonic_breaks})"
    )
    return source, chosen, word_score, line_score
