"""Data models for lyric timing reconciliation."""

import math
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Optional, Tuple

from ..config import MAX_MONOTONIC_BREAKS, VALID_RATIO_THRESHOLD


def clean_number(value: Any) -> Optional[float]:
    """Coerce a provider value to a finite float, or None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def clean_duration(value: Any) -> Optional[float]:
    """Duration hints that are non-finite, zero or negative count as absent."""
    number = clean_number(value)
    if number is None or number <= 0:
        return None
    return number


def _clean_bounds(obj) -> None:
    # Frozen dataclasses: non-finite or non-numeric bounds become absent
    object.__setattr__(obj, "start", clean_number(obj.start))
    object.__setattr__(obj, "end", clean_number(obj.end))


@dataclass(frozen=True)
class RawTimedToken:
    """A word-level unit as delivered by the provider."""

    text: str
    start: Optional[float] = None
    end: Optional[float] = None

    def __post_init__(self):
        _clean_bounds(self)


@dataclass(frozen=True)
class RawLine:
    """A lyric line as delivered by the provider.

    ``present`` records which optional fields the payload actually carried
    ("text", "start", "end", "tokens", "section"), so absent and unusable
    values can be told apart when debugging a payload.
    """

    text: Optional[str] = None
    start: Optional[float] = None
    end: Optional[float] = None
    tokens: Tuple[RawTimedToken, ...] = ()
    section: Optional[str] = None
    present: FrozenSet[str] = frozenset()

    def __post_init__(self):
        _clean_bounds(self)
        object.__setattr__(self, "tokens", tuple(self.tokens))

    @property
    def display_text(self) -> str:
        if self.text and self.text.strip():
            return " ".join(self.text.split())
        return join_token_text(self.tokens)


def join_token_text(tokens: Tuple[RawTimedToken, ...]) -> str:
    """Join token texts, respecting provider-supplied spacing when present."""
    texts = [t.text for t in tokens if t.text]
    if not texts:
        return ""
    if any(t != t.strip() for t in texts):
        joined = "".join(texts)
    else:
        joined = " ".join(texts)
    return " ".join(joined.split())


@dataclass(frozen=True)
class CandidateTiming:
    """A line with possibly-missing timestamps, before normalization."""

    text: str
    start: Optional[float] = None
    end: Optional[float] = None

    def __post_init__(self):
        _clean_bounds(self)

    @property
    def is_valid(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class LineTiming:
    """A fully resolved line. The only type leaving the reconciliation core."""

    text: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def as_candidate(self) -> "CandidateTiming":
        return CandidateTiming(text=self.text, start=self.start, end=self.end)


@dataclass(frozen=True)
class TimingScore:
    """Diagnostic metric over a candidate timing sequence."""

    valid_count: int
    monotonic_breaks: int
    total: int

    @property
    def valid_ratio(self) -> float:
        return self.valid_count / self.total if self.total else 0.0

    @property
    def looks_good(self) -> bool:
        return (
            self.total > 0
            and self.valid_ratio >= VALID_RATIO_THRESHOLD
            and self.monotonic_breaks <= MAX_MONOTONIC_BREAKS
        )


@dataclass(frozen=True)
class ReconciliationContext:
    """External inputs to the pipeline. Invalid values are dropped on creation."""

    duration: Optional[float] = None
    envelope: Optional[Tuple[float, ...]] = None
    reference_text: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "duration", clean_duration(self.duration))
        if self.envelope is not None:
            samples = []
            for value in self.envelope:
                number = clean_number(value)
                samples.append(number if number is not None and number > 0 else 0.0)
            object.__setattr__(self, "envelope", tuple(samples) if samples else None)
        if self.reference_text is not None and not self.reference_text.strip():
            object.__setattr__(self, "reference_text", None)


@dataclass(frozen=True)
class RepairResult:
    """Output of reference-text repair."""

    timings: List[LineTiming]
    inserted_count: int = 0


@dataclass(frozen=True)
class ParsedPayload:
    """Lines and duration hint pulled from one provider response."""

    lines: List[RawLine]
    duration: Optional[float] = None


@dataclass(frozen=True)
class ReconciliationResult:
    """Reconciled timeline plus the decisions that produced it."""

    timings: List[LineTiming]
    source: str = "words"
    word_score: Optional[TimingScore] = None
    line_score: Optional[TimingScore] = None
    scale: float = 1.0
    relative: bool = False
    expansion: str = "none"  # "none", "uniform", "envelope"
    inserted_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.timings
