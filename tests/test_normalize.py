"""Tests for the final normalization pass."""

import pytest

from timedlyrics.core.models import CandidateTiming, LineTiming
from timedlyrics.core.normalize import fallback_duration, normalize_timings

from conftest import assert_timeline_invariants


def _c(start, end, text="x"):
    return CandidateTiming(text, start, end)


def test_empty_and_unusable_inputs():
    assert normalize_timings([]) == []
    assert normalize_timings([_c(None, None), _c(None, None)]) == []


def test_applies_scale():
    result = normalize_timings([_c(0.0, 1000.0), _c(1000.0, 2000.0)], scale=0.001)
    assert [(t.start, t.end) for t in result] == [(0.0, 1.0), (1.0, 2.0)]


def test_shifts_negative_starts_to_zero():
    result = normalize_timings([_c(-1.0, 1.0), _c(0.0, 2.0)])
    assert [(t.start, t.end) for t in result] == [(0.0, 2.0), (1.0, 3.0)]


def test_starts_never_decrease():
    result = normalize_timings([_c(5.0, 6.0), _c(3.0, 4.0)])
    assert result[1].start == 5.0
    # Inverted end falls back to the median observed duration
    assert result[1].end == 6.0


def test_missing_end_borrows_next_start():
    result = normalize_timings([_c(0.0, None), _c(3.0, 5.0)])
    assert result[0].end == 3.0


def test_missing_end_without_next_uses_default_duration():
    result = normalize_timings([_c(1.0, None)])
    assert result[0].end == 3.5


def test_fallback_duration_is_median_of_valid_durations():
    assert fallback_duration([_c(0.0, 1.0), _c(1.0, 4.0), _c(4.0, 6.0)]) == 2.0
    assert fallback_duration([_c(0.0, None)]) == 2.5


def test_clamps_to_duration():
    result = normalize_timings([_c(9.5, 12.0), _c(10.5, 11.0)], duration=10.0)
    assert result[0].end == 10.0
    assert result[1].start <= 9.98
    assert_timeline_invariants(result, duration=10.0)


def test_enforces_minimum_line_length():
    result = normalize_timings([_c(1.0, 1.005)])
    assert result[0].end == pytest.approx(1.02)
    assert result[0].end >= result[0].start + 0.02


def test_rounds_to_milliseconds():
    result = normalize_timings([_c(0.12345, 1.98765)])
    assert result[0] == LineTiming("x", 0.123, 1.988)


def test_missing_start_follows_previous_line():
    result = normalize_timings([_c(0.0, 2.0), _c(None, 3.0)])
    assert result[1].start == 2.0
    assert result[1].end == 3.0


def test_idempotent():
    messy = [_c(-0.5, 1.0), _c(0.2, None), _c(0.1, 0.15), _c(float("nan"), 4.0)]
    messy = [_c(c.start if c.start == c.start else None, c.end) for c in messy]
    first = normalize_timings(messy, duration=5.0)
    second = normalize_timings([t.as_candidate() for t in first], duration=5.0)
    assert first == second
    assert_timeline_invariants(first, duration=5.0)
