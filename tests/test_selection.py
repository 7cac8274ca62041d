"""Tests for choosing between word- and line-derived timing."""

from timedlyrics.core import selection
from timedlyrics.core.models import CandidateTiming

from conftest import make_line


def test_words_candidate_aggregates_token_bounds():
    lines = [
        make_line("a b", tokens=[("a", 1.2, 1.5), ("b", 1.0, 2.0)]),
        make_line("c", tokens=[("c", None, 3.0)]),
        make_line("d"),
    ]
    candidates = selection.words_candidate(lines)
    assert candidates[0] == CandidateTiming("a b", 1.0, 2.0)
    assert candidates[1] == CandidateTiming("c", None, 3.0)
    assert candidates[2] == CandidateTiming("d", None, None)


def test_count_monotonic_breaks_uses_tolerance():
    candidates = [
        CandidateTiming("a", 0.0, 1.0),
        CandidateTiming("b", 1.0, 2.0),
        CandidateTiming("c", 0.9995, 2.0),
        CandidateTiming("d", None, None),
        CandidateTiming("e", 0.5, 1.0),
    ]
    assert selection.count_monotonic_breaks(candidates) == 1


def test_score_timing_counts_valid_entries():
    score = selection.score_timing(
        [CandidateTiming("a", 0.0, 1.0), CandidateTiming("b", 1.0, None)]
    )
    assert score.valid_count == 1
    assert score.total == 2
    assert score.valid_ratio == 0.5
    assert score.looks_good is False


def test_prefers_words_when_they_look_good():
    lines = [
        make_line("a", 10.0, 11.0, tokens=[("a", 0.1, 0.9)]),
        make_line("b", 12.0, 13.0, tokens=[("b", 1.0, 1.9)]),
    ]
    source, chosen, word_score, line_score = selection.select_timing_source(lines)
    assert source == "words"
    assert chosen[0].start == 0.1
    assert word_score.looks_good and line_score.looks_good


def test_falls_back_to_lines_when_tokens_missing():
    lines = [make_line("a", 0.0, 1.0), make_line("b", 1.0, 2.0)]
    source, chosen, _, _ = selection.select_timing_source(lines)
    assert source == "lines"
    assert [c.start for c in chosen] == [0.0, 1.0]


def test_lines_win_when_words_break_order_more_often():
    lines = [
        make_line("a", 0.0, 1.0, tokens=[("a", 0.0, 1.0)]),
        make_line("b", 1.0, 2.0, tokens=[("b", 2.0, 3.0)]),
        make_line("c", 2.0, 3.0, tokens=[("c", 1.0, 2.0)]),
    ]
    source, _, word_score, line_score = selection.select_timing_source(lines)
    assert word_score.monotonic_breaks == 1
    assert line_score.monotonic_breaks == 0
    assert source == "lines"


def test_defaults_to_words_when_neither_looks_good():
    lines = [
        make_line("a", 0.0, None, tokens=[("a", 0.0, 1.0)]),
        make_line("b", None, None, tokens=[("b", 1.0, 2.0)]),
        make_line("c", None, 3.0),
    ]
    source, _, word_score, line_score = selection.select_timing_source(lines)
    assert not word_score.looks_good
    assert line_score.valid_ratio < word_score.valid_ratio
    assert source == "words"
