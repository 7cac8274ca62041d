"""Tests for provider payload parsing."""

import pytest

from timedlyrics.core import payload as payload_module
from timedlyrics.core.payload import find_duration, parse_payload
from timedlyrics.exceptions import PayloadError


def test_parses_line_payload_with_words(line_payload):
    parsed = parse_payload(line_payload)
    assert parsed.duration == 30.0
    assert len(parsed.lines) == 2

    first = parsed.lines[0]
    assert first.text == "Hello world"
    assert first.start == 1.0 and first.end == 2.5
    assert [t.text for t in first.tokens] == ["Hello", "world"]
    assert first.present == frozenset({"text", "start", "end", "tokens"})


def test_groups_flat_words_into_lines(word_payload):
    parsed = parse_payload(word_payload)
    assert [line.display_text for line in parsed.lines] == [
        "[Verse]",
        "Hello world",
        "Next line",
    ]
    assert parsed.lines[0].section == "Verse"
    assert parsed.lines[1].tokens[0].start == 1.0
    assert parsed.lines[1].tokens[-1].end == 2.0


def test_non_finite_values_become_absent():
    parsed = parse_payload({"lines": [{"text": "a", "start": "nan", "end": None}]})
    line = parsed.lines[0]
    assert line.start is None and line.end is None
    assert {"start", "end"} <= line.present


def test_skips_malformed_entries():
    parsed = parse_payload({"lines": [42, {"text": "ok", "start": 1, "end": 2}]})
    assert [line.text for line in parsed.lines] == ["ok"]


def test_bare_list_payload():
    parsed = parse_payload(["first", {"line": "second", "startTime": 3}])
    assert [line.display_text for line in parsed.lines] == ["first", "second"]
    assert parsed.lines[1].start == 3.0
    assert parsed.duration is None


@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"clip": {"metadata": {"duration": 95.5}}}, 95.5),
        ({"metadata": {"duration": "120"}}, 120.0),
        ({"duration": -5, "duration_s": 44}, 44.0),
        ({"duration": float("nan")}, None),
        ({"duration": 0}, None),
    ],
)
def test_find_duration(payload, expected):
    assert find_duration(payload) == expected


def test_rejects_unexpected_payload_type():
    with pytest.raises(PayloadError):
        parse_payload("not a payload")


def test_missing_line_list_yields_no_lines():
    assert parse_payload({"status": "pending"}).lines == []


def test_parse_token_requires_text():
    assert payload_module.parse_token({"start_s": 1.0}) is None
    assert payload_module.parse_token("word") is None
