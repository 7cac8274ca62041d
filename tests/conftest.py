"""Test configuration and fixtures.

Provides reusable fixtures for:
- Temporary files and directories
- Provider aligned-lyrics payloads (line and flat word shapes)
- Raw lines and reference lyric text
- Invariant checks shared by pipeline tests
"""

import os
import tempfile
from pathlib import Path
from typing import List

import pytest

from timedlyrics.core.models import LineTiming, RawLine, RawTimedToken


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords or "integration" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Basic Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Provider Payload Fixtures
# =============================================================================


@pytest.fixture
def line_payload():
    """Aligned lyrics delivered as lines with nested words."""
    return {
        "duration": 30.0,
        "aligned_lyrics": [
            {
                "text": "Hello world",
                "start_s": 1.0,
                "end_s": 2.5,
                "words": [
                    {"word": "Hello", "start_s": 1.0, "end_s": 1.6},
                    {"word": "world", "start_s": 1.7, "end_s": 2.5},
                ],
            },
            {
                "text": "Second line",
                "start_s": 3.0,
                "end_s": 5.5,
                "words": [
                    {"word": "Second", "start_s": 3.0, "end_s": 3.6},
                    {"word": "line", "start_s": 3.7, "end_s": 5.5},
                ],
            },
        ],
    }


@pytest.fixture
def word_payload():
    """Aligned lyrics delivered as one flat word list."""
    return {
        "aligned_words": [
            {"word": "[Verse]\n", "start_s": 0.0, "end_s": 0.5},
            {"word": "Hello ", "start_s": 1.0, "end_s": 1.4},
            {"word": "world\n", "start_s": 1.5, "end_s": 2.0},
            {"word": "Next ", "start_s": 3.0, "end_s": 3.2},
            {"word": "line", "start_s": 3.3, "end_s": 3.6},
        ]
    }


# =============================================================================
# Raw Line Fixtures
# =============================================================================


def make_line(text, start=None, end=None, tokens=()):
    return RawLine(
        text=text,
        start=start,
        end=end,
        tokens=tuple(RawTimedToken(*t) for t in tokens),
    )


@pytest.fixture
def reference_text():
    return "Line A\nLine B\nLine C"


def assert_timeline_invariants(timings: List[LineTiming], duration=None):
    """Starts never decrease, lines last >= 20ms, values stay inside the track."""
    previous = None
    for timing in timings:
        assert timing.end >= timing.start + 0.02
        if previous is not None:
            assert timing.start >= previous.start
        if duration is not None:
            assert 0.0 <= timing.start <= duration
            assert 0.0 <= timing.end <= duration
        previous = timing
