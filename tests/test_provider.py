"""Tests for the aligned-lyrics provider client."""

import pytest
import requests

from timedlyrics.core.provider import aligned_lyrics_url, fetch_aligned_lyrics
from timedlyrics.exceptions import ProviderError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("timedlyrics.utils.retry.time.sleep", lambda _: None)


def test_url():
    assert (
        aligned_lyrics_url("abc123", "https://api.example.com/gen/")
        == "https://api.example.com/gen/abc123/aligned_lyrics/v2/"
    )


def test_returns_payload_and_sends_token():
    session = FakeSession(FakeResponse(200, {"aligned_words": []}))
    payload = fetch_aligned_lyrics("abc123", "secret", session=session)

    assert payload == {"aligned_words": []}
    assert session.calls[0]["headers"]["Authorization"] == "Bearer secret"


def test_missing_lyrics_returns_none():
    session = FakeSession(FakeResponse(404))
    assert fetch_aligned_lyrics("abc123", "secret", session=session) is None


def test_retries_transient_status():
    session = FakeSession(FakeResponse(503), FakeResponse(200, ["line"]))
    assert fetch_aligned_lyrics("abc123", "secret", session=session) == ["line"]
    assert len(session.calls) == 2


def test_persistent_transient_status_raises():
    session = FakeSession(*[FakeResponse(502) for _ in range(5)])
    with pytest.raises(ProviderError):
        fetch_aligned_lyrics("abc123", "secret", session=session)


@pytest.mark.parametrize("status", [401, 403, 400])
def test_error_status_raises(status):
    session = FakeSession(FakeResponse(status))
    with pytest.raises(ProviderError):
        fetch_aligned_lyrics("abc123", "secret", session=session)


def test_invalid_json_raises():
    session = FakeSession(FakeResponse(200, invalid_json=True))
    with pytest.raises(ProviderError, match="invalid JSON"):
        fetch_aligned_lyrics("abc123", "secret", session=session)


def test_connection_failure_raises_after_retries():
    session = FakeSession(*[requests.ConnectionError("down") for _ in range(5)])
    with pytest.raises(ProviderError, match="Could not reach"):
        fetch_aligned_lyrics("abc123", "secret", session=session)
