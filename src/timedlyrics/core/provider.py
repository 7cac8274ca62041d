"""Fetch aligned lyrics for a track from the music provider API."""

from typing import Any, Optional

import requests

from ..config import PROVIDER_BASE_URL, REQUEST_RETRIES, REQUEST_TIMEOUT
from ..exceptions import ProviderError
from ..utils.logging import get_logger
from ..utils.retry import retry_with_backoff

logger = get_logger(__name__)

_TRANSIENT_STATUS = {429, 500, 502, 503, 504}


class TransientProviderError(ProviderError):
    """Provider answered with a status worth retrying."""
    pass


def aligned_lyrics_url(track_id: str, base_url: str = PROVIDER_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{track_id}/aligned_lyrics/v2/"


@retry_with_backoff(
    max_retries=REQUEST_RETRIES,
    exceptions=(requests.ConnectionError, requests.Timeout, TransientProviderError),
)
def _get(session: Any, url: str, headers: dict, timeout: float) -> Any:
    response = session.get(url, headers=headers, timeout=timeout)
    if response.status_code in _TRANSIENT_STATUS:
        raise TransientProviderError(f"Provider returned {response.status_code}")
    return response


def fetch_aligned_lyrics(
    track_id: str,
    token: str,
    base_url: str = PROVIDER_BASE_URL,
    session: Optional[Any] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Optional[Any]:
    """Return the decoded aligned-lyrics payload, or None if the track has none.

    Raises:
        ProviderError: On authentication, network or decoding failures
    """
    url = aligned_lyrics_url(track_id, base_url)
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }
    http = session or requests.Session()

    try:
        response = _get(http, url, headers, timeout)
    except (requests.ConnectionError, requests.Timeout) as e:
        raise ProviderError(f"Could not reach provider: {e}")
    finally:
        if session is None:
            http.close()

    if response.status_code == 404:
        logger.debug(f"No aligned lyrics found for {track_id}")
        return None
    if response.status_code in (401, 403):
        raise ProviderError("Provider rejected the session token")
    if not response.ok:
        raise ProviderError(f"Provider request failed: {response.status_code}")

    try:
        payload = response.json()
    except ValueError as e:
        raise ProviderError(f"Provider returned invalid JSON: {e}")

    logger.debug(f"Fetched aligned lyrics for {track_id}")
    return payload
