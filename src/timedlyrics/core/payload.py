"""Parse provider aligned-lyrics responses into RawLine sequences.

Responses come in a few shapes: a list of lines (optionally with nested
words), or a flat ``aligned_words`` list in which line breaks live inside the
word text. Every numeric field goes through :func:`clean_number`, and each
RawLine remembers which optional fields the payload actually carried.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..exceptions import PayloadError
from ..utils.logging import get_logger
from .models import ParsedPayload, RawLine, RawTimedToken, clean_duration, clean_number

logger = get_logger(__name__)

LINE_LIST_KEYS = ("aligned_lyrics", "lines", "aligned_lines")
WORD_LIST_KEYS = ("words", "aligned_words", "tokens")
TEXT_KEYS = ("text", "line", "word")
START_KEYS = ("start_s", "start", "startTime", "start_time")
END_KEYS = ("end_s", "end", "endTime", "end_time")
DURATION_PATHS = (
    ("duration",),
    ("duration_s",),
    ("metadata", "duration"),
    ("clip", "metadata", "duration"),
    ("clip", "duration"),
)

_SECTION_RE = re.compile(r"^\s*\[([^\]]+)\]\s*$")


def _first_key(entry: Dict[str, Any], keys: Iterable[str]) -> Tuple[Optional[str], Any]:
    for key in keys:
        if key in entry:
            return key, entry[key]
    return None, None


def _lookup(payload: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def find_duration(payload: Dict[str, Any]) -> Optional[float]:
    """First valid duration hint among the known payload locations."""
    for path in DURATION_PATHS:
        duration = clean_duration(_lookup(payload, path))
        if duration is not None:
            return duration
    return None


def parse_token(entry: Any) -> Optional[RawTimedToken]:
    if not isinstance(entry, dict):
        return None
    _key, text = _first_key(entry, TEXT_KEYS)
    if not isinstance(text, str):
        return None
    return RawTimedToken(
        text=text,
        start=clean_number(_first_key(entry, START_KEYS)[1]),
        end=clean_number(_first_key(entry, END_KEYS)[1]),
    )


def parse_line(entry: Any) -> Optional[RawLine]:
    if isinstance(entry, str):
        return RawLine(text=entry, present=frozenset({"text"}))
    if not isinstance(entry, dict):
        return None

    present = set()
    text_key, text = _first_key(entry, TEXT_KEYS)
    if text_key and isinstance(text, str):
        present.add("text")
    else:
        text = None

    start_key, start = _first_key(entry, START_KEYS)
    if start_key:
        present.add("start")
    end_key, end = _first_key(entry, END_KEYS)
    if end_key:
        present.add("end")

    tokens: List[RawTimedToken] = []
    words_key, words = _first_key(entry, WORD_LIST_KEYS)
    if words_key and isinstance(words, list):
        present.add("tokens")
        tokens = [t for t in (parse_token(w) for w in words) if t is not None]

    section = entry.get("section")
    if isinstance(section, str) and section.strip():
        present.add("section")
    else:
        section = None

    return RawLine(
        text=text,
        start=clean_number(start),
        end=clean_number(end),
        tokens=tuple(tokens),
        section=section,
        present=frozenset(present),
    )


def group_words_into_lines(words: List[Any]) -> List[RawLine]:
    """Split a flat word list into lines at embedded newlines.

    A word that is just a bracketed marker like "[Chorus]" becomes a line of
    its own with ``section`` set.
    """
    lines: List[RawLine] = []
    current: List[RawTimedToken] = []

    def flush():
        if current:
            lines.append(RawLine(tokens=tuple(current), present=frozenset({"tokens"})))
            current.clear()

    for entry in words:
        token = parse_token(entry)
        if token is None:
            logger.debug(f"Skipping malformed word entry: {entry!r}")
            continue

        marker = _SECTION_RE.match(token.text)
        if marker:
            flush()
            lines.append(
                RawLine(
                    text=token.text.strip(),
                    start=token.start,
                    end=token.end,
                    tokens=(token,),
                    section=marker.group(1).strip(),
                    present=frozenset({"text", "start", "end", "tokens", "section"}),
                )
            )
            continue

        pieces = token.text.split("\n")
        for i, piece in enumerate(pieces):
            if piece.strip():
                current.append(RawTimedToken(text=piece, start=token.start, end=token.end))
            if i < len(pieces) - 1:
                flush()
    flush()
    return lines


def parse_payload(payload: Any) -> ParsedPayload:
    """Extract lines and a duration hint from a provider response.

    Raises:
        PayloadError: If the payload is neither a dict nor a list
    """
    if isinstance(payload, list):
        entries, duration = payload, None
    elif isinstance(payload, dict):
        duration = find_duration(payload)
        _key, entries = _first_key(payload, LINE_LIST_KEYS)
        if not isinstance(entries, list):
            words = payload.get("aligned_words")
            if isinstance(words, list):
                lines = group_words_into_lines(words)
                logger.debug(f"Grouped {len(words)} aligned words into {len(lines)} lines")
                return ParsedPayload(lines=lines, duration=duration)
            entries = []
    else:
        raise PayloadError(f"Unexpected payload type: {type(payload).__name__}")

    lines = []
    for entry in entries:
        line = parse_line(entry)
        if line is None:
            logger.debug(f"Skipping malformed line entry: {entry!r}")
            continue
        lines.append(line)
    return ParsedPayload(lines=lines, duration=duration)
