"""YouTube URL validation and video ID extraction.

The video ID is the key the admission gate buckets attempts under, so every
accepted URL form must map to the same 11-character ID.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from ytdl_gateway.middleware.error_handler import InvalidVideoUrlError

_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")

_ALLOWED_SCHEMES = {"http", "https"}

_WATCH_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "gaming.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}
_SHORT_HOSTS = {"youtu.be", "www.youtu.be"}

# Path prefixes followed directly by the ID: /shorts/<id>, /embed/<id>, ...
_ID_PATH_PREFIXES = {"shorts", "embed", "v", "live", "e"}


def _parse_video_id(url: str) -> str | None:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        # Malformed netloc, e.g. an unbalanced IPv6 bracket
        return None
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        return None
    host = (parsed.hostname or "").lower()
    segments = [part for part in parsed.path.split("/") if part]

    candidate: str | None = None
    if host in _SHORT_HOSTS:
        candidate = segments[0] if segments else None
    elif host in _WATCH_HOSTS:
        if segments[:1] == ["watch"]:
            values = parse_qs(parsed.query).get("v")
            candidate = values[0] if values else None
        elif len(segments) >= 2 and segments[0] in _ID_PATH_PREFIXES:
            candidate = segments[1]

    if candidate and _VIDEO_ID.match(candidate):
        return candidate
    return None


def is_valid_video_url(url: str) -> bool:
    """Return True if ``url`` is a YouTube video link with a well-formed ID."""
    return _parse_video_id(url) is not None


def extract_video_id(url: str) -> str:
    """Return the video ID of a YouTube URL.

    Raises:
        InvalidVideoUrlError: the URL is not a recognizable YouTube video link.
    """
    video_id = _parse_video_id(url)
    if video_id is None:
        raise InvalidVideoUrlError()
    return video_id
