"""URL canonicalization and content hashing for duplicate detection.

Two URLs pointing at the same resource must produce the same canonical
string:

* YouTube URLs collapse to ``https://youtube.com/watch?v=<id>``.
* Web URLs get a lowercase host without ``www.``, no trailing slash, no
  fragment, no tracking parameters, and sorted query parameters.
"""

import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit

_SUPPORTED_SCHEMES = frozenset({"http", "https"})

_VIDEO_ID = re.compile(r"^[a-zA-Z0-9_-]{11}$")
_VIDEO_PATTERNS = (
    re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)"
        r"([a-zA-Z0-9_-]{11})",
        re.IGNORECASE,
    ),
    re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})", re.IGNORECASE),
)
_VIDEO_HOST_MARKERS = ("youtube.com", "youtu.be")
_CANONICAL_VIDEO_URL = "https://youtube.com/watch?v={video_id}"

TRACKING_PARAMS = frozenset({
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "fbclid",
    "gclid",
})

_DEFAULT_PORTS = {"http": 80, "https": 443}


class UrlKind(str, Enum):
    YOUTUBE = "youtube"
    WEB = "web"
    INVALID = "invalid"


@dataclass(frozen=True)
class NormalizedUrl:
    """Outcome of ``normalize_url``; ``normalized`` is None when invalid."""

    normalized: str | None
    type: UrlKind

    @property
    def is_valid(self) -> bool:
        return self.normalized is not None


def is_supported_scheme(url: str) -> bool:
    """Only absolute http(s) URLs are processed."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme.lower() in _SUPPORTED_SCHEMES and bool(parts.netloc)


def extract_youtube_video_id(url: str) -> str | None:
    """Pull the 11-character video id out of the known YouTube URL shapes.

    Falls back to the ``v`` query parameter or the last path segment of any
    youtube.com / youtu.be URL.
    """
    for pattern in _VIDEO_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)

    try:
        parts = urlsplit(url.strip())
        host = parts.hostname or ""
    except ValueError:
        return None
    if not any(marker in host for marker in _VIDEO_HOST_MARKERS):
        return None

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    candidate = query.get("v") or parts.path.rstrip("/").rsplit("/", 1)[-1]
    if candidate and _VIDEO_ID.match(candidate):
        return candidate
    return None


def normalize_youtube_url(url: str) -> str | None:
    video_id = extract_youtube_video_id(url)
    if video_id is None:
        return None
    return _CANONICAL_VIDEO_URL.format(video_id=video_id)


def normalize_web_url(url: str) -> str | None:
    """Canonicalize a generic web URL, or None if it cannot be parsed."""
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if not scheme or not host:
        return None

    if host.startswith("www."):
        host = host[4:]
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"

    path = parts.path
    if path.endswith("/"):
        path = path[:-1]
    path = path or "/"

    params = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in TRACKING_PARAMS
    ]
    params.sort(key=lambda kv: kv[0])
    query = f"?{urlencode(params)}" if params else ""

    # No user:pass@ part; credentials never reach the stored URL.
    return f"{scheme}://{host}{path}{query}"


def _is_video_url(url: str) -> bool:
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return False
    if not host:
        return False
    return host in _VIDEO_HOST_MARKERS or host.endswith((".youtube.com", ".youtu.be"))


def normalize_url(url: str) -> NormalizedUrl:
    """Classify a raw URL string and return its canonical form.

    Anything but an absolute http(s) URL is invalid and never normalized.
    """
    if not is_supported_scheme(url):
        return NormalizedUrl(None, UrlKind.INVALID)
    if _is_video_url(url):
        normalized = normalize_youtube_url(url)
        return NormalizedUrl(normalized, UrlKind.YOUTUBE if normalized else UrlKind.INVALID)

    normalized = normalize_web_url(url)
    return NormalizedUrl(normalized, UrlKind.WEB if normalized else UrlKind.INVALID)


def compute_content_hash(content: bytes | str) -> str:
    """Stable SHA-256 hex digest of raw bytes or UTF-8 text."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()
