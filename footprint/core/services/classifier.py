"""
Content classifier - pasted text/URL to a typed content descriptor.

Pure and total: never performs network I/O and never raises. Anything it
cannot recognise degrades to a generic ``link`` (URL-ish input) or a
``note`` (free text).

Key behaviors:
- Image file extensions short-circuit to ``image`` regardless of host
- Platform patterns are host-anchored, so at most one can match
- Thumbnails and embed markup are derived from the matched identifier
- Every platform has exactly one builder (checked at import time)
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import get_args
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from footprint.domain.entities import PLATFORMS, ContentDescriptor, Partition, Platform

logger = logging.getLogger(__name__)

# --- Patterns ---

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
# Bare domains such as "example.com/path" or "youtu.be/abc"
_BARE_DOMAIN_RE = re.compile(
    r"^[a-z0-9-]+(?:\.[a-z0-9-]+)*\.(?P<tld>[a-z]{2,})(?::\d+)?(?P<rest>[/?#]|$)", re.IGNORECASE
)
# Without a path these read as file names, not domains
_FILE_SUFFIXES = frozenset(
    {"md", "txt", "py", "js", "ts", "json", "csv", "log", "pdf", "doc", "docx", "sh", "yml", "yaml"}
)
_IMAGE_EXT_RE = re.compile(r"\.(jpe?g|png|gif|webp|svg)$", re.IGNORECASE)
_HOST_PREFIXES = ("www.", "m.", "mobile.")


@dataclass(frozen=True)
class PlatformPattern:
    """A host-anchored regex matched against ``host + path[?query]``."""

    platform: Platform
    regex: re.Pattern[str]


# Order matters only for readability: hosts are disjoint.
PATTERNS: tuple[PlatformPattern, ...] = (
    PlatformPattern(
        "youtube",
        re.compile(
            r"^(?:youtube\.com/watch\?(?:[^#]*&)?v=|youtu\.be/|youtube\.com/(?:embed|shorts)/)"
            r"([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
        ),
    ),
    PlatformPattern(
        "spotify",
        re.compile(r"^open\.spotify\.com/(track|album|playlist|artist|episode)/([A-Za-z0-9]+)"),
    ),
    PlatformPattern(
        "twitter",
        re.compile(r"^(?:twitter\.com|x\.com)/([A-Za-z0-9_]+)/status/(\d+)"),
    ),
    PlatformPattern(
        "instagram",
        re.compile(r"^instagram\.com/(?:p|reel)/([A-Za-z0-9_-]+)"),
    ),
    PlatformPattern(
        "tiktok",
        re.compile(r"^(?:tiktok\.com/@([A-Za-z0-9_.]+)/video/(\d+)|vm\.tiktok\.com/([A-Za-z0-9]+))"),
    ),
    PlatformPattern(
        "vimeo",
        re.compile(r"^vimeo\.com/(\d+)"),
    ),
    PlatformPattern(
        "soundcloud",
        re.compile(r"^soundcloud\.com/([A-Za-z0-9_-]+)/([A-Za-z0-9_-]+)"),
    ),
)


# --- Builders (one per platform) ---

Builder = Callable[[str, tuple[str, ...]], ContentDescriptor]


def _youtube(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    video_id = groups[0]
    return ContentDescriptor(
        type="youtube",
        url=f"https://www.youtube.com/watch?v={video_id}",
        external_id=video_id,
        title="YouTube Video",
        thumbnail_url=f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg",
        embed_html=(
            f'<iframe src="https://www.youtube.com/embed/{video_id}" frameborder="0" '
            'allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; '
            'picture-in-picture" allowfullscreen></iframe>'
        ),
    )


def _spotify(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    kind, spotify_id = groups[0], groups[1]
    height = 152 if kind == "track" else 352
    return ContentDescriptor(
        type="spotify",
        url=url,
        external_id=spotify_id,
        title=f"Spotify {kind}",
        embed_html=(
            f'<iframe src="https://open.spotify.com/embed/{kind}/{spotify_id}?theme=0" '
            f'frameborder="0" allow="encrypted-media" style="height: {height}px"></iframe>'
        ),
    )


def _twitter(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    username, tweet_id = groups[0], groups[1]
    return ContentDescriptor(
        type="twitter",
        url=url,
        external_id=tweet_id,
        title=f"Tweet by @{username}",
        embed_html=(
            f'<blockquote class="twitter-tweet" data-theme="dark">'
            f'<a href="{html.escape(url)}"></a></blockquote>'
        ),
    )


def _instagram(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    return ContentDescriptor(
        type="instagram",
        url=url,
        external_id=groups[0],
        title="Instagram Post",
        embed_html=(
            f'<blockquote class="instagram-media" data-instgrm-permalink="{html.escape(url)}" '
            'data-instgrm-version="14"></blockquote>'
        ),
    )


def _tiktok(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    # Long form captures (user, video id); short vm. links capture only a code
    video_id = groups[1] or groups[2]
    return ContentDescriptor(
        type="tiktok",
        url=url,
        external_id=video_id,
        title="TikTok Video",
        embed_html=(
            f'<blockquote class="tiktok-embed" data-video-id="{html.escape(video_id)}">'
            f'<a href="{html.escape(url)}"></a></blockquote>'
        ),
    )


def _vimeo(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    video_id = groups[0]
    return ContentDescriptor(
        type="vimeo",
        url=url,
        external_id=video_id,
        title="Vimeo Video",
        embed_html=(
            f'<iframe src="https://player.vimeo.com/video/{video_id}'
            '?color=ffffff&amp;title=0&amp;byline=0&amp;portrait=0" frameborder="0" '
            'allow="autoplay; fullscreen; picture-in-picture" allowfullscreen></iframe>'
        ),
    )


def _soundcloud(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    return ContentDescriptor(
        type="soundcloud",
        url=url,
        external_id=f"{groups[0]}/{groups[1]}",
        title="SoundCloud Track",
        embed_html=(
            f'<iframe src="https://w.soundcloud.com/player/?url={quote(url, safe="")}'
            "&amp;color=%23ffffff&amp;auto_play=false&amp;hide_related=true"
            '&amp;visual=true" frameborder="0" allow="autoplay"></iframe>'
        ),
    )


def _image(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    filename = groups[0] if groups and groups[0] else "Image"
    return ContentDescriptor(
        type="image",
        url=url,
        title=filename,
        thumbnail_url=url,
        embed_html=f'<img src="{html.escape(url)}" alt="{html.escape(filename)}" loading="lazy" />',
    )


def _link(url: str, groups: tuple[str, ...]) -> ContentDescriptor:
    hostname = groups[0] if groups and groups[0] else "Link"
    return ContentDescriptor(type="link", url=url, title=hostname)


def _note(text: str, groups: tuple[str, ...]) -> ContentDescriptor:
    return ContentDescriptor(type="note", url=None, title=text)


BUILDERS: dict[Platform, Builder] = {
    "image": _image,
    "youtube": _youtube,
    "spotify": _spotify,
    "twitter": _twitter,
    "instagram": _instagram,
    "tiktok": _tiktok,
    "vimeo": _vimeo,
    "soundcloud": _soundcloud,
    "link": _link,
    "note": _note,
}

CONTENT_ICONS: dict[Platform, str] = {
    "image": "▣",
    "youtube": "▶",
    "spotify": "♫",
    "twitter": "𝕏",
    "instagram": "◎",
    "tiktok": "♪",
    "vimeo": "▶",
    "soundcloud": "♫",
    "link": "◎",
    "note": "✎",
}

CONTENT_BACKGROUNDS: dict[Platform, str | None] = {
    "image": None,
    "youtube": None,
    "spotify": "linear-gradient(135deg, #1DB954, #191414)",
    "twitter": None,
    "instagram": None,
    "tiktok": None,
    "vimeo": None,
    "soundcloud": "linear-gradient(135deg, #ff5500, #ff7700)",
    "link": None,
    "note": None,
}


# --- Helpers ---


def looks_like_url(text: str) -> bool:
    """True for scheme-prefixed input or a bare domain without spaces."""
    if not text or any(ch.isspace() for ch in text):
        return False
    if _SCHEME_RE.match(text):
        return True
    match = _BARE_DOMAIN_RE.match(text)
    if match is None:
        return False
    return bool(match.group("rest")) or match.group("tld").lower() not in _FILE_SUFFIXES


def _split(url: str) -> SplitResult | None:
    try:
        parts = urlsplit(url)
        # Accessing .port validates it and may raise ValueError
        _ = parts.port
    except ValueError:
        return None
    return parts


def _normalize(text: str) -> tuple[str, SplitResult | None]:
    """Add https:// when missing, lowercase the host, drop the fragment."""
    url = text if _SCHEME_RE.match(text) else f"https://{text}"
    parts = _split(url)
    if parts is None or not parts.netloc:
        return url, None

    parts = parts._replace(netloc=parts.netloc.lower(), fragment="")
    return urlunsplit(parts), parts


def _match_target(parts: SplitResult) -> str:
    host = (parts.hostname or "").lower()
    for prefix in _HOST_PREFIXES:
        if host.startswith(prefix):
            host = host[len(prefix) :]
            break
    target = host + (parts.path or "")
    if parts.query:
        target += "?" + parts.query
    return target


def match_platform(parts: SplitResult) -> tuple[Platform, tuple[str, ...]] | None:
    """Return the first matching platform and its captured groups."""
    target = _match_target(parts)
    for pattern in PATTERNS:
        m = pattern.regex.match(target)
        if m:
            return pattern.platform, tuple(g or "" for g in m.groups())
    return None


def _classify_url(text: str) -> ContentDescriptor:
    url, parts = _normalize(text)
    if parts is None:
        return _link(url, ())

    hostname = (parts.hostname or "").removeprefix("www.")

    if parts.scheme in ("http", "https"):
        if _IMAGE_EXT_RE.search(parts.path or ""):
            filename = (parts.path or "").rsplit("/", 1)[-1]
            return _image(url, (filename,))

        matched = match_platform(parts)
        if matched:
            platform, groups = matched
            return BUILDERS[platform](url, groups)

    return _link(url, (hostname,))


# --- Public API ---


def classify(text: str, max_note_length: int | None = None) -> ContentDescriptor:
    """
    Classify pasted input into a content descriptor (position unset).

    Never raises: free text becomes a ``note``, unrecognised or malformed
    URLs become a generic ``link``.
    """
    if not isinstance(text, str):
        text = "" if text is None else str(text)
    stripped = text.strip()

    if not looks_like_url(stripped):
        note_text = stripped if max_note_length is None else stripped[:max_note_length]
        return _note(note_text, ())

    try:
        return _classify_url(stripped)
    except Exception:
        logger.exception("Classifier fell back to generic link for %r", stripped[:200])
        return _link(stripped, ())


def partition_for(platform: Platform, media_types: tuple[str, ...] = ("image",)) -> Partition:
    """Physical partition a descriptor of this platform is stored in."""
    return "media" if platform in media_types else "embed"


def content_icon(platform: Platform) -> str:
    return CONTENT_ICONS.get(platform, "◎")


def content_background(platform: Platform) -> str | None:
    return CONTENT_BACKGROUNDS.get(platform)


# Verify every platform is handled exactly once at module load time
def _verify_exhaustive() -> None:
    declared = set(get_args(Platform))
    for name, mapping in (
        ("BUILDERS", BUILDERS),
        ("CONTENT_ICONS", CONTENT_ICONS),
        ("CONTENT_BACKGROUNDS", CONTENT_BACKGROUNDS),
    ):
        missing = declared - set(mapping)
        if missing:
            raise RuntimeError(f"{name} missing platforms: {sorted(missing)}")
    if declared != set(PLATFORMS):
        raise RuntimeError("PLATFORMS out of sync with Platform literal")


_verify_exhaustive()
