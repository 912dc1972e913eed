"""
Unit tests for the content classifier.

Covers per-platform recognition, the image short-circuit, note/link
fallbacks and totality on odd input.
"""

from __future__ import annotations

import pytest

from footprint.core.services.classifier import (
    BUILDERS,
    CONTENT_BACKGROUNDS,
    CONTENT_ICONS,
    classify,
    content_background,
    content_icon,
    looks_like_url,
    partition_for,
)
from footprint.domain.entities import PLATFORMS


class TestPlatforms:
    """Known hosts map to their platform with ids extracted."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://m.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
            "https://youtube.com/shorts/dQw4w9WgXcQ",
            "youtube.com/embed/dQw4w9WgXcQ",
        ],
    )
    def test_youtube_variants(self, url: str) -> None:
        tile = classify(url)

        assert tile.type == "youtube"
        assert tile.external_id == "dQw4w9WgXcQ"
        assert tile.thumbnail_url == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"
        assert tile.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_spotify_track_is_compact(self) -> None:
        tile = classify("https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC")

        assert tile.type == "spotify"
        assert tile.external_id == "4uLU6hMCjMI75M1A2tKUQC"
        assert tile.embed_html is not None
        assert "height: 152px" in tile.embed_html

    def test_spotify_playlist_is_tall(self) -> None:
        tile = classify("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M")

        assert tile.embed_html is not None
        assert "height: 352px" in tile.embed_html

    @pytest.mark.parametrize("host", ["twitter.com", "x.com", "mobile.twitter.com"])
    def test_twitter_hosts(self, host: str) -> None:
        tile = classify(f"https://{host}/jack/status/20")

        assert tile.type == "twitter"
        assert tile.external_id == "20"
        assert tile.title == "Tweet by @jack"

    def test_instagram_post(self) -> None:
        tile = classify("https://www.instagram.com/p/CxYz123/")
        assert tile.type == "instagram"
        assert tile.external_id == "CxYz123"

    def test_tiktok_video(self) -> None:
        tile = classify("https://www.tiktok.com/@someone/video/7234567890123456789")
        assert tile.type == "tiktok"
        assert tile.external_id == "7234567890123456789"

    def test_tiktok_short_link(self) -> None:
        tile = classify("https://vm.tiktok.com/ZMabc123/")
        assert tile.type == "tiktok"
        assert tile.external_id == "ZMabc123"

    def test_vimeo(self) -> None:
        tile = classify("https://vimeo.com/76979871")
        assert tile.type == "vimeo"
        assert tile.external_id == "76979871"

    def test_soundcloud(self) -> None:
        tile = classify("https://soundcloud.com/artist-name/track-name")
        assert tile.type == "soundcloud"
        assert tile.external_id == "artist-name/track-name"

    def test_host_must_anchor(self) -> None:
        """A platform name elsewhere in the URL is not a match."""
        tile = classify("https://evil.example.com/youtube.com/watch?v=dQw4w9WgXcQ")
        assert tile.type == "link"


class TestImages:
    def test_image_extension(self) -> None:
        tile = classify("https://cdn.example.com/photos/cat.JPG")

        assert tile.type == "image"
        assert tile.title == "cat.JPG"
        assert tile.thumbnail_url == tile.url

    def test_image_wins_over_platform_host(self) -> None:
        tile = classify("https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg")
        assert tile.type == "image"


class TestFallbacks:
    def test_free_text_is_note(self) -> None:
        tile = classify("not a url")

        assert tile.type == "note"
        assert tile.title == "not a url"
        assert tile.url is None

    def test_note_clipped(self) -> None:
        tile = classify("word " * 100, max_note_length=10)
        assert len(tile.title) == 10

    @pytest.mark.parametrize("text", ["notes.md", "todo.txt", "Report.PDF"])
    def test_file_names_are_notes(self, text: str) -> None:
        tile = classify(text)

        assert tile.type == "note"
        assert tile.title == text

    def test_unknown_host_is_link(self) -> None:
        tile = classify("https://example.org/some/page")

        assert tile.type == "link"
        assert tile.title == "example.org"

    def test_bare_domain_gets_scheme(self) -> None:
        tile = classify("example.org/about")

        assert tile.type == "link"
        assert tile.url == "https://example.org/about"

    def test_fragment_dropped_and_host_lowered(self) -> None:
        tile = classify("https://Example.ORG/Page#section")
        assert tile.url == "https://example.org/Page"

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "http://", "https://[::1", "http://host:99999/", "ftp://files.example.com/x"],
    )
    def test_never_raises(self, text: str) -> None:
        tile = classify(text)
        assert tile.type in PLATFORMS

    def test_non_string_input(self) -> None:
        tile = classify(None)  # type: ignore[arg-type]
        assert tile.type == "note"
        assert tile.title == ""


class TestHelpers:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("https://example.com", True),
            ("example.com", True),
            ("sub.example.co.uk/path", True),
            ("hello world", False),
            ("hello", False),
            ("notes.md", False),
            ("todo.txt", False),
            ("example.md/readme", True),
            ("", False),
        ],
    )
    def test_looks_like_url(self, text: str, expected: bool) -> None:
        assert looks_like_url(text) is expected

    def test_partition(self) -> None:
        assert partition_for("image") == "media"
        assert partition_for("note") == "embed"
        assert partition_for("youtube") == "embed"
        assert partition_for("youtube", ("image", "youtube")) == "media"

    def test_mappings_cover_every_platform(self) -> None:
        for mapping in (BUILDERS, CONTENT_ICONS, CONTENT_BACKGROUNDS):
            assert set(mapping) == set(PLATFORMS)

    def test_icon_and_background(self) -> None:
        assert content_icon("note") == "✎"
        assert content_background("spotify") is not None
        assert content_background("image") is None
