"""
Tests for the Spotify URL parser utility.

Covers all supported URL formats, edge cases, and invalid inputs.
"""

import pytest

from spotinote.spotify.url_parser import extract_id_from_url, parse_spotify_url


class TestParseSpotifyUrl:
    """Tests for parse_spotify_url()."""

    # =========================================================================
    # Valid URL formats
    # =========================================================================

    def test_full_https_url(self):
        """Standard HTTPS URL should extract type and ID."""
        url = "https://open.spotify.com/track/4iV5W9uYEdYUVa79Axb7Rh"
        assert parse_spotify_url(url) == ("track", "4iV5W9uYEdYUVa79Axb7Rh")

    def test_url_with_query_params(self):
        url = "https://open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy?si=abc123"
        assert parse_spotify_url(url) == ("album", "4aawyAB9vmqN3uQ7FjRGTy")

    def test_url_without_protocol(self):
        url = "open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"
        assert parse_spotify_url(url) == ("playlist", "37i9dQZF1DXcBWIGoYBM5M")

    def test_localized_url(self):
        url = "https://open.spotify.com/intl-de/artist/0TnOYISbd1XYRBk9myaseg"
        assert parse_spotify_url(url) == ("artist", "0TnOYISbd1XYRBk9myaseg")

    def test_spotify_uri(self):
        assert parse_spotify_url("spotify:artist:0TnOYISbd1XYRBk9myaseg") == (
            "artist", "0TnOYISbd1XYRBk9myaseg"
        )

    def test_surrounding_whitespace(self):
        url = "  https://open.spotify.com/track/abc123  "
        assert parse_spotify_url(url) == ("track", "abc123")

    # =========================================================================
    # Invalid inputs
    # =========================================================================

    @pytest.mark.parametrize("value", [
        None,
        "",
        "   ",
        "https://example.com/track/abc",
        "https://open.spotify.com/show/abc123",
        "spotify:episode:abc123",
        "not a url",
    ])
    def test_unparseable_returns_none(self, value):
        assert parse_spotify_url(value) is None


class TestExtractIdFromUrl:
    """Tests for extract_id_from_url()."""

    def test_returns_id(self):
        assert extract_id_from_url("https://open.spotify.com/track/abc123") == "abc123"

    def test_matching_type(self):
        url = "https://open.spotify.com/album/xyz789"
        assert extract_id_from_url(url, "album") == "xyz789"

    def test_type_mismatch_returns_none(self):
        url = "https://open.spotify.com/album/xyz789"
        assert extract_id_from_url(url, "playlist") is None

    def test_invalid_returns_none(self):
        assert extract_id_from_url("garbage", "track") is None

    def test_type_mismatch_logs_lazily(self, caplog):
        url = "https://open.spotify.com/album/xyz789"

        with caplog.at_level("DEBUG", logger="spotinote.spotify.url_parser"):
            extract_id_from_url(url, "playlist")

        record = caplog.records[-1]
        assert record.msg == "URL points at a %s, expected a %s: %r"
        assert record.args == ("album", "playlist", url)
