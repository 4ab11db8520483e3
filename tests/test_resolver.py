"""Test Spotify URL/URI parsing"""

import pytest

from spot_resolver.spotify.resolver import ResourceKind, ResourceResolver


class TestResourceResolver:
    """Test ResourceResolver.resolve()"""

    @pytest.fixture
    def resolver(self):
        return ResourceResolver()

    @pytest.mark.parametrize(
        "query, kind, resource_id",
        [
            ("https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT", "track", "4cOdK2wGLETKBW3PvgPWqT"),
            ("https://open.spotify.com/album/6dVIqQ8qmQ5GBnJ9shOYGE", "album", "6dVIqQ8qmQ5GBnJ9shOYGE"),
            ("spotify:playlist:37i9dQZF1DXcBWIGoYBM5M", "playlist", "37i9dQZF1DXcBWIGoYBM5M"),
            ("spotify:track:4cOdK2wGLETKBW3PvgPWqT", "track", "4cOdK2wGLETKBW3PvgPWqT"),
        ],
    )
    def test_supported_forms(self, resolver, query, kind, resource_id):
        """Test URL and URI forms yield the captured kind and id"""
        reference = resolver.resolve(query)

        assert reference is not None
        assert reference.kind == kind
        assert reference.id == resource_id
        assert reference.resource_kind is ResourceKind(kind)

    def test_query_string_is_not_part_of_id(self, resolver):
        """Test a share link's ?si= parameter is ignored"""
        reference = resolver.resolve("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=a1b2c3")

        assert reference.kind == "playlist"
        assert reference.id == "37i9dQZF1DXcBWIGoYBM5M"

    def test_url_inside_text(self, resolver):
        """Test a URL embedded in free text is still found"""
        reference = resolver.resolve("play https://open.spotify.com/track/abc123 please")

        assert reference.kind == "track"
        assert reference.id == "abc123"

    @pytest.mark.parametrize(
        "query",
        ["never gonna give you up", "https://www.youtube.com/watch?v=dQw4w9WgXcQ", ""],
    )
    def test_non_spotify_queries(self, resolver, query):
        """Test anything without the Spotify grammar is not ours"""
        assert resolver.resolve(query) is None

    def test_unsupported_kind_is_captured(self, resolver):
        """Test unknown kinds are parsed but flagged as unsupported"""
        reference = resolver.resolve("spotify:artist:0OdUWJ0sBjDrqHygGUXeCF")

        assert reference.kind == "artist"
        assert reference.resource_kind is None

    def test_legacy_user_playlist_uri(self, resolver):
        """Test the old user playlist URI form captures the whole prefix as kind"""
        reference = resolver.resolve("spotify:user:spotify:playlist:37i9dQZF1DXcBWIGoYBM5M")

        assert reference.kind == "user:spotify:playlist"
        assert reference.resource_kind is None
