"""Test the host-facing search provider"""

import asyncio
import dataclasses

import pytest

from spot_resolver.core.exceptions import ConfigValidationError
from spot_resolver.search.models import LoadType, SearchQuery, SearchResponse, UnresolvedTrack
from spot_resolver.search.provider import create_provider
from spot_resolver.spotify.auth import TOKEN_URL
from spot_resolver.spotify.fetcher import BASE_URL


NODE_URL = "http://localhost:2333/loadtracks"
TRACK_ID = "4u7EnebtmKWzUH433cf5Qv"
PLAYLIST_ID = "37i9dQZF1DXcBWIGoYBM5M"
LOST_FIRST_ID = "2vUqAtq3fVMZ8BSWBmHWJv"


class FakeHost:
    """Player with its own search function"""

    def __init__(self, result=None):
        self.result = result if result is not None else object()
        self.received = []

    async def search(self, query, requester=None):
        self.received.append((query, requester))
        return self.result


@pytest.fixture
def spotify(session, sample_track_data, make_track, make_page):
    """Session serving a token, one track and a two-track playlist"""
    session.add("POST", TOKEN_URL, (200, {"access_token": "abc", "expires_in": 3600}))
    session.add("GET", f"{BASE_URL}/tracks/{TRACK_ID}", (200, sample_track_data))
    session.add("GET", f"{BASE_URL}/playlists/{PLAYLIST_ID}", (200, {
        "id": PLAYLIST_ID,
        "name": "Road Trip",
        "tracks": make_page([
            {"track": make_track(name="Found", artist="Band", duration_ms=200000)},
            {"track": make_track(name="Lost", artist="Nobody", duration_ms=100000)},
        ]),
    }))
    session.add("GET", f"{BASE_URL}/playlists/{LOST_FIRST_ID}", (200, {
        "id": LOST_FIRST_ID,
        "name": "Lost and Found",
        "tracks": make_page([
            {"track": make_track(name="Lost", artist="Nobody", duration_ms=100000)},
            {"track": make_track(name="Found", artist="Band", duration_ms=200000)},
        ]),
    }))
    return session


@pytest.fixture
def backend(spotify, make_candidate):
    """Search node matching 'Band - Found' and nothing else"""
    def respond(call):
        if call.params["identifier"] == "ytsearch:Band - Found":
            return 200, {"loadType": "SEARCH_RESULT", "tracks": [make_candidate("Band - Topic", "Found")]}
        return 200, {"loadType": "NO_MATCHES", "tracks": []}

    spotify.add("GET", NODE_URL, respond)
    return spotify


class TestDelegation:
    """Test queries that are not Spotify links"""

    @pytest.mark.asyncio
    async def test_host_result_returned_verbatim(self, spotify, resolver_config):
        """Test the host's own result object is returned unchanged"""
        host = FakeHost()
        provider = create_provider(resolver_config, spotify)

        async with provider:
            provider.register(host)
            result = await host.search("never gonna give you up", requester="user#1")

        assert result is host.result
        assert host.received == [("never gonna give you up", "user#1")]

    @pytest.mark.asyncio
    async def test_structured_query_passed_unchanged(self, spotify, resolver_config):
        """Test a SearchQuery reaches the host as the same object"""
        query = SearchQuery("lofi beats", source="soundcloud")
        host = FakeHost()
        provider = create_provider(resolver_config, spotify)
        provider.register(host)

        await host.search(query)

        assert host.received[0][0] is query

    @pytest.mark.asyncio
    async def test_synchronous_fallback(self, spotify, resolver_config):
        """Test a plain function can serve as the host search"""
        provider = create_provider(resolver_config, spotify, fallback=lambda query, requester: ("host", query))

        assert await provider.search("hello") == ("host", "hello")

    @pytest.mark.asyncio
    async def test_no_fallback(self, spotify, resolver_config):
        """Test no host search yields NO_MATCHES"""
        provider = create_provider(resolver_config, spotify)

        response = await provider.search("hello")

        assert response.load_type is LoadType.NO_MATCHES

    def test_unregister_restores_host_search(self, spotify, resolver_config):
        """Test unregister() puts the original function back"""
        host = FakeHost()
        original = host.search
        provider = create_provider(resolver_config, spotify)

        provider.register(host)
        assert host.search == provider.search
        provider.unregister()

        assert host.search == original

    def test_register_requires_search(self, spotify, resolver_config):
        """Test hosts without a search function are rejected"""
        provider = create_provider(resolver_config, spotify)

        with pytest.raises(ValueError):
            provider.register(object())


class TestSpotifyQueries:
    """Test Spotify links resolved into responses"""

    @pytest.mark.asyncio
    async def test_track(self, spotify, resolver_config):
        """Test a track link yields TRACK_LOADED with one track"""
        provider = create_provider(resolver_config, spotify)

        async with provider:
            response = await provider.search(f"https://open.spotify.com/track/{TRACK_ID}", requester="user#1")

        assert isinstance(response, SearchResponse)
        assert response.load_type is LoadType.TRACK_LOADED
        assert len(response.tracks) == 1
        assert response.tracks[0].title == "Bohemian Rhapsody"
        assert response.tracks[0].author == "Queen"
        assert response.tracks[0].requester == "user#1"
        assert spotify.calls_to(f"{BASE_URL}/tracks/{TRACK_ID}")[0].headers["Authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_playlist(self, spotify, resolver_config):
        """Test a playlist link yields PLAYLIST_LOADED with the summed duration"""
        provider = create_provider(resolver_config, spotify)

        async with provider:
            response = await provider.search({"query": f"spotify:playlist:{PLAYLIST_ID}"})

        assert response.load_type is LoadType.PLAYLIST_LOADED
        assert [t.title for t in response.tracks] == ["Found", "Lost"]
        assert response.playlist.name == "Road Trip"
        assert response.playlist.duration_ms == 300000

    @pytest.mark.asyncio
    async def test_unsupported_kind(self, spotify, resolver_config):
        """Test unsupported kinds fail without contacting Spotify"""
        provider = create_provider(resolver_config, spotify)

        response = await provider.search("https://open.spotify.com/artist/0OdUWJ0sBjDrqHygGUXeCF")

        assert response.load_type is LoadType.LOAD_FAILED
        assert "must be one of" in response.exception.message
        assert spotify.calls == []

    @pytest.mark.asyncio
    async def test_transport_error(self, spotify, resolver_config):
        """Test a Spotify error response becomes LOAD_FAILED"""
        provider = create_provider(resolver_config, spotify)

        async with provider:
            response = await provider.search("spotify:album:doesnotexist")

        assert response.load_type is LoadType.LOAD_FAILED
        assert response.exception.message == "Non existing id"
        assert response.exception.severity == "COMMON"

    @pytest.mark.asyncio
    async def test_invalid_catalog_item(self, spotify, resolver_config, make_track):
        """Test an invalid track object becomes LOAD_FAILED"""
        broken = make_track()
        del broken["artists"]
        spotify.add("GET", f"{BASE_URL}/tracks/broken", (200, broken))
        provider = create_provider(resolver_config, spotify)

        response = await provider.search("spotify:track:broken")

        assert response.load_type is LoadType.LOAD_FAILED
        assert response.exception.message == "The track artists array was not provided"

    @pytest.mark.asyncio
    async def test_unexpected_error(self, spotify, resolver_config, monkeypatch):
        """Test unexpected exceptions never reach the host"""
        provider = create_provider(resolver_config, spotify)

        async def explode(track_id):
            raise RuntimeError("boom")

        monkeypatch.setattr(provider._fetcher, "fetch_track", explode)

        response = await provider.search(f"spotify:track:{TRACK_ID}")

        assert response.load_type is LoadType.LOAD_FAILED
        assert response.exception.message == "boom"


class TestConversion:
    """Test eager and lazy matching"""

    @pytest.mark.asyncio
    async def test_failed_tracks_dropped(self, backend, resolver_config, node):
        """Test unmatched tracks are dropped and matched ones resolved"""
        config = dataclasses.replace(resolver_config, convert_unresolved=True)
        provider = create_provider(config, backend, node_lookup=lambda: node)

        async with provider:
            response = await provider.search(f"spotify:playlist:{PLAYLIST_ID}")

        assert response.load_type is LoadType.PLAYLIST_LOADED
        assert [t.title for t in response.tracks] == ["Found"]
        assert response.tracks[0].resolved.author == "Band - Topic"
        assert response.playlist.duration_ms == 200000

    @pytest.mark.asyncio
    async def test_abort_on_match_failure(self, backend, resolver_config, node):
        """Test the first failure aborts the batch when configured"""
        config = dataclasses.replace(resolver_config, convert_unresolved=True, abort_on_match_failure=True)
        provider = create_provider(config, backend, node_lookup=lambda: node)

        async with provider:
            response = await provider.search(f"spotify:playlist:{PLAYLIST_ID}")

        assert response.load_type is LoadType.NO_MATCHES
        assert response.tracks == ()

    @pytest.mark.asyncio
    async def test_abort_leaves_no_pending_tasks(self, backend, resolver_config, node):
        """Test tracks still waiting for a slot are finished when the batch aborts"""
        config = dataclasses.replace(
            resolver_config, convert_unresolved=True, abort_on_match_failure=True, match_concurrency=1
        )
        provider = create_provider(config, backend, node_lookup=lambda: node)

        response = await provider.search(f"spotify:playlist:{LOST_FIRST_ID}")

        pending = [task for task in asyncio.all_tasks() if task is not asyncio.current_task() and not task.done()]
        assert response.load_type is LoadType.NO_MATCHES
        assert pending == []
        assert [call.params["identifier"] for call in backend.calls_to(NODE_URL)] == ["ytsearch:Nobody - Lost"]

    @pytest.mark.asyncio
    async def test_no_nodes_drops_everything(self, spotify, resolver_config):
        """Test every track dropped yields NO_MATCHES"""
        config = dataclasses.replace(resolver_config, convert_unresolved=True)
        provider = create_provider(config, spotify, node_lookup=lambda: None)

        async with provider:
            response = await provider.search(f"spotify:playlist:{PLAYLIST_ID}")

        assert response.load_type is LoadType.NO_MATCHES

    def test_convert_requires_node_lookup(self, spotify, resolver_config):
        """Test eager matching without a node lookup fails at construction"""
        config = dataclasses.replace(resolver_config, convert_unresolved=True)

        with pytest.raises(ConfigValidationError, match="convertUnresolved"):
            create_provider(config, spotify)

    @pytest.mark.asyncio
    async def test_lazy_resolve(self, backend, resolver_config, node):
        """Test a single unresolved track can be resolved on demand"""
        provider = create_provider(resolver_config, backend, node_lookup=lambda: node)
        track = UnresolvedTrack(title="Found", author="Band", duration_ms=200000, requester="me")

        resolved = await provider.resolve(track)

        assert resolved.is_resolved
        assert resolved.resolved.title == "Found"
        assert resolved.requester == "me"
        assert not track.is_resolved
