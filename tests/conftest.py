"""Test configuration and fixtures"""

import asyncio
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from spot_resolver.core.config import NodeConfig, ResolverConfig


@dataclass
class RecordedCall:
    """One request made through FakeSession"""
    method: str
    url: str
    headers: dict | None
    params: dict | None
    data: Any


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse"""

    def __init__(self, status: int, payload: Any, yield_control: bool = False) -> None:
        self.status = status
        self._payload = payload
        self._yield_control = yield_control

    async def json(self, content_type=None):
        if self._yield_control:
            await asyncio.sleep(0)
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """
    Stand-in for aiohttp.ClientSession serving canned JSON per URL.

    Each route holds a queue of responses; the last one repeats. A response
    is a (status, payload) tuple, an exception instance to raise, or a
    callable taking the RecordedCall and returning a (status, payload) tuple.

    With yield_control, reading a body yields to the event loop once, like
    a real network read.
    """

    def __init__(self, yield_control: bool = False) -> None:
        self.yield_control = yield_control
        self.routes: dict[tuple[str, str], list] = {}
        self.calls: list[RecordedCall] = []

    def add(self, method: str, url: str, *responses) -> None:
        self.routes.setdefault((method, url), []).extend(responses)

    def calls_to(self, url: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.url == url]

    def request(self, method, url, headers=None, params=None, data=None):
        call = RecordedCall(method, url, headers, params, data)
        self.calls.append(call)

        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse(404, {"error": {"status": 404, "message": "Non existing id"}})

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(call)
        status, payload = response
        return FakeResponse(status, payload, self.yield_control)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def session():
    """Fake aiohttp session with no routes"""
    return FakeSession()


@pytest.fixture
def tokens():
    """Token source exposing a fixed bearer token"""
    return SimpleNamespace(current_token="Bearer test-token")


@pytest.fixture
def resolver_config():
    """Valid resolver options without eager matching"""
    return ResolverConfig(client_id="test_client_id", client_secret="test_client_secret")


@pytest.fixture
def node():
    """Local search backend node"""
    return NodeConfig(host="localhost", port=2333, password="youshallnotpass")


@pytest.fixture
def make_track():
    """Factory for Spotify API track objects"""
    def _make(name="Test Song", artist="Test Artist", duration_ms=210000, track_id="track_123"):
        return {
            "id": track_id,
            "name": name,
            "artists": [{"id": "artist_123", "name": artist}],
            "duration_ms": duration_ms,
            "uri": f"spotify:track:{track_id}",
        }
    return _make


@pytest.fixture
def make_page():
    """Factory for Spotify paging objects"""
    def _make(items, next_url=None):
        return {"items": items, "next": next_url, "total": len(items)}
    return _make


@pytest.fixture
def make_candidate():
    """Factory for search backend track objects"""
    def _make(author, title, length=210000, identifier="dQw4w9WgXcQ"):
        return {
            "track": f"encoded-{identifier}",
            "info": {
                "identifier": identifier,
                "author": author,
                "title": title,
                "length": length,
                "isStream": False,
                "uri": f"https://www.youtube.com/watch?v={identifier}",
            },
        }
    return _make


@pytest.fixture
def sample_track_data(make_track):
    """Sample Spotify track object"""
    return make_track(name="Bohemian Rhapsody", artist="Queen", duration_ms=354320, track_id="4u7EnebtmKWzUH433cf5Qv")
