"""
Search backend matching for spot-resolver.

This module finds a directly playable source for a Spotify track by
searching the host's audio node for "Artist - Title" and picking one of
the returned candidates.

Matching Algorithm (strict priority, first hit wins):
    1. Exact channel match (only when the track has an artist):
       a. candidate author equals the artist or "<artist> - Topic"
          (YouTube's auto-generated official audio channels)
       b. candidate title equals the Spotify title
       Comparisons are case-insensitive full matches of the literal text.
    2. Duration window: candidate length within DURATION_TOLERANCE_MS of
       the Spotify duration (only when the duration is known).
    3. Fallback: the first candidate the backend returned.
    4. No candidates: NoMatchError.

    A backend response whose own load type reports failure or no matches
    is a NoMatchError for this track, not a transport error.

Usage:
    from spot_resolver.youtube.matcher import TrackMatcher

    matcher = TrackMatcher(session, node_pool)
    candidate = await matcher.match(track)
    print(f"{candidate.author} - {candidate.title}")
"""

import re
from collections.abc import Callable, Sequence

import aiohttp

from spot_resolver.core.config import NodeConfig
from spot_resolver.core.exceptions import NoMatchError, TransportError
from spot_resolver.core.http import request_json
from spot_resolver.core.logger import format_matched_message, get_logger
from spot_resolver.spotify.models import CatalogTrack
from spot_resolver.youtube.models import MatchCandidate

logger = get_logger(__name__)


# Duration tolerance for the duration window rule (milliseconds)
DURATION_TOLERANCE_MS = 1500

# Search prefix understood by the backend's YouTube source
SEARCH_PREFIX = "ytsearch:"

# Backend load types that mean "nothing usable"
FAILED_LOAD_TYPES = ("LOAD_FAILED", "NO_MATCHES")

# Rule names reported alongside a selection
RULE_AUTHOR = "author"
RULE_TITLE = "title"
RULE_DURATION = "duration"
RULE_FIRST = "first result"


def _equals_ignore_case(expected: str, actual: str) -> bool:
    """Case-insensitive full match of expected as a literal string."""
    return re.fullmatch(re.escape(expected), actual, re.IGNORECASE) is not None


def select_best(
    track: CatalogTrack,
    candidates: Sequence[MatchCandidate],
    tolerance_ms: int = DURATION_TOLERANCE_MS
) -> tuple[MatchCandidate, str]:
    """
    Pick the best candidate for a track.

    Args:
        track: The Spotify track being matched.
        candidates: Backend results in backend order.
        tolerance_ms: Half-width of the duration window.

    Returns:
        Tuple of (selected candidate, name of the rule that selected it).

    Raises:
        NoMatchError: If candidates is empty.
    """
    if not candidates:
        raise NoMatchError(
            f"No matches found for: {track.search_query}",
            details={"query": track.search_query}
        )

    if track.primary_artist:
        channel_names = (track.primary_artist, f"{track.primary_artist} - Topic")
        for candidate in candidates:
            if any(_equals_ignore_case(name, candidate.author) for name in channel_names):
                return candidate, RULE_AUTHOR

        for candidate in candidates:
            if _equals_ignore_case(track.title, candidate.title):
                return candidate, RULE_TITLE

    if track.duration_ms:
        low = track.duration_ms - tolerance_ms
        high = track.duration_ms + tolerance_ms
        for candidate in candidates:
            if low <= candidate.length_ms <= high:
                return candidate, RULE_DURATION

    return candidates[0], RULE_FIRST


class TrackMatcher:
    """
    Matches Spotify tracks to search backend results.

    Attributes:
        _session: aiohttp session used for backend requests.
        _node_lookup: Host-supplied callable returning the least-loaded
                      node, or None if no node is available.
        _source: Search prefix sent to the backend.
        _tolerance_ms: Duration window half-width.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        node_lookup: Callable[[], NodeConfig | None],
        source: str = SEARCH_PREFIX,
        tolerance_ms: int = DURATION_TOLERANCE_MS
    ) -> None:
        self._session = session
        self._node_lookup = node_lookup
        self._source = source
        self._tolerance_ms = tolerance_ms

    def identifier_for(self, track: CatalogTrack) -> str:
        """Backend search identifier for a track, e.g. "ytsearch:Queen - Bohemian Rhapsody"."""
        return f"{self._source}{track.search_query}"

    async def search(self, identifier: str) -> list[MatchCandidate]:
        """
        Run one search on the least-loaded node.

        Returns:
            Candidates in backend order.

        Raises:
            NoMatchError: If the backend reports failure or no matches.
            TransportError: If no node is available or the request fails.
        """
        node = self._node_lookup()
        if node is None:
            raise TransportError("No available search nodes.", details={"identifier": identifier})

        _, payload = await request_json(
            self._session,
            "GET",
            f"{node.base_url}/loadtracks",
            headers={"Authorization": node.password},
            params={"identifier": identifier},
        )

        if not isinstance(payload, dict):
            raise TransportError(
                f"Invalid search response from node {node.name}",
                details={"identifier": identifier}
            )

        load_type = payload.get("loadType")
        if load_type in FAILED_LOAD_TYPES:
            exception = payload.get("exception") or {}
            message = exception.get("message") if isinstance(exception, dict) else None
            raise NoMatchError(
                message or f"No matches found for: {identifier}",
                details={"identifier": identifier, "load_type": load_type, "node": node.name}
            )

        raw_tracks = payload.get("tracks") or []
        return [MatchCandidate.from_lavalink(item) for item in raw_tracks if isinstance(item, dict)]

    async def match(self, track: CatalogTrack) -> MatchCandidate:
        """
        Find the best backend result for a Spotify track.

        Raises:
            NoMatchError: If the backend has no usable candidate.
            TransportError: If the backend could not be reached.
        """
        identifier = self.identifier_for(track)
        candidates = await self.search(identifier)
        candidate, rule = select_best(track, candidates, self._tolerance_ms)
        logger.debug(format_matched_message(track.primary_artist, track.title, candidate.title, rule))
        return candidate
