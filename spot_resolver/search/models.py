"""
Data models for the host-facing search surface.

These mirror the response envelope the host's own search function
returns, so a resolved Spotify link is indistinguishable from any other
search result:

    {
        "loadType": "PLAYLIST_LOADED",
        "tracks": [...],
        "playlist": {"name": "Album Name", "duration": 2482000},
        "exception": null
    }
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from spot_resolver.youtube.models import MatchCandidate


SEVERITY_COMMON = "COMMON"


class LoadType(Enum):
    """Coarse outcome classification of a search."""

    TRACK_LOADED = "TRACK_LOADED"
    PLAYLIST_LOADED = "PLAYLIST_LOADED"
    LOAD_FAILED = "LOAD_FAILED"
    NO_MATCHES = "NO_MATCHES"


@dataclass(frozen=True)
class SearchQuery:
    """
    Structured search query accepted in place of a plain string.

    Attributes:
        query: The search text or URL.
        source: Host search source name (only used on delegation).
    """
    query: str
    source: str = "youtube"


@dataclass(frozen=True)
class UnresolvedTrack:
    """
    Track descriptor with enough metadata to be resolved later.

    Attributes:
        title: Spotify track title.
        author: Spotify primary artist.
        duration_ms: Spotify duration in milliseconds, None if unknown.
        requester: Opaque host value identifying who asked for the track.
        resolved: Backend result once the track has been matched.
    """
    title: str
    author: str
    duration_ms: int | None = None
    requester: Any = field(default=None, compare=False)
    resolved: MatchCandidate | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "duration": self.duration_ms,
            "requester": self.requester,
            "resolved": self.resolved.to_dict() if self.resolved else None,
        }


@dataclass(frozen=True)
class PlaylistSummary:
    """Name and total duration (ms) of a loaded album or playlist."""
    name: str
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "duration": self.duration_ms}


@dataclass(frozen=True)
class SearchException:
    """Failure payload of a LOAD_FAILED or NO_MATCHES response."""
    message: str
    severity: str = SEVERITY_COMMON

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "severity": self.severity}


@dataclass(frozen=True)
class SearchResponse:
    """
    Unified response envelope.

    Attributes:
        load_type: Outcome classification.
        tracks: Loaded tracks; empty for failures.
        playlist: Summary for album/playlist loads only.
        exception: Failure payload for LOAD_FAILED / NO_MATCHES only.
    """
    load_type: LoadType
    tracks: tuple[UnresolvedTrack, ...] = ()
    playlist: PlaylistSummary | None = None
    exception: SearchException | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the host's key names."""
        return {
            "loadType": self.load_type.value,
            "tracks": [track.to_dict() for track in self.tracks],
            "playlist": self.playlist.to_dict() if self.playlist else None,
            "exception": self.exception.to_dict() if self.exception else None,
        }
