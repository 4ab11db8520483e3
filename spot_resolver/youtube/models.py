"""
Data models for search backend results.

The search backend is a Lavalink-style audio node. A `/loadtracks` call
returns a load type and a list of track objects of the form:

    {
        "track": "QAAAjQIAJVJpY2sgQXN0bGV5...",
        "info": {
            "identifier": "dQw4w9WgXcQ",
            "author": "Rick Astley",
            "title": "Never Gonna Give You Up",
            "length": 212000,
            "isStream": false,
            "uri": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        }
    }
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MatchCandidate:
    """
    Immutable representation of one search backend result.

    Attributes:
        external_id: Backend-encoded track string, playable as-is by the host.
        author: Channel/artist name.
                Example: "Rick Astley" or "Rick Astley - Topic"
        title: Video/song title as reported by the backend.
        length_ms: Duration in milliseconds (0 if unknown).
        identifier: Source-specific id (YouTube video id).
        uri: Source URL, if reported.
        is_stream: Whether the result is a live stream.
    """

    external_id: str
    author: str
    title: str
    length_ms: int
    identifier: str = ""
    uri: str | None = None
    is_stream: bool = False

    @classmethod
    def from_lavalink(cls, data: dict[str, Any]) -> "MatchCandidate":
        """
        Create a MatchCandidate from a backend track object.

        Missing info fields fall back to empty values; a candidate with an
        empty author or title simply never satisfies the name rules.
        """
        info = data.get("info") or {}
        length = info.get("length")

        return cls(
            external_id=str(data.get("track") or data.get("encoded") or ""),
            author=str(info.get("author") or ""),
            title=str(info.get("title") or ""),
            length_ms=length if isinstance(length, int) and not isinstance(length, bool) else 0,
            identifier=str(info.get("identifier") or ""),
            uri=info.get("uri"),
            is_stream=bool(info.get("isStream", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the backend's own shape."""
        return {
            "track": self.external_id,
            "info": {
                "identifier": self.identifier,
                "author": self.author,
                "title": self.title,
                "length": self.length_ms,
                "isStream": self.is_stream,
                "uri": self.uri,
            },
        }
