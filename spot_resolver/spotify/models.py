"""
Data models for Spotify catalog entities.

This module defines immutable dataclasses for the metadata fetched from
the Spotify Web API, and the validation applied when converting raw API
objects into them.

Design Decisions:
    - All dataclasses are frozen (immutable)
    - Missing title or artists is a hard validation failure, never a
      silent default
    - duration_ms stays None when Spotify omits it; consumers decide how
      to treat it

Usage:
    from spot_resolver.spotify.models import CatalogTrack

    track = CatalogTrack.from_spotify_api(response_json)
    print(f"{track.primary_artist} - {track.title}")
"""

from dataclasses import dataclass, field
from typing import Any

from spot_resolver.core.exceptions import CatalogValidationError


@dataclass(frozen=True)
class CatalogTrack:
    """
    Immutable representation of a Spotify track.

    Attributes:
        title: Track title as it appears on Spotify.
               Example: "Bohemian Rhapsody"

        primary_artist: First artist in the track's artist list.
                        Example: "Queen"

        duration_ms: Track duration in milliseconds, or None if Spotify
                     did not report one.
                     Example: 354320

        artists: All artist names, primary first.
                 Example: ("Calvin Harris", "Dua Lipa")

        spotify_id: Spotify track ID (22-character base62 string), if present.

        uri: Spotify URI, if present.
             Example: "spotify:track:4cOdK2wGLETKBW3PvgPWqT"
    """

    title: str
    primary_artist: str
    duration_ms: int | None = None
    artists: tuple[str, ...] = field(default_factory=tuple)
    spotify_id: str | None = None
    uri: str | None = None

    @property
    def search_query(self) -> str:
        """Search phrase used against the search backend: "Artist - Title"."""
        return " - ".join(part for part in (self.primary_artist, self.title) if part)

    @classmethod
    def from_spotify_api(cls, track_data: Any) -> "CatalogTrack":
        """
        Create a CatalogTrack from a Spotify API track object.

        Args:
            track_data: A track object from GET /tracks/{id}, an item of an
                        album's tracks.items, or the 'track' field of a
                        playlist item.

        Returns:
            CatalogTrack populated from the API object.

        Raises:
            CatalogValidationError: If the object is missing, has no name
                                    or artists, or these have wrong types.

        Validation Order:
            1. Object present and a dictionary
            2. 'artists' present
            3. 'name' present
            4. 'artists' is a list
            5. 'name' is a string
            6. at least one artist, and the first artist has a name
        """
        if not track_data or not isinstance(track_data, dict):
            raise CatalogValidationError("The Spotify track object was not provided")

        spotify_id = track_data.get("id")
        details = {"spotify_id": spotify_id}

        artists = track_data.get("artists")
        name = track_data.get("name")

        if artists is None:
            raise CatalogValidationError("The track artists array was not provided", details=details)

        if not name:
            raise CatalogValidationError("The track name was not provided", details=details)

        if not isinstance(artists, list):
            raise CatalogValidationError(
                f"The track artists must be an array, received type {type(artists).__name__}",
                details=details
            )

        if not isinstance(name, str):
            raise CatalogValidationError(
                f"The track name must be a string, received type {type(name).__name__}",
                details=details
            )

        first = artists[0] if artists else None
        if not isinstance(first, dict) or not isinstance(first.get("name"), str) or not first["name"]:
            raise CatalogValidationError(
                "The track artists array must contain at least one named artist",
                details=details
            )

        artist_names = tuple(
            artist["name"]
            for artist in artists
            if isinstance(artist, dict) and isinstance(artist.get("name"), str) and artist["name"]
        )

        duration_ms = track_data.get("duration_ms")
        if duration_ms is not None and (not isinstance(duration_ms, int) or isinstance(duration_ms, bool)):
            raise CatalogValidationError(
                f"The track duration must be a number, received type {type(duration_ms).__name__}",
                details=details
            )

        return cls(
            title=name,
            primary_artist=artist_names[0],
            duration_ms=duration_ms,
            artists=artist_names,
            spotify_id=spotify_id,
            uri=track_data.get("uri"),
        )


@dataclass(frozen=True)
class FetchResult:
    """
    Result of one catalog fetch.

    Attributes:
        tracks: Validated tracks in catalog order.
        name: Album or playlist name. None for single tracks.
        pages: Number of pages that were requested.
    """

    tracks: tuple[CatalogTrack, ...]
    name: str | None = None
    pages: int = 1
