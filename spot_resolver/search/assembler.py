"""
Conversion of fetched catalog metadata into search responses.
"""

from collections.abc import Sequence
from typing import Any

from spot_resolver.core.exceptions import SpotResolverError
from spot_resolver.search.models import (
    LoadType,
    PlaylistSummary,
    SearchException,
    SearchResponse,
    UnresolvedTrack,
)
from spot_resolver.spotify.models import CatalogTrack, FetchResult
from spot_resolver.spotify.resolver import ResourceKind


UNSUPPORTED_KIND_MESSAGE = 'Incorrect type for Spotify URL, must be one of "track", "album" or "playlist".'


class ResultAssembler:
    """Builds UnresolvedTracks and SearchResponse envelopes."""

    def to_unresolved(self, tracks: Sequence[CatalogTrack], requester: Any) -> list[UnresolvedTrack]:
        """Build one UnresolvedTrack per catalog track, in order."""
        return [
            UnresolvedTrack(
                title=track.title,
                author=track.primary_artist,
                duration_ms=track.duration_ms,
                requester=requester,
            )
            for track in tracks
        ]

    def assemble(
        self,
        kind: ResourceKind,
        result: FetchResult,
        tracks: Sequence[UnresolvedTrack]
    ) -> SearchResponse:
        """
        Wrap the tracks of a successful fetch into a response.

        Args:
            kind: Kind of the loaded resource.
            result: The fetch the tracks came from.
            tracks: Tracks to return. May be shorter than result.tracks when
                    tracks that failed to match were dropped.

        Returns:
            TRACK_LOADED for tracks, PLAYLIST_LOADED (with a summary when the
            resource has a name) for albums and playlists, or NO_MATCHES when
            matching dropped every track.
        """
        if result.tracks and not tracks:
            return self.no_matches("None of the Spotify tracks could be matched.")

        if kind is ResourceKind.TRACK:
            return SearchResponse(load_type=LoadType.TRACK_LOADED, tracks=tuple(tracks))

        playlist = None
        if result.name:
            playlist = PlaylistSummary(
                name=result.name,
                duration_ms=sum(track.duration_ms or 0 for track in tracks),
            )

        return SearchResponse(
            load_type=LoadType.PLAYLIST_LOADED,
            tracks=tuple(tracks),
            playlist=playlist,
        )

    def failed(self, message: str) -> SearchResponse:
        return SearchResponse(load_type=LoadType.LOAD_FAILED, exception=SearchException(message))

    def no_matches(self, message: str) -> SearchResponse:
        return SearchResponse(load_type=LoadType.NO_MATCHES, exception=SearchException(message))

    def unsupported_kind(self) -> SearchResponse:
        return self.failed(UNSUPPORTED_KIND_MESSAGE)

    def from_error(self, error: SpotResolverError) -> SearchResponse:
        """Response for a pipeline error, using the load type the error carries."""
        if error.load_type == LoadType.NO_MATCHES.value:
            return self.no_matches(error.message)
        return self.failed(error.message)
