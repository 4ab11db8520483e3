"""
Spotify catalog metadata fetcher.

This module retrieves track, album and playlist metadata from the Spotify
Web API and converts every item into a validated CatalogTrack.

Pagination:
    Albums and playlists embed their first page of tracks. Further pages
    are followed through the 'next' cursor URL, strictly one after the
    other, until Spotify reports no further page or the configured page
    limit is reached. Page counting starts at 1 (the embedded page).

        Albums:    50 tracks per page, bounded by album_limit
        Playlists: 100 tracks per page, bounded by playlist_limit

Validation:
    An invalid item anywhere aborts the whole fetch with
    CatalogValidationError. Partial results are never returned.

Authentication:
    The Authorization header is read from the TokenManager for every
    request, so a renewal that happens mid-pagination is picked up by the
    following page requests.
"""

from typing import Any

import aiohttp

from spot_resolver.core.exceptions import CatalogValidationError
from spot_resolver.core.http import request_json
from spot_resolver.core.logger import get_logger
from spot_resolver.spotify.auth import TokenManager
from spot_resolver.spotify.models import CatalogTrack, FetchResult

logger = get_logger(__name__)


BASE_URL = "https://api.spotify.com/v1"


class CatalogFetcher:
    """
    Fetches Spotify catalog metadata.

    Attributes:
        _session: aiohttp session used for API requests.
        _tokens: TokenManager providing the current bearer token.
        _playlist_limit: Maximum pages per playlist, None for unlimited.
        _album_limit: Maximum pages per album, None for unlimited.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        tokens: TokenManager,
        playlist_limit: int | None = None,
        album_limit: int | None = None,
        base_url: str = BASE_URL
    ) -> None:
        self._session = session
        self._tokens = tokens
        self._playlist_limit = playlist_limit
        self._album_limit = album_limit
        self._base_url = base_url

    async def fetch_track(self, track_id: str) -> FetchResult:
        """
        Fetch a single track.

        Raises:
            CatalogValidationError: If the track object is invalid.
            TransportError: If the request fails.
        """
        data = await self._get(f"{self._base_url}/tracks/{track_id}")
        track = CatalogTrack.from_spotify_api(data)
        logger.debug(f"Fetched track: {track.primary_artist} - {track.title}")
        return FetchResult(tracks=(track,))

    async def fetch_album(self, album_id: str) -> FetchResult:
        """
        Fetch an album and its tracks, following pagination.

        Raises:
            CatalogValidationError: If any track object is invalid.
            TransportError: If any request fails.
        """
        album = await self._get(f"{self._base_url}/albums/{album_id}")
        return await self._collect(
            album,
            limit=self._album_limit,
            unwrap=lambda item: item,
            label="album",
        )

    async def fetch_playlist(self, playlist_id: str) -> FetchResult:
        """
        Fetch a playlist and its tracks, following pagination.

        Playlist items wrap the track object in a 'track' field.

        Raises:
            CatalogValidationError: If any track object is invalid
                                    (including removed/null tracks).
            TransportError: If any request fails.
        """
        playlist = await self._get(f"{self._base_url}/playlists/{playlist_id}")
        return await self._collect(
            playlist,
            limit=self._playlist_limit,
            unwrap=lambda item: item.get("track") if isinstance(item, dict) else None,
            label="playlist",
        )

    async def _collect(self, resource: Any, limit: int | None, unwrap, label: str) -> FetchResult:
        """
        Convert the embedded first page, then follow 'next' cursors.

        Args:
            resource: Album or playlist object from the API.
            limit: Maximum number of pages, None for unlimited.
            unwrap: Extracts the track object from a page item.
            label: "album" or "playlist", for messages.
        """
        if not isinstance(resource, dict):
            raise CatalogValidationError(f"The Spotify {label} object was not provided")

        page_data = resource.get("tracks")
        if not isinstance(page_data, dict):
            raise CatalogValidationError(
                f"The {label} tracks object was not provided",
                details={"spotify_id": resource.get("id")}
            )

        name = resource.get("name")
        tracks = self._convert_page(page_data, unwrap, label)
        next_url = page_data.get("next")
        page = 1

        while next_url and (limit is None or page < limit):
            page_data = await self._get(next_url)
            if not isinstance(page_data, dict):
                raise CatalogValidationError(
                    f"The {label} tracks page was not provided",
                    details={"url": next_url}
                )
            tracks.extend(self._convert_page(page_data, unwrap, label))
            next_url = page_data.get("next")
            page += 1

        if next_url:
            logger.info(f"Stopped {label} '{name}' at page limit {limit}, {len(tracks)} tracks loaded")
        else:
            logger.debug(f"Fetched {label} '{name}': {len(tracks)} tracks in {page} pages")

        return FetchResult(tracks=tuple(tracks), name=name, pages=page)

    def _convert_page(self, page_data: dict[str, Any], unwrap, label: str) -> list[CatalogTrack]:
        """Validate and convert every item of one page."""
        items = page_data.get("items")
        if not isinstance(items, list):
            raise CatalogValidationError(f"The {label} tracks items array was not provided")
        return [CatalogTrack.from_spotify_api(unwrap(item)) for item in items]

    async def _get(self, url: str) -> Any:
        """GET a catalog URL with the token current at call time."""
        _, payload = await request_json(
            self._session,
            "GET",
            url,
            headers={
                "Authorization": self._tokens.current_token,
                "Content-Type": "application/json",
            },
        )
        return payload
