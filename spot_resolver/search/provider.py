"""
Host-facing search entry point.

SpotifySearchProvider wraps the host's search function: queries that
contain a Spotify URL or URI are resolved here, everything else is handed
to the host's original search function unchanged.

Registration:
    The host object only needs a `search(query, requester)` attribute.
    register() swaps it for the provider's own search and keeps the
    original for delegation; unregister() puts it back.

        provider = create_provider(config, session, node_lookup=pool)
        async with provider:
            provider.register(player_manager)
            response = await player_manager.search(url, requester=user)

Error Handling:
    search() never raises. Every pipeline error becomes a SearchResponse:
        NoMatchError                 -> NO_MATCHES
        CatalogValidationError       -> LOAD_FAILED
        TransportError               -> LOAD_FAILED
        anything unexpected          -> LOAD_FAILED (logged with traceback)

Match Failure Policy:
    With convert_unresolved enabled, each track is matched on its own. A
    track that fails to match is dropped and logged to the match failures
    report (the default), or, with abort_on_match_failure, the first
    failure turns the whole response into that failure.
"""

import asyncio
import dataclasses
import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

import aiohttp

from spot_resolver.core.config import NodeConfig, ResolverConfig
from spot_resolver.core.exceptions import (
    ConfigValidationError,
    NoMatchError,
    SpotResolverError,
    TransportError,
)
from spot_resolver.core.logger import get_logger, log_match_failure
from spot_resolver.search.assembler import ResultAssembler
from spot_resolver.search.models import SearchQuery, UnresolvedTrack
from spot_resolver.spotify.auth import Credentials, TokenManager
from spot_resolver.spotify.fetcher import CatalogFetcher
from spot_resolver.spotify.models import CatalogTrack, FetchResult
from spot_resolver.spotify.resolver import ResourceKind, ResourceResolver
from spot_resolver.youtube.matcher import TrackMatcher

logger = get_logger(__name__)


Query = str | SearchQuery | Mapping[str, Any]
HostSearch = Callable[[Query, Any], Awaitable[Any] | Any]


class SearchProvider(Protocol):
    """Anything that can answer a host search."""

    async def search(self, query: Query, requester: Any = None) -> Any:
        """Return the response for a query."""


def _query_text(query: Query) -> str | None:
    """Extract the search text from a string, SearchQuery or {'query': ...} mapping."""
    if isinstance(query, str):
        return query
    if isinstance(query, SearchQuery):
        return query.query
    if isinstance(query, Mapping):
        text = query.get("query")
        return text if isinstance(text, str) else None
    return None


class SpotifySearchProvider:
    """
    Resolves Spotify links into search responses.

    Attributes:
        _config: Validated resolver options.
        _tokens: Token manager shared by every fetch.
        _resolver: URL/URI parser.
        _fetcher: Catalog fetcher.
        _matcher: Backend matcher, None when no node lookup was given.
        _assembler: Response builder.
        _fallback: The host's original search function.
        _host: The host object register() was called with.
    """

    def __init__(
        self,
        config: ResolverConfig,
        tokens: TokenManager,
        fetcher: CatalogFetcher,
        matcher: TrackMatcher | None = None,
        resolver: ResourceResolver | None = None,
        assembler: ResultAssembler | None = None,
        fallback: HostSearch | None = None
    ) -> None:
        if config.convert_unresolved and matcher is None:
            raise ConfigValidationError(
                'Spotify option "convertUnresolved" requires a search node lookup.',
                details={"field": "convert_unresolved"}
            )

        self._config = config
        self._tokens = tokens
        self._fetcher = fetcher
        self._matcher = matcher
        self._resolver = resolver or ResourceResolver()
        self._assembler = assembler or ResultAssembler()
        self._fallback = fallback
        self._host: Any = None

    @property
    def tokens(self) -> TokenManager:
        return self._tokens

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Obtain the first token and start the renewal loop."""
        await self._tokens.start()

    async def stop(self) -> None:
        """Stop the renewal loop and undo any registration."""
        self.unregister()
        await self._tokens.stop()

    async def __aenter__(self) -> "SpotifySearchProvider":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    def register(self, host: Any) -> None:
        """
        Splice this provider into the host's search entry point.

        Raises:
            ValueError: If the host has no callable search attribute, or the
                        provider is already registered with another host.
        """
        original = getattr(host, "search", None)
        if not callable(original):
            raise ValueError("Host must expose a callable 'search' attribute")

        if self._host is not None:
            if self._host is host:
                return
            raise ValueError("Provider is already registered with another host")

        self._fallback = original
        self._host = host
        host.search = self.search
        logger.debug(f"Registered Spotify search provider on {type(host).__name__}")

    def unregister(self) -> None:
        """Restore the host's original search function."""
        if self._host is None:
            return
        self._host.search = self._fallback
        self._host = None

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: Query, requester: Any = None) -> Any:
        """
        Answer a host search.

        Args:
            query: Search text, SearchQuery, or mapping with a 'query' key.
            requester: Opaque value copied onto every returned track.

        Returns:
            A SearchResponse for Spotify links; for anything else, whatever
            the host's original search function returns.
        """
        text = _query_text(query)
        reference = self._resolver.resolve(text) if text is not None else None

        if reference is None:
            return await self._delegate(query, requester)

        kind = reference.resource_kind
        if kind is None:
            logger.warning(f"Unsupported Spotify resource kind: {reference.kind}")
            return self._assembler.unsupported_kind()

        try:
            result = await self._fetch(kind, reference.id)
            tracks = self._assembler.to_unresolved(result.tracks, requester)
            if self._config.convert_unresolved:
                tracks = await self._convert(tracks)
            response = self._assembler.assemble(kind, result, tracks)
        except NoMatchError as e:
            logger.info(f"No matches for {reference.kind} {reference.id}: {e.message}")
            return self._assembler.from_error(e)
        except SpotResolverError as e:
            logger.warning(f"Failed to load {reference.kind} {reference.id}: {e.message}")
            return self._assembler.from_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error while loading {reference.kind} {reference.id}")
            return self._assembler.failed(str(e) or type(e).__name__)

        logger.info(
            f"Loaded Spotify {kind.value} {reference.id}: "
            f"{len(response.tracks)} tracks ({response.load_type.value})"
        )
        return response

    async def resolve(self, track: UnresolvedTrack) -> UnresolvedTrack:
        """
        Match a single unresolved track on the search backend.

        Returns:
            A copy of the track with 'resolved' set.

        Raises:
            NoMatchError: If the backend has no usable candidate.
            TransportError: If no node is available or the request fails.
        """
        if self._matcher is None:
            raise TransportError("No search node lookup configured.")

        catalog_track = CatalogTrack(
            title=track.title,
            primary_artist=track.author,
            duration_ms=track.duration_ms,
        )
        candidate = await self._matcher.match(catalog_track)
        return dataclasses.replace(track, resolved=candidate)

    async def _fetch(self, kind: ResourceKind, resource_id: str) -> FetchResult:
        if kind is ResourceKind.TRACK:
            return await self._fetcher.fetch_track(resource_id)
        if kind is ResourceKind.ALBUM:
            return await self._fetcher.fetch_album(resource_id)
        if kind is ResourceKind.PLAYLIST:
            return await self._fetcher.fetch_playlist(resource_id)
        raise ValueError(f"Unhandled resource kind: {kind}")

    async def _convert(self, tracks: list[UnresolvedTrack]) -> list[UnresolvedTrack]:
        """Resolve every track with bounded concurrency, keeping catalog order."""
        semaphore = asyncio.Semaphore(self._config.match_concurrency)

        async def convert_one(track: UnresolvedTrack) -> UnresolvedTrack | None:
            async with semaphore:
                try:
                    return await self.resolve(track)
                except (NoMatchError, TransportError) as e:
                    if self._config.abort_on_match_failure:
                        raise
                    log_match_failure(
                        logger,
                        track_name=track.title,
                        artist=track.author,
                        query=e.details.get("identifier", f"{track.author} - {track.title}"),
                        reason=e.message,
                    )
                    return None

        tasks = [asyncio.ensure_future(convert_one(track)) for track in tracks]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [track for track in results if track is not None]

    async def _delegate(self, query: Query, requester: Any) -> Any:
        """Hand the query to the host's original search, unchanged."""
        if self._fallback is None:
            return self._assembler.no_matches("No host search function registered.")

        result = self._fallback(query, requester)
        if inspect.isawaitable(result):
            result = await result
        return result


def create_provider(
    config: ResolverConfig,
    session: aiohttp.ClientSession,
    node_lookup: Callable[[], NodeConfig | None] | None = None,
    fallback: HostSearch | None = None
) -> SpotifySearchProvider:
    """
    Create a configured search provider.

    This is the recommended way to build a provider: it wires credentials,
    token manager, fetcher and (when a node lookup is given) matcher from
    one validated config.

    Args:
        config: Validated resolver options.
        session: aiohttp session used for every request. Its timeout
                 settings apply to all calls.
        node_lookup: Callable returning the least-loaded search node.
                     Required when config.convert_unresolved is set.
        fallback: Host search used for non-Spotify queries when the
                  provider is not registered on a host.

    Raises:
        ConfigValidationError: If convert_unresolved is set without a
                               node lookup.
    """
    credentials = Credentials(config.client_id, config.client_secret)
    tokens = TokenManager(
        credentials,
        session,
        retries=config.renewal_retries,
        retry_delay=config.renewal_retry_delay,
    )
    fetcher = CatalogFetcher(
        session,
        tokens,
        playlist_limit=config.playlist_limit,
        album_limit=config.album_limit,
    )
    matcher = TrackMatcher(session, node_lookup) if node_lookup is not None else None

    return SpotifySearchProvider(
        config,
        tokens=tokens,
        fetcher=fetcher,
        matcher=matcher,
        fallback=fallback,
    )
