"""
Host-facing search module for spot-resolver.

This module turns Spotify links into the host's search response shape
and splices itself into the host's search entry point.

Components:
    - SpotifySearchProvider: Query dispatch, delegation, lazy resolve
    - create_provider: Factory wiring a provider from a ResolverConfig
    - ResultAssembler: SearchResponse construction
    - SearchQuery, SearchResponse, UnresolvedTrack: Data models

Usage:
    from spot_resolver.search import create_provider

    provider = create_provider(config.resolver, session, node_lookup=pool)
    async with provider:
        provider.register(host)
"""

from spot_resolver.search.assembler import UNSUPPORTED_KIND_MESSAGE, ResultAssembler
from spot_resolver.search.models import (
    LoadType,
    PlaylistSummary,
    SearchException,
    SearchQuery,
    SearchResponse,
    UnresolvedTrack,
)
from spot_resolver.search.provider import (
    SearchProvider,
    SpotifySearchProvider,
    create_provider,
)

__all__ = [
    # Models
    "LoadType",
    "PlaylistSummary",
    "SearchException",
    "SearchQuery",
    "SearchResponse",
    "UnresolvedTrack",
    # Assembly
    "ResultAssembler",
    "UNSUPPORTED_KIND_MESSAGE",
    # Provider
    "SearchProvider",
    "SpotifySearchProvider",
    "create_provider",
]
