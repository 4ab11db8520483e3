"""
Spotify integration module for spot-resolver.

This module provides all functionality for reading the Spotify catalog:
    - Credentials, TokenManager: Client credentials and token renewal
    - ResourceResolver: URL/URI parsing into (kind, id)
    - CatalogFetcher: Paginated track/album/playlist retrieval
    - CatalogTrack, FetchResult: Data models

Usage:
    from spot_resolver.spotify import (
        Credentials, TokenManager, ResourceResolver, CatalogFetcher
    )

    tokens = TokenManager(Credentials(client_id, client_secret), session)
    await tokens.start()

    reference = ResourceResolver().resolve(query)
    result = await CatalogFetcher(session, tokens).fetch_playlist(reference.id)
"""

from spot_resolver.spotify.auth import Credentials, TokenManager, TokenState
from spot_resolver.spotify.fetcher import CatalogFetcher
from spot_resolver.spotify.models import CatalogTrack, FetchResult
from spot_resolver.spotify.resolver import ResourceKind, ResourceReference, ResourceResolver

__all__ = [
    # Auth
    "Credentials",
    "TokenManager",
    "TokenState",
    # Parsing
    "ResourceKind",
    "ResourceReference",
    "ResourceResolver",
    # Fetching
    "CatalogFetcher",
    "CatalogTrack",
    "FetchResult",
]
