"""
spot-resolver: Resolve Spotify links into audio search results.

This package plugs into an audio player's search entry point. A query
containing a Spotify track, album or playlist URL (or spotify: URI) is
looked up in the Spotify Web API catalog and returned in the host's own
search response shape; every other query is passed through to the host's
original search function untouched.

Architecture:
    The resolution of one query runs in up to four steps:

    STEP 1 (spotify/resolver.py): Parse the query
        - Extract (kind, id) from a Spotify URL or URI
        - Non-Spotify queries are delegated to the host

    STEP 2 (spotify/): Fetch catalog metadata
        - Client-credentials token, renewed in the background
        - Single track, or album/playlist pages up to a page limit
        - Validate every track object

    STEP 3 (youtube/): Match tracks on the search backend (optional)
        - Search "Artist - Title" on the least-loaded node
        - Pick by channel, title, duration window, or first result
        - Eager (convert_unresolved) or lazy (provider.resolve)

    STEP 4 (search/): Assemble the response
        - TRACK_LOADED / PLAYLIST_LOADED / LOAD_FAILED / NO_MATCHES
        - Playlist summary with name and total duration

Modules:
    core/       - Configuration, logging, exceptions, HTTP helper
    spotify/    - Token manager, URL parsing, catalog fetching
    youtube/    - Search backend matching and node selection
    search/     - Response models, assembler, host-facing provider
    cli.py      - Command-line interface for one-off lookups

Usage:
    Command Line:
        spot-resolve "https://open.spotify.com/playlist/..."
        spot-resolve "spotify:track:4cOdK2wGLETKBW3PvgPWqT" --resolve

    Python API:
        import aiohttp
        from spot_resolver import NodePool, create_provider, load_config

        config = load_config()
        async with aiohttp.ClientSession() as session:
            provider = create_provider(
                config.resolver, session, node_lookup=NodePool(config.nodes)
            )
            async with provider:
                provider.register(player_manager)
                response = await player_manager.search(url, requester=user)

Configuration:
    Reads config.yaml from the current directory:

        spotify:
          client_id: "your_client_id"
          client_secret: "your_client_secret"

        resolver:
          playlist_limit: 5
          convert_unresolved: false

        nodes:
          - host: "localhost"
            port: 2333
            password: "youshallnotpass"

Dependencies:
    - aiohttp: HTTP client for Spotify and the search nodes
    - pyyaml: Configuration file parsing
    - python-dotenv: Credentials from .env
    - tqdm: Progress-bar-safe console logging
    - click / rich-click: CLI
"""

__version__ = "0.1.0"
__author__ = "spot-resolver"
__license__ = "MIT"

# Convenience imports for common usage
from spot_resolver.core import (
    AuthError,
    CatalogValidationError,
    Config,
    ConfigValidationError,
    NodeConfig,
    NoMatchError,
    ResolverConfig,
    SpotResolverError,
    TransportError,
    get_logger,
    load_config,
    setup_logging,
)
from spot_resolver.search import (
    LoadType,
    SearchQuery,
    SearchResponse,
    SpotifySearchProvider,
    UnresolvedTrack,
    create_provider,
)
from spot_resolver.youtube import NodePool

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "NodeConfig",
    "ResolverConfig",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SpotResolverError",
    "ConfigValidationError",
    "AuthError",
    "CatalogValidationError",
    "NoMatchError",
    "TransportError",
    # Search
    "LoadType",
    "SearchQuery",
    "SearchResponse",
    "UnresolvedTrack",
    "SpotifySearchProvider",
    "create_provider",
    "NodePool",
]
