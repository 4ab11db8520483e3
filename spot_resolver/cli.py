"""
Command-line interface for spot-resolver.

This module implements a small debugging CLI using Click: it resolves a
single query exactly as a host would and prints the search response as
JSON. rich-click is used for the output colors.

Commands:
    spot-resolve <query>                  Resolve one query
    spot-resolve <query> --resolve        Also match every track on a node

Options:
    --config <path>                       Path to config.yaml
    --log-dir <dir>                       Write log files to this directory
    --debug                               Show DEBUG output on the console

Usage:
    # Fetch playlist metadata only
    spot-resolve "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"

    # Fetch an album and match each track on the configured nodes
    spot-resolve "spotify:album:1DFixLWuPkv3KT3TnV35m3" --resolve

Configuration:
    The CLI reads config.yaml from the current directory (or --config):
    - Spotify API credentials (client_id, client_secret), or the
      SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET environment variables
    - Optional resolver options (page limits, concurrency, timeouts)
    - Search nodes (required for --resolve)

Exit Codes:
    0   Response loaded (TRACK_LOADED, PLAYLIST_LOADED) or NO_MATCHES
    1   Configuration error or unexpected error
    2   LOAD_FAILED response
    3   Spotify rejected the client credentials
    130 Interrupted
"""

import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import aiohttp
import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

from spot_resolver import __version__
from spot_resolver.core import (
    AuthError,
    Config,
    ConfigValidationError,
    SpotResolverError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from spot_resolver.search import LoadType, ResultAssembler, SearchResponse, create_provider
from spot_resolver.youtube import NodePool

logger = get_logger(__name__)


class _StubHost:
    """
    Stand-in for a player's search entry point.

    Only reached for queries that are not Spotify links.
    """

    def __init__(self) -> None:
        self._assembler = ResultAssembler()

    async def search(self, query: Any, requester: Any = None) -> SearchResponse:
        logger.info(f"Not a Spotify link, nothing to resolve: {query}")
        return self._assembler.no_matches("Query is not a Spotify URL or URI.")


@click.command()
@click.argument("query", metavar="<query>")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Path to config.yaml (default: ./config.yaml)"
)
@click.option(
    "--resolve",
    is_flag=True,
    help="Match every track on the configured search nodes"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Directory for log files and the match failures report"
)
@click.option(
    "--debug",
    is_flag=True,
    help="Show DEBUG output on the console"
)
@click.version_option(__version__, prog_name="spot-resolve")
def cli(
    query: str,
    config_path: Optional[Path],
    resolve: bool,
    log_dir: Optional[Path],
    debug: bool
) -> None:
    """
    spot-resolve: Resolve a Spotify link into a search response.

    Prints the response the host search entry point would return, as JSON.

    \b
    EXAMPLES:
        spot-resolve "https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT"
        spot-resolve "spotify:playlist:37i9dQZF1DXcBWIGoYBM5M" --resolve
    """
    setup_logging(log_dir, level=logging.DEBUG if debug else logging.INFO)

    try:
        config = load_config(config_path)
        response = asyncio.run(_run(config, query, resolve))

        click.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False, default=str))

        if response.load_type is LoadType.LOAD_FAILED:
            sys.exit(2)

    except ConfigValidationError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except AuthError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        click.echo("Check your client_id and client_secret in config.yaml", err=True)
        sys.exit(3)

    except SpotResolverError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


async def _run(config: Config, query: str, resolve: bool) -> SearchResponse:
    """
    Start a provider over a fresh session, run one search and stop it.

    Args:
        config: Loaded configuration.
        query: The query to resolve.
        resolve: Enable eager matching for this run.
    """
    options = config.resolver
    if resolve:
        options = dataclasses.replace(options, convert_unresolved=True)
        if not config.nodes:
            logger.warning("--resolve given but no search nodes are configured")

    timeout = aiohttp.ClientTimeout(total=options.request_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        provider = create_provider(
            options,
            session,
            node_lookup=NodePool(config.nodes),
        )
        host = _StubHost()

        async with provider:
            provider.register(host)
            return await host.search(query, requester="cli")


if __name__ == "__main__":
    cli()
