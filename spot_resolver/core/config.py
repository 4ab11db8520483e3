"""
Configuration management for spot-resolver.

This module validates the resolver options and loads them, together with
the search backend node list, from config.yaml.

Options are validated once, at construction. Any violation raises
ConfigValidationError naming the offending option, so a misconfigured
resolver never starts.

Configuration File Location:
    By default config.yaml is read from the current working directory.
    Spotify credentials may be left out of the file and supplied through
    SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET (a .env file is honoured).

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"

    resolver:
      playlist_limit: 5        # pages of 100 tracks
      album_limit: 2           # pages of 50 tracks
      convert_unresolved: false
      abort_on_match_failure: false
      match_concurrency: 4

    nodes:
      - host: "localhost"
        port: 2333
        password: "youshallnotpass"
        secure: false
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from spot_resolver.core.exceptions import ConfigValidationError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variables used when credentials are absent from config.yaml
ENV_CLIENT_ID = "SPOTIFY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIFY_CLIENT_SECRET"

# Host-style option names accepted by ResolverConfig.from_options()
_OPTION_ALIASES = {
    "clientID": "client_id",
    "clientId": "client_id",
    "clientSecret": "client_secret",
    "playlistLimit": "playlist_limit",
    "albumLimit": "album_limit",
    "convertUnresolved": "convert_unresolved",
    "abortOnMatchFailure": "abort_on_match_failure",
    "matchConcurrency": "match_concurrency",
    "renewalRetries": "renewal_retries",
    "renewalRetryDelay": "renewal_retry_delay",
    "requestTimeout": "request_timeout",
}


@dataclass(frozen=True)
class ResolverConfig:
    """
    Validated resolver options.

    Attributes:
        client_id: Spotify application client ID. Required, non-empty.
        client_secret: Spotify application client secret. Required, non-empty.
        playlist_limit: Maximum number of pages fetched for a playlist
                        (100 tracks per page). None fetches every page.
        album_limit: Maximum number of pages fetched for an album
                     (50 tracks per page). None fetches every page.
        convert_unresolved: Resolve every track against the search backend
                            at search time. Spams the backend for large
                            playlists, so it defaults to False.
        abort_on_match_failure: When converting, a track that fails to match
                                aborts the whole batch instead of being
                                dropped.
        match_concurrency: Maximum number of concurrent backend searches
                           while converting a batch.
        renewal_retries: Extra attempts after a failed token renewal before
                         the renewal loop gives up. 0 disables retrying.
        renewal_retry_delay: Seconds to wait between renewal attempts.
        request_timeout: Total timeout in seconds for each HTTP request.
    """
    client_id: str
    client_secret: str
    playlist_limit: int | None = None
    album_limit: int | None = None
    convert_unresolved: bool = False
    abort_on_match_failure: bool = False
    match_concurrency: int = 4
    renewal_retries: int = 0
    renewal_retry_delay: float = 5.0
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        _validate_resolver_config(self)

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> "ResolverConfig":
        """
        Build a ResolverConfig from a plain options mapping.

        Both snake_case names and the host-style camelCase names
        (clientID, playlistLimit, ...) are accepted.

        Raises:
            ConfigValidationError: If options is empty, contains an unknown
                                   option, or any value is invalid.
        """
        if not options:
            raise ConfigValidationError("SpotifyOptions must not be empty.")

        if not isinstance(options, Mapping):
            raise ConfigValidationError(
                "SpotifyOptions must be a mapping",
                details={"type": type(options).__name__}
            )

        known = set(cls.__dataclass_fields__)
        normalized: dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ConfigValidationError(
                    f'Unknown Spotify option "{key}".',
                    details={"field": key}
                )
            normalized[name] = value

        for required in ("client_id", "client_secret"):
            normalized.setdefault(required, None)

        return cls(**normalized)


@dataclass(frozen=True)
class NodeConfig:
    """
    Connection details for one search backend node.

    Attributes:
        host: Hostname or IP address of the node.
        port: TCP port of the node's REST interface.
        password: Value sent verbatim in the Authorization header.
        secure: Use https instead of http.
        identifier: Name used in logs. Defaults to "host:port".
    """
    host: str
    port: int
    password: str
    secure: bool = False
    identifier: str = ""

    @property
    def base_url(self) -> str:
        """Base URL of the node's REST interface."""
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}"

    @property
    def name(self) -> str:
        """Identifier for logging."""
        return self.identifier or f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Config:
    """
    Complete configuration loaded from config.yaml.

    Attributes:
        resolver: Validated resolver options (including credentials).
        nodes: Search backend nodes. May be empty when no eager or lazy
               matching is needed.
    """
    resolver: ResolverConfig
    nodes: tuple[NodeConfig, ...] = ()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_resolver_config(config: ResolverConfig) -> None:
    """
    Validate every field of a ResolverConfig.

    Raises:
        ConfigValidationError: On the first invalid field.
    """
    if not isinstance(config.client_id, str) or not config.client_id:
        raise ConfigValidationError(
            'Spotify option "clientID" must be present and be a non-empty string.',
            details={"field": "client_id"}
        )

    if not isinstance(config.client_secret, str) or not config.client_secret:
        raise ConfigValidationError(
            'Spotify option "clientSecret" must be a non-empty string.',
            details={"field": "client_secret"}
        )

    if not isinstance(config.convert_unresolved, bool):
        raise ConfigValidationError(
            'Spotify option "convertUnresolved" must be a boolean.',
            details={"field": "convert_unresolved"}
        )

    if not isinstance(config.abort_on_match_failure, bool):
        raise ConfigValidationError(
            'Spotify option "abortOnMatchFailure" must be a boolean.',
            details={"field": "abort_on_match_failure"}
        )

    for field_name, option in (("playlist_limit", "playlistLimit"), ("album_limit", "albumLimit")):
        value = getattr(config, field_name)
        if value is None:
            continue
        if not _is_int(value):
            raise ConfigValidationError(
                f'Spotify option "{option}" must be a number.',
                details={"field": field_name, "value": value}
            )
        if value < 1:
            raise ConfigValidationError(
                f'Spotify option "{option}" must be at least 1.',
                details={"field": field_name, "value": value}
            )

    if not _is_int(config.match_concurrency) or config.match_concurrency < 1:
        raise ConfigValidationError(
            'Spotify option "matchConcurrency" must be a positive integer.',
            details={"field": "match_concurrency", "value": config.match_concurrency}
        )

    if not _is_int(config.renewal_retries) or config.renewal_retries < 0:
        raise ConfigValidationError(
            'Spotify option "renewalRetries" must be a non-negative integer.',
            details={"field": "renewal_retries", "value": config.renewal_retries}
        )

    if not _is_number(config.renewal_retry_delay) or config.renewal_retry_delay < 0:
        raise ConfigValidationError(
            'Spotify option "renewalRetryDelay" must be a non-negative number.',
            details={"field": "renewal_retry_delay", "value": config.renewal_retry_delay}
        )

    if not _is_number(config.request_timeout) or config.request_timeout <= 0:
        raise ConfigValidationError(
            'Spotify option "requestTimeout" must be a positive number.',
            details={"field": "request_timeout", "value": config.request_timeout}
        )


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass with resolver options and nodes.

    Raises:
        ConfigValidationError: If the file is missing, is not valid YAML,
                               or contains invalid values.

    Behavior:
        1. Load .env into the environment (existing variables win)
        2. Read and parse the YAML file
        3. Merge spotify credentials (file first, then environment)
        4. Validate resolver options via ResolverConfig.from_options()
        5. Parse the nodes list
    """
    load_dotenv()

    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigValidationError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigValidationError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        raw_config = {}

    if not isinstance(raw_config, dict):
        raise ConfigValidationError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    spotify_section = _section(raw_config, "spotify")
    resolver_section = _section(raw_config, "resolver")

    options = dict(resolver_section)
    options["client_id"] = spotify_section.get("client_id") or os.getenv(ENV_CLIENT_ID, "")
    options["client_secret"] = spotify_section.get("client_secret") or os.getenv(ENV_CLIENT_SECRET, "")

    resolver = ResolverConfig.from_options(options)
    nodes = _parse_nodes(raw_config.get("nodes"))

    return Config(resolver=resolver, nodes=nodes)


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return an optional dictionary section, validating its type."""
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigValidationError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_nodes(raw_nodes: Any) -> tuple[NodeConfig, ...]:
    """
    Parse and validate the nodes section.

    Raises:
        ConfigValidationError: If the section is not a list of node
                               dictionaries with host, port and password.
    """
    if raw_nodes is None:
        return ()

    if not isinstance(raw_nodes, list):
        raise ConfigValidationError(
            "Section 'nodes' must be a list",
            details={"section": "nodes"}
        )

    nodes = []
    for index, raw in enumerate(raw_nodes):
        field = f"nodes[{index}]"
        if not isinstance(raw, dict):
            raise ConfigValidationError(
                f"'{field}' must be a dictionary",
                details={"field": field}
            )

        host = raw.get("host", "")
        port = raw.get("port")
        password = raw.get("password", "")
        secure = raw.get("secure", False)

        if not isinstance(host, str) or not host.strip():
            raise ConfigValidationError(
                f"'{field}.host' must be a non-empty string",
                details={"field": f"{field}.host"}
            )
        if not _is_int(port) or not 0 < port < 65536:
            raise ConfigValidationError(
                f"'{field}.port' must be a valid port number",
                details={"field": f"{field}.port", "value": port}
            )
        if not isinstance(password, str):
            raise ConfigValidationError(
                f"'{field}.password' must be a string",
                details={"field": f"{field}.password"}
            )
        if not isinstance(secure, bool):
            raise ConfigValidationError(
                f"'{field}.secure' must be a boolean",
                details={"field": f"{field}.secure"}
            )

        nodes.append(NodeConfig(
            host=host.strip(),
            port=port,
            password=password,
            secure=secure,
            identifier=str(raw.get("identifier", "")),
        ))

    return tuple(nodes)
