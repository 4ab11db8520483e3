"""
Core module for spot-resolver.

This module provides the foundational components used throughout the package:
    - exceptions: Custom exception classes for error handling
    - config: Option validation and config.yaml loading
    - logger: Logging system with console and file outputs
    - http: JSON request helper wrapping transport failures

Usage:
    from spot_resolver.core import (
        ResolverConfig, load_config,
        setup_logging, get_logger,
        SpotResolverError, ConfigValidationError
    )
"""

from spot_resolver.core.config import (
    Config,
    NodeConfig,
    ResolverConfig,
    load_config,
)
from spot_resolver.core.exceptions import (
    AuthError,
    CatalogValidationError,
    ConfigValidationError,
    NoMatchError,
    SpotResolverError,
    TransportError,
)
from spot_resolver.core.logger import (
    get_logger,
    log_match_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "NodeConfig",
    "ResolverConfig",
    "load_config",
    # Exceptions
    "SpotResolverError",
    "ConfigValidationError",
    "AuthError",
    "CatalogValidationError",
    "NoMatchError",
    "TransportError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_match_failure",
    "shutdown_logging",
]
