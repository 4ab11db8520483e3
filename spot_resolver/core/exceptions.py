"""
Exception classes for spot-resolver.

This module defines all custom exceptions used throughout the package.
Each exception maps to one failure mode of the resolution pipeline so
that the search entry point can turn it into the right response shape.

Exception Hierarchy:
    SpotResolverError (base)
        ConfigValidationError - Invalid construction options
        AuthError - Token endpoint rejected the client credentials
        CatalogValidationError - Spotify returned an unusable track object
        NoMatchError - Search backend produced no usable candidate
        TransportError - Network failure or non-2xx HTTP response

Propagation:
    ConfigValidationError and AuthError are allowed to propagate to the
    caller (construction time and token renewal). Every other error is
    caught by SpotifySearchProvider.search() and converted into a
    SearchResponse, so the host never sees a raw exception.
"""


class SpotResolverError(Exception):
    """
    Base exception for all spot-resolver errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., URLs, ids).
        load_type: Load type the search entry point reports for this error.

    Example:
        try:
            # some operation
        except SpotResolverError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    load_type: str = "LOAD_FAILED"

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description. This is the text that
                     ends up in SearchResponse.exception.message.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'url': URL that caused the error
                     - 'status': HTTP status code
                     - 'original_error': The underlying exception if wrapping
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigValidationError(SpotResolverError):
    """
    Raised when construction options are missing or have the wrong type.

    This is a CRITICAL error raised at construction time and never
    recovered from.

    Example:
        raise ConfigValidationError(
            'Spotify option "clientID" must be present and be a non-empty string.',
            details={'field': 'client_id'}
        )
    """
    pass


class AuthError(SpotResolverError):
    """
    Raised when the token endpoint does not return an access token.

    Fatal to the renewal cycle: the previously issued token is kept and
    no further renewal is scheduled unless retries are configured.
    """
    pass


class CatalogValidationError(SpotResolverError):
    """
    Raised when a Spotify track object is missing required fields or has
    fields of the wrong type.

    Aborts the whole fetch it occurs in; partial results are discarded.

    Example:
        raise CatalogValidationError(
            "The track artists array was not provided",
            details={'spotify_id': '4cOdK2wGLETKBW3PvgPWqT'}
        )
    """
    pass


class NoMatchError(SpotResolverError):
    """
    Raised when the search backend returns no usable candidate for a track.

    Reported as NO_MATCHES rather than LOAD_FAILED.
    """

    load_type: str = "NO_MATCHES"


class TransportError(SpotResolverError):
    """
    Raised when an HTTP request fails.

    Covers connection errors, timeouts and non-2xx responses. The message
    carries the provider's own error text when one was returned.

    Attributes:
        status: HTTP status code, or None for connection-level failures.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status: int | None = None
    ) -> None:
        super().__init__(message, details)
        self.status = status
