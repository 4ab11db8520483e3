"""
Spotify URL/URI parsing.

Recognizes both the web URL form and the URI form:

    https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT
    https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc
    spotify:album:6dVIqQ8qmQ5GBnJ9shOYGE

The captured kind and id are exact substrings of the query. A query that
does not match at all is not ours and must be handed back to the host.
"""

import re
from dataclasses import dataclass
from enum import Enum

from spot_resolver.core.logger import get_logger

logger = get_logger(__name__)


SPOTIFY_PATTERN = re.compile(r"(?:https://open\.spotify\.com/|spotify:)(.+)(?:[/:])([A-Za-z0-9]+)")


class ResourceKind(Enum):
    """Resource kinds the catalog fetcher can load."""

    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"


@dataclass(frozen=True)
class ResourceReference:
    """
    Parsed (kind, id) pair.

    Attributes:
        kind: Kind exactly as captured from the query. May name an
              unsupported kind (e.g. "artist" or "user:xyz:playlist").
        id: Resource id exactly as captured.
    """

    kind: str
    id: str

    @property
    def resource_kind(self) -> ResourceKind | None:
        """The supported kind, or None if the captured kind is unsupported."""
        try:
            return ResourceKind(self.kind)
        except ValueError:
            return None


class ResourceResolver:
    """Parses free-form queries against the Spotify URL/URI grammar."""

    def __init__(self, pattern: re.Pattern[str] = SPOTIFY_PATTERN) -> None:
        self._pattern = pattern

    def resolve(self, query: str) -> ResourceReference | None:
        """
        Extract the resource reference from a query.

        Args:
            query: Free-form search text.

        Returns:
            ResourceReference if the query contains a Spotify URL or URI,
            None otherwise.
        """
        match = self._pattern.search(query)
        if match is None:
            return None

        reference = ResourceReference(kind=match.group(1), id=match.group(2))
        logger.debug(f"Parsed Spotify reference: {reference.kind} {reference.id}")
        return reference
