"""
Search backend integration module for spot-resolver.

This module provides functionality for matching Spotify tracks to
results of the host's audio search node (YouTube search).

Components:
    - MatchCandidate: Data model for one backend result
    - TrackMatcher: Backend search plus the selection heuristic
    - select_best: The selection heuristic on its own
    - NodePool: Least-used node lookup over configured nodes

Usage:
    from spot_resolver.youtube import NodePool, TrackMatcher

    matcher = TrackMatcher(session, NodePool(config.nodes))
    candidate = await matcher.match(track)
"""

from spot_resolver.youtube.matcher import (
    DURATION_TOLERANCE_MS,
    TrackMatcher,
    select_best,
)
from spot_resolver.youtube.models import MatchCandidate
from spot_resolver.youtube.nodes import NodePool

__all__ = [
    # Models
    "MatchCandidate",
    # Matcher
    "TrackMatcher",
    "select_best",
    "DURATION_TOLERANCE_MS",
    # Nodes
    "NodePool",
]
