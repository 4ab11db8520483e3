"""
Least-used node selection over the configured search backends.

Hosts that manage their own nodes pass their own lookup callable to the
matcher. NodePool is the lookup used when the resolver runs on its own
(the CLI): every pick counts as one call, and the node with the fewest
calls so far is picked next, ties going to the earlier configured node.
"""

from collections.abc import Iterable

from spot_resolver.core.config import NodeConfig
from spot_resolver.core.logger import get_logger

logger = get_logger(__name__)


class NodePool:
    """Round-robins search requests across nodes by call count."""

    def __init__(self, nodes: Iterable[NodeConfig]) -> None:
        self._nodes = list(nodes)
        self._calls = {node.name: 0 for node in self._nodes}

    def __len__(self) -> int:
        return len(self._nodes)

    def calls(self, node: NodeConfig) -> int:
        return self._calls.get(node.name, 0)

    def least_used(self) -> NodeConfig | None:
        """Return the node with the fewest calls and count the call. None if empty."""
        if not self._nodes:
            return None

        node = min(self._nodes, key=lambda n: self._calls[n.name])
        self._calls[node.name] += 1
        logger.debug(f"Selected search node {node.name} ({self._calls[node.name]} calls)")
        return node

    __call__ = least_used
