"""Completion aggregation: the mean rule and the upward propagation walk."""

import logging
from collections.abc import Iterable

from mindplan.errors import NodeNotFoundError
from mindplan.models import COMPLETION_MAX, COMPLETION_MIN
from mindplan.nodes.store import NodeStore

logger = logging.getLogger(__name__)


def aggregate(children: Iterable[float]) -> float:
    """Arithmetic mean of the children's completion values.

    Raises ValueError on an empty input; a childless node has no aggregate.
    """
    values = [float(c) for c in children]
    if not values:
        raise ValueError("Cannot aggregate completion over zero children")
    return sum(values) / len(values)


def clamp_completion(value: float) -> float:
    """Clamp into [0, 100]."""
    return max(COMPLETION_MIN, min(COMPLETION_MAX, float(value)))


class CompletionAggregator:
    """Recomputes ancestor completion after a change lower in the tree."""

    def __init__(self, store: NodeStore) -> None:
        self._store = store

    async def propagate_upward(self, node_id: str) -> list[str]:
        """Recompute every ancestor of node_id. node_id itself is untouched.

        Returns the ids of the ancestors that were visited, nearest first.
        """
        node = await self._store.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        if node.parent_node_id is None:
            return []
        return await self.propagate_from(node.parent_node_id)

    async def propagate_from(self, node_id: str) -> list[str]:
        """Recompute node_id and then each of its ancestors up to the root.

        A node with no children left keeps its stored completion; the walk
        still continues above it.
        """
        visited: list[str] = []
        current: str | None = node_id
        while current is not None:
            if current in visited:
                logger.warning(
                    "Cycle in stored parent chain at node %s, stopping propagation", current,
                )
                break
            node = await self._store.get_node(current)
            if node is None:
                logger.warning("Propagation reached missing node %s, stopping", current)
                break
            visited.append(current)

            children = await self._store.get_children(current)
            if children:
                value = clamp_completion(aggregate(c.completion for c in children))
                if value != node.completion:
                    await self._store.update_node(current, completion=value)
                logger.debug(
                    "Node %s completion %.2f -> %.2f from %d children",
                    current, node.completion, value, len(children),
                )
            else:
                logger.debug("Node %s has no children, keeping %.2f", current, node.completion)

            current = node.parent_node_id
        return visited
