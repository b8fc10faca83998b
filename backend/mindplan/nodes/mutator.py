"""TreeMutator: structural changes to a project tree plus consistency repair.

Every method leaves the tree satisfying the completion rule: each node with
children holds the mean of its children. Callers are expected to run each
method inside one ``Database.transaction()`` so the change and its upward
propagation commit together.
"""

import logging
import math
import numbers

from mindplan.errors import (
    CrossProjectParentError,
    CyclicParentError,
    InvalidCompletionError,
    NodeNotFoundError,
    ParentNotFoundError,
)
from mindplan.models import Node
from mindplan.nodes.aggregator import CompletionAggregator, clamp_completion
from mindplan.nodes.store import NodeStore
from mindplan.nodes.tree import ProjectTree

logger = logging.getLogger(__name__)


def coerce_completion(value: object) -> float:
    """Turn caller input into a completion in [0, 100].

    Numbers (and numeric strings) outside the range are clamped. Anything
    non-numeric, including booleans and NaN, raises InvalidCompletionError.
    """
    if isinstance(value, bool):
        raise InvalidCompletionError(value)
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise InvalidCompletionError(value) from None
    else:
        raise InvalidCompletionError(value)
    if math.isnan(number):
        raise InvalidCompletionError(value)
    return clamp_completion(number)


class TreeMutator:
    """Attach, reparent, delete and set completion on nodes."""

    def __init__(self, store: NodeStore, aggregator: CompletionAggregator | None = None) -> None:
        self._store = store
        self._aggregator = aggregator or CompletionAggregator(store)

    async def attach(self, node: Node, parent_node_id: str | None) -> Node:
        """Insert node under parent_node_id (or as a root) and fold it into its ancestors."""
        if parent_node_id is not None:
            await self._require_parent(node.project_id, parent_node_id)
        node = node.model_copy(update={"parent_node_id": parent_node_id})

        await self._store.insert_node(node)
        logger.info(
            "Attached node %s to project %s under %s",
            node.id, node.project_id, parent_node_id or "root",
        )
        await self._aggregator.propagate_upward(node.id)
        return await self._require_node(node.id)

    async def set_completion(self, node_id: str, value: object) -> Node:
        """Write a clamped completion onto node_id, then recompute its ancestors.

        Works on non-leaf nodes too. Such an override lasts only until a
        descendant changes and propagation recomputes the node.
        """
        completion = coerce_completion(value)
        await self._require_node(node_id)

        await self._store.update_node(node_id, completion=completion)
        await self._aggregator.propagate_upward(node_id)
        return await self._require_node(node_id)

    async def delete_subtree(self, node_id: str) -> list[str]:
        """Delete node_id with all its descendants. Returns the removed ids."""
        node = await self._require_node(node_id)
        tree = ProjectTree(await self._store.get_nodes_for_project(node.project_id))
        removed = tree.subtree_ids(node_id)

        await self._store.delete_nodes(removed)
        logger.info(
            "Deleted node %s and %d descendants from project %s",
            node_id, len(removed) - 1, node.project_id,
        )
        if node.parent_node_id is not None:
            await self._aggregator.propagate_from(node.parent_node_id)
        return removed

    async def reparent(self, node_id: str, new_parent_id: str | None) -> Node:
        """Move node_id under new_parent_id (None makes it a root).

        Rejected moves raise before anything is written.
        """
        node = await self._require_node(node_id)
        old_parent_id = node.parent_node_id
        if new_parent_id == old_parent_id:
            return node

        if new_parent_id is not None:
            await self._require_parent(node.project_id, new_parent_id)
            tree = ProjectTree(await self._store.get_nodes_for_project(node.project_id))
            if tree.is_in_subtree(new_parent_id, node_id):
                raise CyclicParentError(node_id, new_parent_id)

        await self._store.update_node(node_id, parent_node_id=new_parent_id)
        logger.info(
            "Moved node %s from %s to %s",
            node_id, old_parent_id or "root", new_parent_id or "root",
        )

        # Old parent lost a child, new parent gained one.
        if old_parent_id is not None:
            await self._aggregator.propagate_from(old_parent_id)
        if new_parent_id is not None:
            await self._aggregator.propagate_from(new_parent_id)
        return await self._require_node(node_id)

    async def _require_node(self, node_id: str) -> Node:
        node = await self._store.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def _require_parent(self, project_id: str, parent_node_id: str) -> Node:
        parent = await self._store.get_node(parent_node_id)
        if parent is None:
            raise ParentNotFoundError(parent_node_id)
        if parent.project_id != project_id:
            raise CrossProjectParentError(parent_node_id, project_id)
        return parent
