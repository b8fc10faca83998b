"""Parent-pointer index over a project's flat node list.

Nodes are stored flat, each carrying ``parent_node_id``. ``ProjectTree`` is
rebuilt on demand from one ``get_nodes_for_project`` read and answers the
structural questions the mutator needs (descendants, ancestry) without keeping
child back-references on the node records themselves.
"""

from collections import defaultdict

from mindplan.models import Node


class ProjectTree:
    """Read-only view of one project's hierarchy, keyed by node id."""

    def __init__(self, nodes: list[Node]) -> None:
        self._nodes: dict[str, Node] = {n.id: n for n in nodes}
        self._children: dict[str | None, list[str]] = defaultdict(list)
        for n in nodes:
            self._children[n.parent_node_id].append(n.id)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def roots(self) -> list[Node]:
        return [self._nodes[i] for i in self._children.get(None, [])]

    def children_of(self, node_id: str) -> list[Node]:
        return [self._nodes[i] for i in self._children.get(node_id, [])]

    def descendant_ids(self, node_id: str) -> list[str]:
        """All transitive descendants of node_id, depth-first, excluding itself."""
        result: list[str] = []
        seen = {node_id}
        stack = list(reversed(self._children.get(node_id, [])))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            stack.extend(reversed(self._children.get(current, [])))
        return result

    def subtree_ids(self, node_id: str) -> list[str]:
        """node_id followed by its descendants."""
        return [node_id, *self.descendant_ids(node_id)]

    def is_in_subtree(self, candidate_id: str, root_id: str) -> bool:
        """True if candidate_id is root_id or one of its descendants."""
        return candidate_id == root_id or candidate_id in self.descendant_ids(root_id)
