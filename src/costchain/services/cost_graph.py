"""
Cost dependency graph.

Costs flow along three kinds of edges:

    ingredient -> recipe    (recipe base / portion ingredient lines)
    recipe     -> product   (product items)
    packaging  -> product   (product packaging lines)

CostGraph holds these edges as adjacency lists keyed by node and answers
"which entities does a change to these sources reach" with one breadth-first
traversal, whatever the edge kinds involved. The data access layer builds the
graph from the usage tables; see cost_data_service.load_cost_graph().
"""

from collections import deque
from typing import Dict, Iterable, List, NamedTuple, Optional, Set

INGREDIENT = "ingredient"
PACKAGING = "packaging"
RECIPE = "recipe"
PRODUCT = "product"

NODE_KINDS = (INGREDIENT, PACKAGING, RECIPE, PRODUCT)


class Node(NamedTuple):
    """A graph node: an entity kind and its primary key."""

    kind: str
    id: str


class CostGraph:
    """
    Directed graph of cost dependencies.

    An edge source -> target means target's cost is computed from source's
    cost. Insertion order of edges is preserved so traversal is deterministic.
    """

    def __init__(self):
        self._edges: Dict[Node, List[Node]] = {}

    def add_edge(self, source: Node, target: Node) -> None:
        """Record that target's cost depends on source. Duplicates are ignored."""
        for node in (source, target):
            if node.kind not in NODE_KINDS:
                raise ValueError(f"Unknown node kind '{node.kind}'")

        targets = self._edges.setdefault(source, [])
        if target not in targets:
            targets.append(target)

    def dependents(self, node: Node) -> List[Node]:
        """Direct dependents of a node."""
        return list(self._edges.get(node, []))

    def affected(self, sources: Iterable[Node], kind: Optional[str] = None) -> List[Node]:
        """
        Transitive dependents of any source node.

        Breadth-first, so nodes are returned closest-first and each node
        appears once. Source nodes are not part of the result unless another
        source reaches them.

        Args:
            sources: Changed nodes
            kind: If given, only nodes of this kind are returned (traversal
                still passes through the other kinds)

        Returns:
            Affected nodes in discovery order
        """
        seen: Set[Node] = set()
        queue = deque()
        result: List[Node] = []

        for source in sources:
            queue.append(source)

        while queue:
            node = queue.popleft()
            for dependent in self.dependents(node):
                if dependent in seen:
                    continue
                seen.add(dependent)
                result.append(dependent)
                queue.append(dependent)

        if kind is not None:
            result = [node for node in result if node.kind == kind]
        return result

    def __len__(self) -> int:
        return sum(len(targets) for targets in self._edges.values())
