"""
Shortest path between two nodes.

Unweighted BFS over the undirected view of the merged edge list: causal,
supply-chain and membership edges all count as two-way links for reachability.
Among equally short paths the first one discovered wins, which follows the
order edges appear in the store.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import Edge
from .store import GraphStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphPath:
    """Ordered node ids and the edges walked between them."""
    nodes: List[str] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    @property
    def hops(self) -> int:
        return len(self.edges)

    def to_dict(self) -> Dict:
        return {
            "nodes": list(self.nodes),
            "edges": [e.model_dump(by_alias=True, mode="json") for e in self.edges],
        }


class PathFinder:
    """BFS path finder over a ``GraphStore``."""

    def __init__(self, store: GraphStore):
        self.store = store
        self._adjacency: Optional[Dict[str, List[Tuple[str, Edge]]]] = None

    @property
    def adjacency(self) -> Dict[str, List[Tuple[str, Edge]]]:
        if self._adjacency is None:
            adj: Dict[str, List[Tuple[str, Edge]]] = {}
            for edge in self.store.edges:
                adj.setdefault(edge.source, []).append((edge.target, edge))
                adj.setdefault(edge.target, []).append((edge.source, edge))
            self._adjacency = adj
        return self._adjacency

    def find_path(self, from_id: str, to_id: str) -> Optional[GraphPath]:
        """
        Shortest path from ``from_id`` to ``to_id``.

        Returns None when either id is unknown or the two are not connected.
        A node is trivially connected to itself (one node, no edges).
        """
        if self.store.node_by_id(from_id) is None or self.store.node_by_id(to_id) is None:
            return None
        if from_id == to_id:
            return GraphPath(nodes=[from_id], edges=[])

        adjacency = self.adjacency
        parents: Dict[str, Tuple[str, Edge]] = {}
        visited = {from_id}
        queue = deque([from_id])

        while queue:
            current = queue.popleft()
            for neighbor, edge in adjacency.get(current, ()):
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                parents[neighbor] = (current, edge)
                if neighbor == to_id:
                    return self._unwind(parents, from_id, to_id)
                queue.append(neighbor)

        logger.debug("No path between %s and %s", from_id, to_id)
        return None

    @staticmethod
    def _unwind(parents: Dict[str, Tuple[str, Edge]], from_id: str, to_id: str) -> GraphPath:
        nodes = [to_id]
        edges: List[Edge] = []
        cursor = to_id
        while cursor != from_id:
            prev, edge = parents[cursor]
            edges.append(edge)
            nodes.append(prev)
            cursor = prev
        nodes.reverse()
        edges.reverse()
        return GraphPath(nodes=nodes, edges=edges)
