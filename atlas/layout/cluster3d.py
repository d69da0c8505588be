"""
3D clustered layout.

Nodes are grouped by variant. Each group sits on a ring around its own
anchor in the x/z plane (macro in the middle, sectors and themes to either
side, companies in front) with a little vertical jitter; a fixed number of
spring passes then pulls edge endpoints that are too far apart toward an
ideal distance. There is no repulsion and no convergence check: the result
only has to read well.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from atlas.graph.models import BaseNode, Edge, NodeType, node_type

logger = logging.getLogger(__name__)

Position3D = Tuple[float, float, float]


@dataclass(frozen=True)
class ClusterConfig:
    min_radius: float = 8.0
    radius_per_node: float = 0.4
    ring_share: float = 0.5        # ring radius cap as a share of the layout radius
    ring_per_node: float = 0.6
    jitter_height: float = 3.0
    iterations: int = 30
    ideal_distance: float = 4.0
    spring_gain: float = 0.02

    def layout_radius(self, node_count: int) -> float:
        return max(self.min_radius, node_count * self.radius_per_node)


def group_anchor(kind: NodeType, radius: float) -> Tuple[float, float]:
    """(x, z) center of a variant's ring."""
    anchors = {
        NodeType.MACRO: (0.0, 0.0),
        NodeType.SECTOR: (radius * 0.6, radius * 0.3),
        NodeType.THEME: (-radius * 0.6, radius * 0.3),
        NodeType.COMPANY: (0.0, -radius * 0.6),
    }
    return anchors.get(kind, (0.0, 0.0))


def cluster_layout(
    nodes: Sequence[BaseNode],
    edges: Sequence[Edge],
    config: Optional[ClusterConfig] = None,
    seed: int = 42,
) -> Dict[str, Position3D]:
    """
    Positions for every node as ``(x, y, z)``.

    Groups are placed in order of first appearance; within a group nodes
    are spread evenly by index. Edges with an endpoint outside ``nodes`` are
    ignored by the relaxation.
    """
    config = config or ClusterConfig()
    rng = np.random.default_rng(seed)
    radius = config.layout_radius(len(nodes))

    groups: Dict[NodeType, List[BaseNode]] = {}
    for node in nodes:
        groups.setdefault(node_type(node), []).append(node)

    positions: Dict[str, np.ndarray] = {}
    for kind, members in groups.items():
        ox, oz = group_anchor(kind, radius)
        count = len(members)
        ring = min(radius * config.ring_share, count * config.ring_per_node)
        for i, node in enumerate(members):
            angle = 2 * np.pi * i / count
            y = (rng.random() - 0.5) * config.jitter_height
            positions[node.id] = np.array([ox + np.cos(angle) * ring, y, oz + np.sin(angle) * ring])

    springs = [(positions[e.source], positions[e.target]) for e in edges
               if e.source in positions and e.target in positions]
    for _ in range(config.iterations):
        for sp, tp in springs:
            delta = tp - sp
            dist = float(np.sqrt(delta @ delta))
            if dist > config.ideal_distance:
                pull = delta / dist * (dist - config.ideal_distance) * config.spring_gain
                sp += pull
                tp -= pull

    logger.debug("Clustered %d nodes in %d groups (R=%.1f)", len(nodes), len(groups), radius)
    return {nid: (float(p[0]), float(p[1]), float(p[2])) for nid, p in positions.items()}
