"""
GraphStore — in-memory causal map.

Holds the four node collections and the authored causal edges, derives the
supply-chain and membership edge sets, and serves O(1) id lookups plus an
adjacency index over the merged edge list. The dataset is immutable for the
lifetime of the store; every derived structure is built on first access and
memoized.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, asdict
from functools import cached_property
from typing import Dict, Iterable, List, Literal, Optional, Set

from .models import (
    BaseNode,
    CompanyNode,
    Edge,
    EdgeDirection,
    EdgeStrength,
    EdgeType,
    GraphData,
    MacroNode,
    NodeType,
    SectorNode,
    ThemeNode,
    node_type,
)

logger = logging.getLogger(__name__)

EdgeOrder = Literal["dataset", "edge_id"]


@dataclass(frozen=True)
class GraphStats:
    """Headline counts for the loaded graph."""
    total_nodes: int
    macro_nodes: int
    sector_nodes: int
    theme_count: int
    company_count: int
    total_edges: int
    causal_edges: int
    strong_edges: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


# =============================================================================
# Derivation
# =============================================================================

def derive_supply_chain_edges(themes: Iterable[ThemeNode], known_ids: Set[str]) -> List[Edge]:
    """
    Connect every member of tier i to every member of tier i+1, per theme.

    Tiers are ordered by tier index. Ids missing from ``known_ids`` and
    self-loops are skipped; a (source, target) pair is emitted once across
    the whole pass even when two themes both imply it.
    """
    edges: List[Edge] = []
    seen: Set[tuple] = set()

    for theme in themes:
        tiers = sorted(theme.tiers, key=lambda t: t.tier)
        for upstream, downstream in zip(tiers, tiers[1:]):
            up_ids = [nid for nid in upstream.nodes if nid in known_ids]
            down_ids = [nid for nid in downstream.nodes if nid in known_ids]
            dangling = len(upstream.nodes) - len(up_ids)
            if dangling:
                logger.debug("Theme %s tier %s: skipped %d unknown ids", theme.id, upstream.tier, dangling)

            for src in up_ids:
                for tgt in down_ids:
                    if src == tgt or (src, tgt) in seen:
                        continue
                    seen.add((src, tgt))
                    edges.append(Edge(
                        id=f"sc_{theme.id}_{src}_{tgt}",
                        source=src,
                        target=tgt,
                        type=EdgeType.SUPPLY_CHAIN,
                        direction=EdgeDirection.POSITIVE,
                        strength=EdgeStrength.MEDIUM,
                        mechanism=f"{upstream.name} → {downstream.name} ({theme.name})",
                    ))
    return edges


def derive_membership_edges(
    companies: Iterable[CompanyNode],
    sectors: Dict[str, SectorNode],
) -> List[Edge]:
    """One company→sector edge per company whose sector resolves."""
    edges: List[Edge] = []
    for company in companies:
        sector = sectors.get(company.sector_id)
        if sector is None:
            logger.debug("Company %s: unknown sector %s", company.id, company.sector_id)
            continue
        edges.append(Edge(
            id=f"bt_{company.id}_{sector.id}",
            source=company.id,
            target=sector.id,
            type=EdgeType.BELONGS_TO,
            strength=EdgeStrength.STRONG,
            mechanism=f"{company.name} ∈ {sector.name}",
        ))
    return edges


# =============================================================================
# Store
# =============================================================================

class GraphStore:
    """
    Read-only graph store.

    Build once at application start and pass it to the engines that need it.

    Args:
        data: The loaded dataset.
        edge_order: Order in which ``outgoing_causal`` yields edges. ``"dataset"``
            keeps authored order, ``"edge_id"`` sorts lexically by edge id.
    """

    def __init__(self, data: GraphData, edge_order: EdgeOrder = "dataset"):
        if edge_order not in ("dataset", "edge_id"):
            raise ValueError(f"Unknown edge order: {edge_order!r}")
        self.data = data
        self.edge_order = edge_order

    # ------------------------------------------------------------------
    # Node lookups
    # ------------------------------------------------------------------
    @cached_property
    def _node_map(self) -> Dict[str, BaseNode]:
        nodes: Dict[str, BaseNode] = {}
        for node in self.data.nodes:
            if node.id in nodes:
                logger.warning("Duplicate node id %s (%s); keeping first", node.id, node_type(node).value)
                continue
            nodes[node.id] = node
        return nodes

    @cached_property
    def _by_type(self) -> Dict[NodeType, Dict[str, BaseNode]]:
        grouped: Dict[NodeType, Dict[str, BaseNode]] = {t: {} for t in NodeType}
        for node_id, node in self._node_map.items():
            grouped[node_type(node)][node_id] = node
        return grouped

    @property
    def nodes(self) -> List[BaseNode]:
        return list(self._node_map.values())

    def nodes_of_type(self, kind: NodeType) -> List[BaseNode]:
        return list(self._by_type[kind].values())

    @property
    def macro_nodes(self) -> List[MacroNode]:
        return self.nodes_of_type(NodeType.MACRO)  # type: ignore[return-value]

    @property
    def sector_nodes(self) -> List[SectorNode]:
        return self.nodes_of_type(NodeType.SECTOR)  # type: ignore[return-value]

    @property
    def theme_nodes(self) -> List[ThemeNode]:
        return self.nodes_of_type(NodeType.THEME)  # type: ignore[return-value]

    @property
    def company_nodes(self) -> List[CompanyNode]:
        return self.nodes_of_type(NodeType.COMPANY)  # type: ignore[return-value]

    def node_by_id(self, node_id: str) -> Optional[BaseNode]:
        return self._node_map.get(node_id)

    def _typed(self, kind: NodeType, node_id: str) -> Optional[BaseNode]:
        return self._by_type[kind].get(node_id)

    def macro_by_id(self, node_id: str) -> Optional[MacroNode]:
        return self._typed(NodeType.MACRO, node_id)  # type: ignore[return-value]

    def sector_by_id(self, node_id: str) -> Optional[SectorNode]:
        return self._typed(NodeType.SECTOR, node_id)  # type: ignore[return-value]

    def theme_by_id(self, node_id: str) -> Optional[ThemeNode]:
        return self._typed(NodeType.THEME, node_id)  # type: ignore[return-value]

    def company_by_id(self, node_id: str) -> Optional[CompanyNode]:
        return self._typed(NodeType.COMPANY, node_id)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------
    @property
    def causal_edges(self) -> List[Edge]:
        return [e for e in self.data.edges if e.type == EdgeType.CAUSAL]

    @cached_property
    def supply_chain_edges(self) -> List[Edge]:
        edges = derive_supply_chain_edges(self.theme_nodes, set(self._node_map))
        logger.debug("Derived %d supply-chain edges", len(edges))
        return edges

    @cached_property
    def membership_edges(self) -> List[Edge]:
        edges = derive_membership_edges(self.company_nodes, self._by_type[NodeType.SECTOR])  # type: ignore[arg-type]
        logger.debug("Derived %d membership edges", len(edges))
        return edges

    @cached_property
    def edges(self) -> List[Edge]:
        """Authored causal edges followed by the derived sets."""
        merged = list(self.data.edges) + self.supply_chain_edges + self.membership_edges
        logger.info(
            "Edge index: %d causal, %d supply-chain, %d membership",
            len(self.data.edges), len(self.supply_chain_edges), len(self.membership_edges),
        )
        return merged

    @cached_property
    def _edge_index(self) -> Dict[str, List[Edge]]:
        index: Dict[str, List[Edge]] = defaultdict(list)
        for edge in self.edges:
            index[edge.source].append(edge)
            if edge.target != edge.source:
                index[edge.target].append(edge)
        return dict(index)

    @cached_property
    def _causal_out(self) -> Dict[str, List[Edge]]:
        out: Dict[str, List[Edge]] = defaultdict(list)
        for edge in self.causal_edges:
            out[edge.source].append(edge)
        if self.edge_order == "edge_id":
            for edges in out.values():
                edges.sort(key=lambda e: e.id)
        return dict(out)

    def edges_touching(self, node_id: str) -> List[Edge]:
        """All edges where ``node_id`` is source or target."""
        return list(self._edge_index.get(node_id, ()))

    def outgoing_causal(self, node_id: str) -> List[Edge]:
        """Causal edges sourced at ``node_id``, in the store's edge order."""
        return list(self._causal_out.get(node_id, ()))

    def connected_node_ids(self, node_id: str) -> Set[str]:
        ids: Set[str] = set()
        for edge in self._edge_index.get(node_id, ()):
            other = edge.other_end(node_id)
            if other is not None and other != node_id:
                ids.add(other)
        return ids

    def connected_nodes(self, node_id: str) -> List[BaseNode]:
        found = (self.node_by_id(nid) for nid in sorted(self.connected_node_ids(node_id)))
        return [n for n in found if n is not None]

    # ------------------------------------------------------------------
    # Themes
    # ------------------------------------------------------------------
    def themes_for_node(self, node_id: str) -> List[ThemeNode]:
        """Themes whose value chain lists ``node_id`` in any tier."""
        return [
            theme for theme in self.theme_nodes
            if any(node_id in tier.nodes for tier in theme.tiers)
        ]

    def tier_in_theme(self, node_id: str, theme_id: str) -> Optional[int]:
        theme = self.theme_by_id(theme_id)
        if theme is None:
            return None
        for tier in theme.tiers:
            if node_id in tier.nodes:
                return tier.tier
        return None

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def graph_data(self) -> GraphData:
        """Nodes plus the merged edge list, as consumed by the layout engine."""
        return GraphData(nodes=self.nodes, edges=self.edges)

    def stats(self) -> GraphStats:
        edges = self.edges
        return GraphStats(
            total_nodes=len(self._node_map),
            macro_nodes=len(self._by_type[NodeType.MACRO]),
            sector_nodes=len(self._by_type[NodeType.SECTOR]),
            theme_count=len(self._by_type[NodeType.THEME]),
            company_count=len(self._by_type[NodeType.COMPANY]),
            total_edges=len(edges),
            causal_edges=len(self.causal_edges),
            strong_edges=sum(1 for e in edges if e.strength == EdgeStrength.STRONG),
        )
