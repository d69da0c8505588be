"""
Node search.

Two flavours:

- ``search_nodes`` ranks nodes for a search box, fuzzy over name, English
  name, description and tags with per-field weights;
- ``match_node_ids`` is the plain case-insensitive filter the graph view uses
  to highlight matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from rapidfuzz import fuzz

from .models import BaseNode, NodeType
from .store import GraphStore

logger = logging.getLogger(__name__)

FIELD_WEIGHTS = {
    "name": 0.4,
    "name_en": 0.3,
    "description": 0.2,
    "tags": 0.1,
}

# Minimum per-field similarity (0-100) for a node to count as a hit.
MATCH_THRESHOLD = 60.0
DEFAULT_LIMIT = 30


@dataclass(frozen=True)
class SearchHit:
    node: BaseNode
    score: float


def _field_score(query: str, text: str) -> float:
    if not text:
        return 0.0
    text = text.lower()
    # partial_ratio slides the shorter string, so a short field must not
    # be matched inside a longer query
    if len(text) < len(query):
        return fuzz.ratio(query, text)
    return fuzz.partial_ratio(query, text)


def score_node(node: BaseNode, query: str) -> SearchHit:
    """
    Score one node against a lowercased query.

    The weighted sum over fields ranks hits; the best single field decides
    whether the node is a hit at all, so a strong name match is not diluted
    by an empty description.
    """
    scores = {
        "name": _field_score(query, node.name),
        "name_en": _field_score(query, node.name_en),
        "description": _field_score(query, node.description),
        "tags": max((_field_score(query, t) for t in node.tags), default=0.0),
    }
    best = max(scores.values())
    if best < MATCH_THRESHOLD:
        return SearchHit(node=node, score=0.0)
    return SearchHit(node=node, score=sum(FIELD_WEIGHTS[k] * v for k, v in scores.items()))


def search_nodes(
    store: GraphStore,
    query: str,
    node_type: Optional[NodeType] = None,
    limit: int = DEFAULT_LIMIT,
) -> List[BaseNode]:
    """
    Ranked nodes for ``query``, best first.

    An empty or blank query returns the first ``limit`` nodes in dataset
    order, still honouring the type filter.
    """
    if node_type is not None:
        candidates: Iterable[BaseNode] = store.nodes_of_type(NodeType(node_type))
    else:
        candidates = store.nodes

    q = query.strip().lower()
    if not q:
        return list(candidates)[:limit]

    hits = [h for h in (score_node(n, q) for n in candidates) if h.score > 0]
    hits.sort(key=lambda h: h.score, reverse=True)
    logger.debug("Search %r: %d hits", query, len(hits))
    return [h.node for h in hits[:limit]]


def match_node_ids(nodes: Iterable[BaseNode], query: Optional[str]) -> Optional[Set[str]]:
    """
    Ids whose name, English name or any tag contains ``query``.

    Returns None for an empty query, meaning no search filter is active.
    """
    if not query:
        return None
    q = query.lower()
    return {
        n.id for n in nodes
        if q in n.name.lower()
        or q in n.name_en.lower()
        or any(q in t.lower() for t in n.tags)
    }

