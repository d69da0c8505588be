"""
Graph layer: data model, dataset loading, the store, and the engines that
walk it (scenario propagation, path finding, search).
"""

from .models import (
    BaseNode,
    ChangeDirection,
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
    ThemeTier,
    node_type,
)
from .loader import load_graph_data
from .store import GraphStats, GraphStore
from .scenario import (
    ImpactDirection,
    ScenarioAction,
    ScenarioPropagator,
    ScenarioResult,
    ScenarioSummary,
    scenario_direction_map,
    sort_by_strength,
    summarize,
)
from .paths import GraphPath, PathFinder
from .search import match_node_ids, search_nodes
from .live import LiveQuote, classify_change, resolve_company_price, resolve_macro_quote

__all__ = [
    "BaseNode",
    "ChangeDirection",
    "CompanyNode",
    "Edge",
    "EdgeDirection",
    "EdgeStrength",
    "EdgeType",
    "GraphData",
    "MacroNode",
    "NodeType",
    "SectorNode",
    "ThemeNode",
    "ThemeTier",
    "node_type",
    "load_graph_data",
    "GraphStats",
    "GraphStore",
    "ImpactDirection",
    "ScenarioAction",
    "ScenarioPropagator",
    "ScenarioResult",
    "ScenarioSummary",
    "scenario_direction_map",
    "sort_by_strength",
    "summarize",
    "GraphPath",
    "PathFinder",
    "match_node_ids",
    "search_nodes",
    "LiveQuote",
    "classify_change",
    "resolve_company_price",
    "resolve_macro_quote",
]
