"""
Causal Map Palette

Colors and sizes shared by the 2D and 3D renderers.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from atlas.graph.models import ChangeDirection, EdgeType, MacroCategory, NodeType
from atlas.graph.scenario import ImpactDirection

# =============================================================================
# Nodes
# =============================================================================

FALLBACK_COLOR = "#9CA3AF"
SELECTED_COLOR = "#F59E0B"

NODE_COLORS: Dict[NodeType, str] = {
    NodeType.MACRO: "#06B6D4",
    NodeType.SECTOR: "#8B5CF6",
    NodeType.THEME: "#F59E0B",
    NodeType.COMPANY: "#34D399",
}

NODE_RADII: Dict[NodeType, float] = {
    NodeType.MACRO: 8.0,
    NodeType.SECTOR: 12.0,
    NodeType.THEME: 10.0,
    NodeType.COMPANY: 7.0,
}
DEFAULT_RADIUS = 6.0

CATEGORY_COLORS: Dict[MacroCategory, str] = {
    MacroCategory.MONETARY_POLICY: "#06B6D4",
    MacroCategory.CURRENCY: "#3B82F6",
    MacroCategory.BOND: "#8B5CF6",
    MacroCategory.COMMODITY: "#F59E0B",
    MacroCategory.COMMODITY_ENERGY: "#EF4444",
    MacroCategory.COMMODITY_METAL: "#D97706",
    MacroCategory.COMMODITY_AGRI: "#84CC16",
    MacroCategory.INDICATOR: "#10B981",
    MacroCategory.FLOW: "#EC4899",
    MacroCategory.INDEX: "#6366F1",
}

# Scenario overlay
IMPACT_COLORS: Dict[ImpactDirection, str] = {
    ImpactDirection.UP: "#10B981",
    ImpactDirection.DOWN: "#EF4444",
    ImpactDirection.COMPLEX: "#F59E0B",
}

# Live value change badges
CHANGE_COLORS: Dict[ChangeDirection, str] = {
    ChangeDirection.UP: "#10B981",
    ChangeDirection.DOWN: "#EF4444",
    ChangeDirection.NEUTRAL: FALLBACK_COLOR,
}


# =============================================================================
# Edges
# =============================================================================

@dataclass(frozen=True)
class EdgeColors:
    base: str
    highlight: str


EDGE_COLORS: Dict[EdgeType, EdgeColors] = {
    EdgeType.CAUSAL: EdgeColors("rgba(6, 182, 212, 0.4)", "rgba(6, 182, 212, 0.9)"),
    EdgeType.SUPPLY_CHAIN: EdgeColors("rgba(245, 158, 11, 0.4)", "rgba(245, 158, 11, 0.9)"),
    EdgeType.BELONGS_TO: EdgeColors("rgba(139, 92, 246, 0.15)", "rgba(139, 92, 246, 0.5)"),
}
DEFAULT_EDGE_COLORS = EdgeColors("rgba(255, 255, 255, 0.1)", "rgba(255, 255, 255, 0.5)")


def node_color(kind: Union[NodeType, str, None]) -> str:
    try:
        return NODE_COLORS.get(NodeType(kind), FALLBACK_COLOR)
    except ValueError:
        return FALLBACK_COLOR


def node_radius(kind: Union[NodeType, str, None]) -> float:
    try:
        return NODE_RADII.get(NodeType(kind), DEFAULT_RADIUS)
    except ValueError:
        return DEFAULT_RADIUS


def category_color(category: Optional[MacroCategory]) -> str:
    if category is None:
        return FALLBACK_COLOR
    return CATEGORY_COLORS.get(MacroCategory(category), FALLBACK_COLOR)


def impact_color(direction: Union[ImpactDirection, str]) -> str:
    return IMPACT_COLORS.get(ImpactDirection(direction), FALLBACK_COLOR)


def change_color(direction: Optional[ChangeDirection]) -> str:
    if direction is None:
        return FALLBACK_COLOR
    return CHANGE_COLORS.get(ChangeDirection(direction), FALLBACK_COLOR)


def edge_colors(kind: Union[EdgeType, str]) -> EdgeColors:
    try:
        return EDGE_COLORS.get(EdgeType(kind), DEFAULT_EDGE_COLORS)
    except ValueError:
        return DEFAULT_EDGE_COLORS
