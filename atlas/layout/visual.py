"""
Per-node and per-edge visual state.

Turns interaction state (selection, hover, search matches, scenario
results, zoom) into plain values a renderer can draw without further
logic: color, size, opacity, label visibility.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from atlas.graph.models import BaseNode, Edge, EdgeDirection, EdgeStrength, EdgeType, NodeType, node_type
from atlas.graph.scenario import ImpactDirection
from . import palette

# 2D
FOCUS_DIM_ALPHA = 0.12
SEARCH_DIM_ALPHA = 0.08
SELECTED_SCALE = 1.8
HOVERED_SCALE = 1.4
LABEL_ZOOM_THRESHOLD = 0.5

# 3D
FOCUSED_SCALE_3D = 1.8
HIGHLIGHTED_SCALE_3D = 1.4
HOVERED_SCALE_3D = 1.3
DIM_OPACITY_3D = 0.6
NODE_SIZE_3D = {NodeType.MACRO: 1.2, NodeType.COMPANY: 0.8}

EDGE_DIRECTION_COLORS = {
    EdgeDirection.POSITIVE: "#10B981",
    EdgeDirection.NEGATIVE: "#EF4444",
}
COMPLEX_EDGE_COLOR = "#F59E0B"
EDGE_WIDTH_3D = {EdgeStrength.STRONG: 2.5, EdgeStrength.MEDIUM: 1.8}

DIRECTION_GLYPHS = {
    EdgeDirection.POSITIVE: "▲ +",
    EdgeDirection.NEGATIVE: "▼ −",
}
STRENGTH_GLYPHS = {
    EdgeStrength.STRONG: "●●●",
    EdgeStrength.MEDIUM: "●●○",
}
IMPACT_GLYPHS = {
    ImpactDirection.UP: "▲ up",
    ImpactDirection.DOWN: "▼ down",
    ImpactDirection.COMPLEX: "◆ complex",
}


def neighbor_ids(edges: Iterable[Edge], node_id: Optional[str]) -> Set[str]:
    """Ids joined to ``node_id`` by any edge, in either direction."""
    if node_id is None:
        return set()
    ids = set()
    for edge in edges:
        if edge.source == node_id:
            ids.add(edge.target)
        if edge.target == node_id:
            ids.add(edge.source)
    ids.discard(node_id)
    return ids


@dataclass
class ViewState:
    """Interaction state shared by the 2D and 3D views."""
    selected_id: Optional[str] = None
    hovered_id: Optional[str] = None
    search_ids: Optional[Set[str]] = None     # None = no search active
    highlighted_ids: Set[str] = field(default_factory=set)
    scenario: Optional[Dict[str, ImpactDirection]] = None
    zoom: float = 1.0

    @property
    def has_focus(self) -> bool:
        return self.selected_id is not None


# =============================================================================
# 2D
# =============================================================================

@dataclass
class NodeVisual:
    node_id: str
    color: str
    radius: float
    alpha: float
    show_label: bool
    selected: bool = False
    hovered: bool = False
    connected: bool = False
    search_match: bool = True


@dataclass
class EdgeVisual:
    edge_id: str
    color: str
    width: float
    alpha: float
    connected: bool = False
    arrow: bool = False


def _base_color(node: BaseNode, view: ViewState) -> str:
    if view.scenario is not None and node.id in view.scenario:
        return palette.impact_color(view.scenario[node.id])
    return palette.node_color(node_type(node))


def node_visuals(nodes: Sequence[BaseNode], edges: Sequence[Edge], view: ViewState) -> List[NodeVisual]:
    """
    2D node state.

    A focus dims everything except the selection and its neighbours; an
    active search dims non-matches further and wins over focus.
    """
    connected = neighbor_ids(edges, view.selected_id)
    out = []
    for node in nodes:
        selected = node.id == view.selected_id
        hovered = node.id == view.hovered_id
        is_connected = node.id in connected
        match = view.search_ids is None or node.id in view.search_ids

        alpha = 1.0
        if view.has_focus and not selected and not is_connected:
            alpha = FOCUS_DIM_ALPHA
        if not match:
            alpha = SEARCH_DIM_ALPHA

        radius = palette.node_radius(node_type(node))
        if selected:
            radius *= SELECTED_SCALE
        elif hovered:
            radius *= HOVERED_SCALE

        out.append(NodeVisual(
            node_id=node.id,
            color=palette.SELECTED_COLOR if selected else _base_color(node, view),
            radius=radius,
            alpha=alpha,
            show_label=view.zoom > LABEL_ZOOM_THRESHOLD or selected or hovered or is_connected,
            selected=selected,
            hovered=hovered,
            connected=is_connected,
            search_match=match,
        ))
    return out


def edge_visuals(edges: Sequence[Edge], view: ViewState) -> List[EdgeVisual]:
    out = []
    for edge in edges:
        connected = view.has_focus and view.selected_id in (edge.source, edge.target)
        colors = palette.edge_colors(edge.type)
        if connected:
            alpha = 1.0
            color = colors.highlight
            width = 2.0 if edge.strength == EdgeStrength.STRONG else 1.2
        else:
            alpha = 0.05 if view.has_focus else 0.5
            color = colors.base
            width = 0.5
        out.append(EdgeVisual(
            edge_id=edge.id,
            color=color,
            width=width,
            alpha=alpha,
            connected=connected,
            arrow=connected and edge.type == EdgeType.CAUSAL,
        ))
    return out


# =============================================================================
# 3D
# =============================================================================

@dataclass
class NodeVisual3D:
    node_id: str
    color: str
    scale: float
    opacity: float
    size: float
    show_label: bool
    impact_label: Optional[str] = None


@dataclass
class EdgeVisual3D:
    edge_id: str
    color: str
    width: float
    opacity: float
    highlighted: bool
    label: Optional[str] = None


def node_visuals_3d(nodes: Sequence[BaseNode], view: ViewState) -> List[NodeVisual3D]:
    out = []
    for node in nodes:
        focused = node.id == view.selected_id
        highlighted = node.id in view.highlighted_ids
        hovered = node.id == view.hovered_id
        impact = view.scenario.get(node.id) if view.scenario else None

        if focused:
            scale = FOCUSED_SCALE_3D
        elif highlighted:
            scale = HIGHLIGHTED_SCALE_3D
        elif hovered:
            scale = HOVERED_SCALE_3D
        else:
            scale = 1.0

        out.append(NodeVisual3D(
            node_id=node.id,
            color=palette.impact_color(impact) if impact else palette.node_color(node_type(node)),
            scale=scale,
            opacity=1.0 if focused or highlighted else DIM_OPACITY_3D,
            size=NODE_SIZE_3D.get(node_type(node), 1.0),
            show_label=focused or highlighted or hovered,
            impact_label=IMPACT_GLYPHS[ImpactDirection(impact)] if impact else None,
        ))
    return out


def edge_glyph(edge: Edge) -> str:
    direction = DIRECTION_GLYPHS.get(edge.direction, "◆ complex") if edge.direction else "◆ complex"
    strength = STRENGTH_GLYPHS.get(edge.strength, "●○○") if edge.strength else "●○○"
    return f"{direction} {strength}"


def edge_visuals_3d(edges: Sequence[Edge], view: ViewState, show_labels: bool = True) -> List[EdgeVisual3D]:
    out = []
    for edge in edges:
        highlighted = (
            view.selected_id in (edge.source, edge.target)
            or edge.source in view.highlighted_ids
            or edge.target in view.highlighted_ids
        )
        out.append(EdgeVisual3D(
            edge_id=edge.id,
            color=EDGE_DIRECTION_COLORS.get(edge.direction, COMPLEX_EDGE_COLOR) if edge.direction else COMPLEX_EDGE_COLOR,
            width=EDGE_WIDTH_3D.get(edge.strength, 1.0) if edge.strength else 1.0,
            opacity=0.8 if highlighted else 0.12,
            highlighted=highlighted,
            label=edge_glyph(edge) if show_labels and highlighted else None,
        ))
    return out
