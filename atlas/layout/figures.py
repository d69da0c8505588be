"""
Plotly figures for the causal map and the backtest.

Builders take already-computed positions and visual state; they do no
layout or interaction logic of their own.
"""

from collections import OrderedDict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from atlas.backtest.engine import BacktestResult
from atlas.graph.models import BaseNode, Edge, node_type
from .cluster3d import Position3D
from .visual import ViewState, edge_visuals, edge_visuals_3d, node_visuals, node_visuals_3d

BG_COLOR = "#0A0A0F"
TEXT_COLOR = "#E5E7EB"
ARROW_MIN_LENGTH = 20.0

_HIDDEN_AXIS = dict(showgrid=False, zeroline=False, showticklabels=False, title="")


def _hover(node: BaseNode) -> str:
    text = f"<b>{node.name}</b>"
    if node.name_en:
        text += f"<br>{node.name_en}"
    return text + f"<br>{node_type(node).value}"


# =============================================================================
# 2D
# =============================================================================

def create_graph_figure(
    nodes: Sequence[BaseNode],
    edges: Sequence[Edge],
    positions: Mapping[str, Tuple[float, float]],
    view: Optional[ViewState] = None,
    title: str = "Causal Map",
    height: int = 700,
) -> go.Figure:
    """
    2D network figure in screen coordinates (y grows downward).

    Edges sharing color, width and alpha are batched into one trace; causal
    edges touching the selection get an arrow annotation.
    """
    view = view or ViewState()
    drawn_nodes = [n for n in nodes if n.id in positions]
    drawn_edges = [e for e in edges if e.source in positions and e.target in positions]

    groups: "OrderedDict[tuple, Dict[str, List]]" = OrderedDict()
    arrows = []
    for edge, vis in zip(drawn_edges, edge_visuals(drawn_edges, view)):
        (x0, y0), (x1, y1) = positions[edge.source], positions[edge.target]
        bucket = groups.setdefault((vis.color, vis.width, vis.alpha), {"x": [], "y": []})
        bucket["x"].extend([x0, x1, None])
        bucket["y"].extend([y0, y1, None])
        if vis.arrow and ((x1 - x0) ** 2 + (y1 - y0) ** 2) ** 0.5 > ARROW_MIN_LENGTH:
            arrows.append(dict(
                x=x1, y=y1, ax=x0, ay=y0,
                xref="x", yref="y", axref="x", ayref="y",
                showarrow=True, arrowhead=2, arrowsize=1, arrowwidth=vis.width,
                arrowcolor=vis.color, standoff=8, text="",
            ))

    fig = go.Figure()
    for (color, width, alpha), data in groups.items():
        fig.add_trace(go.Scatter(
            x=data["x"], y=data["y"],
            mode="lines",
            line=dict(width=width, color=color),
            opacity=alpha,
            hoverinfo="none",
            showlegend=False,
        ))

    visuals = node_visuals(drawn_nodes, drawn_edges, view)
    fig.add_trace(go.Scatter(
        x=[positions[n.id][0] for n in drawn_nodes],
        y=[positions[n.id][1] for n in drawn_nodes],
        mode="markers+text",
        text=[n.name if v.show_label else "" for n, v in zip(drawn_nodes, visuals)],
        textposition="bottom center",
        textfont=dict(color=TEXT_COLOR, size=10),
        hovertext=[_hover(n) for n in drawn_nodes],
        hoverinfo="text",
        customdata=[n.id for n in drawn_nodes],
        marker=dict(
            color=[v.color for v in visuals],
            size=[v.radius * 2 for v in visuals],
            opacity=[v.alpha for v in visuals],
            line=dict(
                width=[2 if v.selected else 1 if (v.hovered or v.connected) else 0 for v in visuals],
                color="rgba(255,255,255,0.6)",
            ),
        ),
        showlegend=False,
    ))

    fig.update_layout(
        title=title,
        height=height,
        hovermode="closest",
        paper_bgcolor=BG_COLOR,
        plot_bgcolor=BG_COLOR,
        font=dict(color=TEXT_COLOR),
        xaxis=_HIDDEN_AXIS,
        yaxis=dict(_HIDDEN_AXIS, autorange="reversed", scaleanchor="x"),
        annotations=arrows,
        margin=dict(l=10, r=10, t=40, b=10),
    )
    return fig


# =============================================================================
# 3D
# =============================================================================

def create_graph_figure_3d(
    nodes: Sequence[BaseNode],
    edges: Sequence[Edge],
    positions: Mapping[str, Position3D],
    view: Optional[ViewState] = None,
    title: str = "Causal Map 3D",
    height: int = 700,
    show_edge_labels: bool = True,
) -> go.Figure:
    view = view or ViewState()
    drawn_nodes = [n for n in nodes if n.id in positions]
    drawn_edges = [e for e in edges if e.source in positions and e.target in positions]

    fig = go.Figure()
    groups: "OrderedDict[tuple, Dict[str, List]]" = OrderedDict()
    labels: Dict[str, List] = {"x": [], "y": [], "z": [], "text": [], "color": []}
    for edge, vis in zip(drawn_edges, edge_visuals_3d(drawn_edges, view, show_edge_labels)):
        s, t = positions[edge.source], positions[edge.target]
        bucket = groups.setdefault((vis.color, vis.width, vis.opacity), {"x": [], "y": [], "z": []})
        for axis, i in (("x", 0), ("y", 1), ("z", 2)):
            bucket[axis].extend([s[i], t[i], None])
        if vis.label:
            labels["x"].append((s[0] + t[0]) / 2)
            labels["y"].append((s[1] + t[1]) / 2 + 0.3)
            labels["z"].append((s[2] + t[2]) / 2)
            labels["text"].append(vis.label)
            labels["color"].append(vis.color)

    for (color, width, opacity), data in groups.items():
        fig.add_trace(go.Scatter3d(
            x=data["x"], y=data["y"], z=data["z"],
            mode="lines",
            line=dict(color=color, width=width * 2),
            opacity=opacity,
            hoverinfo="none",
            showlegend=False,
        ))

    if labels["text"]:
        fig.add_trace(go.Scatter3d(
            x=labels["x"], y=labels["y"], z=labels["z"],
            mode="text",
            text=labels["text"],
            textfont=dict(color=labels["color"], size=10),
            hoverinfo="none",
            showlegend=False,
        ))

    # Scatter3d takes one opacity per trace: split bright and dimmed nodes.
    visuals = node_visuals_3d(drawn_nodes, view)
    for bright in (False, True):
        members = [(n, v) for n, v in zip(drawn_nodes, visuals) if (v.opacity >= 1.0) == bright]
        if not members:
            continue
        fig.add_trace(go.Scatter3d(
            x=[positions[n.id][0] for n, _ in members],
            y=[positions[n.id][1] for n, _ in members],
            z=[positions[n.id][2] for n, _ in members],
            mode="markers+text",
            text=[
                "<br>".join(filter(None, [n.name if v.show_label else "", v.impact_label or ""]))
                for n, v in members
            ],
            hovertext=[_hover(n) for n, _ in members],
            hoverinfo="text",
            customdata=[n.id for n, _ in members],
            marker=dict(
                color=[v.color for _, v in members],
                size=[8 * v.scale * v.size for _, v in members],
            ),
            opacity=members[0][1].opacity,
            showlegend=False,
        ))

    fig.update_layout(
        title=title,
        height=height,
        paper_bgcolor=BG_COLOR,
        font=dict(color=TEXT_COLOR),
        scene=dict(
            xaxis=dict(_HIDDEN_AXIS, visible=False),
            yaxis=dict(_HIDDEN_AXIS, visible=False),
            zaxis=dict(_HIDDEN_AXIS, visible=False),
            bgcolor=BG_COLOR,
        ),
        margin=dict(l=0, r=0, t=40, b=0),
    )
    return fig


# =============================================================================
# Backtest
# =============================================================================

def create_backtest_figure(result: BacktestResult, title: str = "Simulated Backtest") -> go.Figure:
    """Portfolio vs benchmark value on top, drawdown below."""
    df = result.to_dataframe()
    fig = make_subplots(rows=2, cols=1, shared_xaxes=True, row_heights=[0.7, 0.3], vertical_spacing=0.05)

    fig.add_trace(go.Scatter(
        x=df["date"], y=df["portfolio_value"],
        mode="lines", name="Portfolio", line=dict(width=2, color="#F59E0B"),
    ), row=1, col=1)
    fig.add_trace(go.Scatter(
        x=df["date"], y=df["benchmark_value"],
        mode="lines", name="Benchmark", line=dict(width=1.5, color="#9CA3AF", dash="dot"),
    ), row=1, col=1)
    fig.add_trace(go.Scatter(
        x=df["date"], y=df["drawdown"],
        mode="lines", name="Drawdown (%)", fill="tozeroy", line=dict(width=1, color="#EF4444"),
    ), row=2, col=1)

    fig.update_layout(
        title=f"{title} ({result.mode})",
        height=500,
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=1.02),
        annotations=[dict(
            text=result.disclaimer, showarrow=False,
            xref="paper", yref="paper", x=0, y=-0.12, font=dict(size=10),
        )],
    )
    fig.update_yaxes(title_text="Value", row=1, col=1)
    fig.update_yaxes(title_text="Drawdown (%)", row=2, col=1)
    return fig
