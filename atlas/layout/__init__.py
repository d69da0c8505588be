"""
Layout engine: 2D force simulation with focus mode, 3D clustered layout,
viewport math, visual state and plotly figures.
"""

from .force2d import ForceConfig, ForceLayout2D, ForceSet, SimulationState, focus_layout, step
from .cluster3d import ClusterConfig, cluster_layout
from .viewport import ViewTransform, hit_test
from .visual import (
    EdgeVisual,
    EdgeVisual3D,
    NodeVisual,
    NodeVisual3D,
    ViewState,
    edge_visuals,
    edge_visuals_3d,
    neighbor_ids,
    node_visuals,
    node_visuals_3d,
)
from .figures import create_backtest_figure, create_graph_figure, create_graph_figure_3d

__all__ = [
    'ForceConfig',
    'ForceLayout2D',
    'ForceSet',
    'SimulationState',
    'focus_layout',
    'step',
    'ClusterConfig',
    'cluster_layout',
    'ViewTransform',
    'hit_test',
    'EdgeVisual',
    'EdgeVisual3D',
    'NodeVisual',
    'NodeVisual3D',
    'ViewState',
    'edge_visuals',
    'edge_visuals_3d',
    'neighbor_ids',
    'node_visuals',
    'node_visuals_3d',
    'create_backtest_figure',
    'create_graph_figure',
    'create_graph_figure_3d',
]
