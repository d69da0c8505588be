"""
AtlasRuntime - composition root.

Loads the static dataset once, builds the graph store and hands the same
store to every engine that reads it:
- Scenario Propagator
- Path Finder
- Backtest Engine (reads company financials)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from atlas.backtest.engine import BacktestEngine
from atlas.config import AtlasSettings, get_settings
from atlas.graph.loader import load_graph_data
from atlas.graph.models import GraphData
from atlas.graph.paths import PathFinder
from atlas.graph.scenario import ScenarioPropagator
from atlas.graph.store import GraphStore

logger = logging.getLogger(__name__)


@dataclass
class AtlasRuntime:
    """Engines sharing one immutable store."""
    settings: AtlasSettings
    store: GraphStore
    propagator: ScenarioPropagator
    path_finder: PathFinder
    backtest: BacktestEngine


def create_runtime(
    settings: Optional[AtlasSettings] = None,
    data: Optional[GraphData] = None,
) -> AtlasRuntime:
    """
    Build the runtime.

    Args:
        settings: Defaults to the cached process settings.
        data: Preloaded dataset; read from ``settings.data_dir`` when omitted.

    Raises:
        DatasetError: the dataset cannot be loaded.
    """
    settings = settings or get_settings()
    if data is None:
        data = load_graph_data(settings.data_dir)

    store = GraphStore(data, edge_order=settings.scenario_edge_order)
    runtime = AtlasRuntime(
        settings=settings,
        store=store,
        propagator=ScenarioPropagator(store, max_depth=settings.scenario_max_depth),
        path_finder=PathFinder(store),
        backtest=BacktestEngine(store, risk_free_rate=settings.risk_free_rate),
    )
    logger.info("AtlasRuntime ready: %s", store.stats().to_dict())
    return runtime
