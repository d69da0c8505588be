"""
Capital Atlas — causal map engine.

Graph store, scenario propagation, path finding, graph layout and the
simulated portfolio backtest that sit behind the macro causal-map dashboard.
"""

from .config import AtlasSettings, get_settings
from .runtime import AtlasRuntime, create_runtime

__version__ = "2.0.0"

__all__ = [
    'AtlasSettings',
    'get_settings',
    'AtlasRuntime',
    'create_runtime',
]
