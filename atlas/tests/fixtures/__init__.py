"""
Fixtures package for atlas tests.
"""

from .graphs import (
    FIXTURE_DATA_DIR,
    causal,
    chain_graph,
    company,
    load_market_graph,
    macro,
)

__all__ = [
    'FIXTURE_DATA_DIR',
    'causal',
    'chain_graph',
    'company',
    'load_market_graph',
    'macro',
]
