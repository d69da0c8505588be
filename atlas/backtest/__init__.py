"""
Simulated portfolio backtest.
"""

from .random_source import LCGRandom, RandomSource, SequenceRandom, box_muller
from .engine import (
    BacktestEngine,
    BacktestParams,
    BacktestResult,
    HoldingContribution,
    MonthlyPoint,
    PortfolioHolding,
    RebalanceFrequency,
    ReturnModel,
    DISCLAIMER,
    SIMULATED_MODE,
)

__all__ = [
    'LCGRandom',
    'RandomSource',
    'SequenceRandom',
    'box_muller',
    'BacktestEngine',
    'BacktestParams',
    'BacktestResult',
    'HoldingContribution',
    'MonthlyPoint',
    'PortfolioHolding',
    'RebalanceFrequency',
    'ReturnModel',
    'DISCLAIMER',
    'SIMULATED_MODE',
]
