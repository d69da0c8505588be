"""
Simulated Portfolio Backtest

Estimates how a weighted basket of companies might have performed over a
range of years. No price history is consulted: each holding gets a synthetic
monthly return path generated from its current financial snapshot:

1. Drift from the trailing 52-week return (monthly = annual / 12)
2. Volatility from size, leverage and profitability
3. A deterministic cyclical term and a periodic drawdown shock
4. A normal shock from a per-holding seeded random source

The benchmark path is generated the same way with fixed broad-market
parameters. Results are therefore labelled ``mode="simulated"``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from atlas.graph.models import CompanyFinancials, CompanyNode
from atlas.graph.store import GraphStore
from .random_source import LCGRandom, RandomFactory, RandomSource, box_muller

logger = logging.getLogger(__name__)

SIMULATED_MODE = "simulated"
DISCLAIMER = (
    "Simulated estimate: return paths are generated from current financial "
    "ratios, not from historical prices. Not a historical backtest."
)
DEFAULT_RISK_FREE_RATE = 0.035
MONTHS_PER_YEAR = 12
SHOCK_MONTHS = 3

MONTHLY_COLUMNS = [
    "date",
    "portfolio_value",
    "benchmark_value",
    "monthly_return",
    "benchmark_return",
    "drawdown",
]


class RebalanceFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# =============================================================================
# Inputs
# =============================================================================

@dataclass
class PortfolioHolding:
    company_id: str
    weight: float  # relative; normalized by the engine


@dataclass
class BacktestParams:
    """
    Backtest request.

    ``rebalance_freq`` is recorded on the result; returns are generated at
    monthly granularity with constant weights either way.
    """
    holdings: List[PortfolioHolding]
    start_year: int
    end_year: int
    initial_capital: float = 10_000_000.0
    rebalance_freq: RebalanceFrequency = RebalanceFrequency.MONTHLY

    @property
    def months(self) -> int:
        return (self.end_year - self.start_year) * MONTHS_PER_YEAR

    @property
    def years(self) -> int:
        return self.end_year - self.start_year


@dataclass(frozen=True)
class ReturnModel:
    """Parameters of one synthetic monthly return path."""
    drift: float              # mean monthly return
    volatility: float         # monthly stdev of the random term
    cycle_frequency: float    # radians per month of the sine term
    cycle_amplitude: float
    shock_period: int         # months between drawdown shocks
    shock_size: float         # return added in each shock month

    def generate(self, months: int, source: RandomSource) -> np.ndarray:
        returns = np.empty(months, dtype=float)
        for i in range(months):
            z = box_muller(source)
            cycle = math.sin(i * self.cycle_frequency) * self.cycle_amplitude
            shock = self.shock_size if i % self.shock_period < SHOCK_MONTHS else 0.0
            returns[i] = self.drift + cycle + shock + self.volatility * z
        return returns


# Broad market index (~7.5% annual drift, ~15.5% annual vol)
BENCHMARK_MODEL = ReturnModel(
    drift=0.006,
    volatility=0.045,
    cycle_frequency=0.12,
    cycle_amplitude=0.015,
    shock_period=42,
    shock_size=-0.025,
)


def company_volatility(financials: CompanyFinancials) -> float:
    """Monthly volatility from size, leverage and profitability."""
    vol = 0.06
    if financials.market_cap > 100e12:   # large cap
        vol = 0.04
    if financials.market_cap < 5e12:     # small cap
        vol = 0.08
    if financials.debt_ratio > 150:
        vol *= 1.3
    if financials.roe > 20:
        vol *= 0.9
    return vol


def company_return_model(company: CompanyNode) -> ReturnModel:
    return ReturnModel(
        drift=company.financials.return52w / 100 / MONTHS_PER_YEAR,
        volatility=company_volatility(company.financials),
        cycle_frequency=0.15,
        cycle_amplitude=0.02,
        shock_period=36,
        shock_size=-0.03,
    )


def holding_seed(company_id: str, start_year: int) -> int:
    """Sum of the id's character codes plus the start year."""
    return sum(ord(ch) for ch in company_id) + start_year


def benchmark_seed(start_year: int) -> int:
    return start_year * MONTHS_PER_YEAR + 7777


# =============================================================================
# Results
# =============================================================================

@dataclass
class MonthlyPoint:
    date: str                 # YYYY-MM
    portfolio_value: float
    benchmark_value: float
    monthly_return: float     # fraction
    benchmark_return: float   # fraction
    drawdown: float           # percent below running peak, <= 0


@dataclass
class HoldingContribution:
    company_id: str
    name: str
    weight: float             # percent of portfolio
    contribution: float       # compounded return x weight, percent


@dataclass
class BacktestResult:
    """
    Backtest output. Headline metrics are percentages, the Sharpe ratio is a
    plain ratio.
    """
    monthly_data: List[MonthlyPoint] = field(default_factory=list)
    total_return: float = 0.0
    cagr: float = 0.0
    max_drawdown: float = 0.0
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    benchmark_total_return: float = 0.0
    benchmark_cagr: float = 0.0
    holdings: List[HoldingContribution] = field(default_factory=list)
    rebalance_freq: RebalanceFrequency = RebalanceFrequency.MONTHLY
    mode: str = SIMULATED_MODE
    disclaimer: str = DISCLAIMER

    @property
    def is_empty(self) -> bool:
        return not self.monthly_data

    @property
    def final_value(self) -> Optional[float]:
        return self.monthly_data[-1].portfolio_value if self.monthly_data else None

    def to_dataframe(self) -> pd.DataFrame:
        """Monthly series, one row per month."""
        if not self.monthly_data:
            return pd.DataFrame(columns=MONTHLY_COLUMNS)
        return pd.DataFrame([asdict(p) for p in self.monthly_data], columns=MONTHLY_COLUMNS)

    def to_dict(self) -> Dict:
        out = asdict(self)
        out["rebalance_freq"] = self.rebalance_freq.value
        return out


# =============================================================================
# Engine
# =============================================================================

class BacktestEngine:
    """
    Simulated backtest over companies from the graph store.

    Args:
        store: Source of company nodes; optional when companies are passed
            to ``run`` directly.
        risk_free_rate: Annual rate subtracted from CAGR in the Sharpe ratio.
        random_factory: Builds a random source from an integer seed.
    """

    def __init__(
        self,
        store: Optional[GraphStore] = None,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        random_factory: RandomFactory = LCGRandom,
    ):
        self.store = store
        self.risk_free_rate = risk_free_rate
        self.random_factory = random_factory

    def _company_index(self, companies: Optional[Iterable[CompanyNode]]) -> Dict[str, CompanyNode]:
        if companies is None:
            companies = self.store.company_nodes if self.store is not None else []
        return {c.id: c for c in companies}

    def run(
        self,
        params: BacktestParams,
        companies: Optional[Iterable[CompanyNode]] = None,
    ) -> BacktestResult:
        """
        Run a backtest.

        Zero holdings or a non-positive year range give an empty result.
        Holdings whose company is unknown are skipped; their weight still
        counts toward the normalizing total.

        Raises:
            ValueError: If ``initial_capital`` is not positive. Unlike an
                empty portfolio there is no empty result it could stand for.
        """
        rebalance = RebalanceFrequency(params.rebalance_freq)
        months = params.months
        if months <= 0 or not params.holdings:
            return BacktestResult(rebalance_freq=rebalance)
        if params.initial_capital <= 0:
            raise ValueError("initial_capital must be positive")

        index = self._company_index(companies)
        total_weight = sum(h.weight for h in params.holdings)

        resolved: List[CompanyNode] = []
        weights: List[float] = []
        paths: List[np.ndarray] = []
        for holding in params.holdings:
            company = index.get(holding.company_id)
            if company is None:
                logger.warning("Backtest: unknown company %s, skipping", holding.company_id)
                continue
            source = self.random_factory(holding_seed(holding.company_id, params.start_year))
            resolved.append(company)
            weights.append(holding.weight / total_weight if total_weight > 0 else 0.0)
            paths.append(company_return_model(company).generate(months, source))

        if paths:
            portfolio_returns = np.asarray(weights) @ np.vstack(paths)
        else:
            portfolio_returns = np.zeros(months)
        benchmark_returns = BENCHMARK_MODEL.generate(
            months, self.random_factory(benchmark_seed(params.start_year))
        )

        capital = float(params.initial_capital)
        portfolio_values = capital * np.cumprod(1.0 + portfolio_returns)
        benchmark_values = capital * np.cumprod(1.0 + benchmark_returns)
        peaks = np.maximum(np.maximum.accumulate(portfolio_values), capital)
        drawdowns = (portfolio_values - peaks) / peaks * 100

        monthly = [
            MonthlyPoint(
                date=f"{params.start_year + m // MONTHS_PER_YEAR}-{m % MONTHS_PER_YEAR + 1:02d}",
                portfolio_value=float(portfolio_values[m]),
                benchmark_value=float(benchmark_values[m]),
                monthly_return=float(portfolio_returns[m]),
                benchmark_return=float(benchmark_returns[m]),
                drawdown=float(drawdowns[m]),
            )
            for m in range(months)
        ]

        final_value = float(portfolio_values[-1])
        final_benchmark = float(benchmark_values[-1])
        cagr = _annualize(final_value / capital, params.years)
        annual_vol = _annual_volatility(portfolio_returns)
        sharpe = (cagr - self.risk_free_rate) / annual_vol if annual_vol > 0 else 0.0

        contributions = [
            HoldingContribution(
                company_id=company.id,
                name=company.name,
                weight=weight * 100,
                contribution=(float(np.prod(1.0 + path)) - 1.0) * weight * 100,
            )
            for company, weight, path in zip(resolved, weights, paths)
        ]

        logger.debug(
            "Backtest %d-%d: %d/%d holdings, %d months",
            params.start_year, params.end_year, len(resolved), len(params.holdings), months,
        )
        return BacktestResult(
            monthly_data=monthly,
            total_return=(final_value - capital) / capital * 100,
            cagr=cagr * 100,
            max_drawdown=float(drawdowns.min()),
            volatility=annual_vol * 100,
            sharpe_ratio=sharpe,
            benchmark_total_return=(final_benchmark - capital) / capital * 100,
            benchmark_cagr=_annualize(final_benchmark / capital, params.years) * 100,
            holdings=contributions,
            rebalance_freq=rebalance,
        )


def _annualize(growth: float, years: int) -> float:
    """Geometric annual rate for a total growth factor over ``years``."""
    if years <= 0:
        return 0.0
    if growth <= 0:
        return -1.0
    return growth ** (1.0 / years) - 1.0


def _annual_volatility(monthly_returns: np.ndarray) -> float:
    """Sample stdev of monthly returns scaled by sqrt(12); 0 below two months."""
    if monthly_returns.size < 2:
        return 0.0
    return float(np.std(monthly_returns, ddof=1) * math.sqrt(MONTHS_PER_YEAR))
