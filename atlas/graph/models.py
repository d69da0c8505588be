"""
Graph data model.

Nodes come in four variants (macro, sector, theme, company) sharing one id
namespace; the variant is carried in the ``type`` tag and consumers switch on
it. Edges are directed and typed; only causal edges are authored, supply-chain
and membership edges are derived by the store.

Field names are snake_case in Python and camelCase on the wire (the static
JSON dataset), both spellings are accepted on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NodeType(str, Enum):
    MACRO = "macro"
    SECTOR = "sector"
    THEME = "theme"
    COMPANY = "company"


class MacroCategory(str, Enum):
    MONETARY_POLICY = "monetary_policy"
    CURRENCY = "currency"
    BOND = "bond"
    COMMODITY = "commodity"
    COMMODITY_ENERGY = "commodity_energy"
    COMMODITY_METAL = "commodity_metal"
    COMMODITY_AGRI = "commodity_agri"
    INDICATOR = "indicator"
    FLOW = "flow"
    INDEX = "index"


class Region(str, Enum):
    US = "US"
    KR = "KR"
    EU = "EU"
    JP = "JP"
    CN = "CN"
    GLOBAL = "Global"


class Market(str, Enum):
    KOSPI = "KOSPI"
    KOSDAQ = "KOSDAQ"
    NYSE = "NYSE"
    NASDAQ = "NASDAQ"
    LSE = "LSE"
    TSE = "TSE"
    ASX = "ASX"
    SSE = "SSE"
    UNLISTED = "UNLISTED"


class EdgeType(str, Enum):
    CAUSAL = "causal"
    SUPPLY_CHAIN = "supply_chain"
    BELONGS_TO = "belongs_to"


class EdgeDirection(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    COMPLEX = "complex"


class EdgeStrength(str, Enum):
    """Ordinal edge strength, strongest first."""
    STRONG = "strong"
    MEDIUM = "medium"
    WEAK = "weak"

    @property
    def rank(self) -> int:
        return _STRENGTH_ORDER.index(self)

    def weakened(self, steps: int) -> "EdgeStrength":
        """Step down the ordinal scale, clamped at ``WEAK``."""
        idx = min(self.rank + max(steps, 0), len(_STRENGTH_ORDER) - 1)
        return _STRENGTH_ORDER[idx]


_STRENGTH_ORDER = [EdgeStrength.STRONG, EdgeStrength.MEDIUM, EdgeStrength.WEAK]


class ChangeDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class AtlasModel(BaseModel):
    """Base model: camelCase aliases, populate by either name, frozen."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=False,
    )


# =============================================================================
# Nodes
# =============================================================================

class BaseNode(AtlasModel):
    id: str
    name: str
    name_en: str = ""
    description: str = ""
    tags: List[str] = Field(default_factory=list)


class MacroNode(BaseNode):
    type: Literal["macro"] = "macro"
    category: MacroCategory
    region: Region = Region.GLOBAL
    unit: str = ""
    current_value: Optional[str] = None
    change: Optional[str] = None
    change_direction: Optional[ChangeDirection] = None
    data_source: Optional[str] = None
    api_key: Optional[str] = None
    tracked_by: List[str] = Field(default_factory=list)


class SectorNode(BaseNode):
    type: Literal["sector"] = "sector"
    benchmark: Optional[str] = None
    company_ids: List[str] = Field(default_factory=list)


class ThemeTier(AtlasModel):
    """One stage of a theme's upstream→downstream value chain."""

    tier: int
    name: str
    name_en: str = ""
    nodes: List[str] = Field(default_factory=list)


class ThemeNode(BaseNode):
    type: Literal["theme"] = "theme"
    tiers: List[ThemeTier] = Field(default_factory=list)
    connected_macro_nodes: List[str] = Field(default_factory=list)


class CompanyFinancials(AtlasModel):
    market_cap: float = 0.0
    per: float = 0.0
    pbr: float = 0.0
    roe: float = 0.0
    operating_margin: float = 0.0
    debt_ratio: float = 0.0
    dividend_yield: float = 0.0
    return52w: float = 0.0


class CompanyValuation(AtlasModel):
    dcf_target: Optional[float] = None
    rim_target: Optional[float] = None
    current_price: float
    gap: Optional[str] = None
    thesis: Optional[str] = None
    last_updated: str = ""


class CompanyNode(BaseNode):
    type: Literal["company"] = "company"
    ticker: str
    market: Market
    sector_id: str
    theme_ids: List[str] = Field(default_factory=list)
    role: Optional[str] = None
    financials: CompanyFinancials = Field(default_factory=CompanyFinancials)
    valuation: Optional[CompanyValuation] = None


Node = Annotated[
    Union[MacroNode, SectorNode, ThemeNode, CompanyNode],
    Field(discriminator="type"),
]


# =============================================================================
# Edges
# =============================================================================

class Edge(AtlasModel):
    """
    Directed typed relation.

    ``direction``, ``strength``, ``time_lag`` and ``mechanism`` are meaningful
    on causal edges; derived edges fill ``strength`` and ``mechanism`` for
    display only.
    """

    id: str
    source: str
    target: str
    type: EdgeType
    direction: Optional[EdgeDirection] = None
    strength: Optional[EdgeStrength] = None
    time_lag: Optional[str] = None
    mechanism: Optional[str] = None
    exceptions: Optional[str] = None
    consensus_investors: List[str] = Field(default_factory=list)

    @property
    def endpoints(self) -> tuple:
        return (self.source, self.target)

    def other_end(self, node_id: str) -> Optional[str]:
        """Return the opposite endpoint, or None if the edge does not touch ``node_id``."""
        if self.source == node_id:
            return self.target
        if self.target == node_id:
            return self.source
        return None


class GraphData(AtlasModel):
    """The immutable dataset: every node variant plus the authored causal edges."""

    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


def node_type(node: BaseNode) -> NodeType:
    """Variant tag of a node as a ``NodeType`` member."""
    return NodeType(getattr(node, "type"))
