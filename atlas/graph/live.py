"""
Live value overrides.

The core never fetches market data itself. Callers hand in a provider, a
callable returning a ``LiveQuote`` (or None), and these helpers prefer the
live quote over the static snapshot embedded in the node. A provider that
returns nothing or raises degrades to the snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .models import ChangeDirection, CompanyNode, MacroNode

logger = logging.getLogger(__name__)

STATIC_SOURCE = "static"
CHANGE_DEAD_BAND = 0.01


@dataclass(frozen=True)
class LiveQuote:
    value: Union[str, float, None]
    change: Optional[str] = None
    direction: ChangeDirection = ChangeDirection.NEUTRAL
    as_of_date: Optional[str] = None
    source_tag: str = STATIC_SOURCE

    @property
    def is_live(self) -> bool:
        return self.source_tag != STATIC_SOURCE


QuoteProvider = Callable[[str], Optional[LiveQuote]]


def classify_change(delta: float, dead_band: float = CHANGE_DEAD_BAND) -> ChangeDirection:
    """up / down outside ``±dead_band``, neutral inside it."""
    if delta > dead_band:
        return ChangeDirection.UP
    if delta < -dead_band:
        return ChangeDirection.DOWN
    return ChangeDirection.NEUTRAL


def _ask(provider: Optional[QuoteProvider], key: str) -> Optional[LiveQuote]:
    if provider is None:
        return None
    try:
        return provider(key)
    except Exception as e:
        logger.warning("Live quote for %s failed, using static snapshot: %s", key, e)
        return None


def static_macro_quote(node: MacroNode) -> LiveQuote:
    return LiveQuote(
        value=node.current_value,
        change=node.change,
        direction=node.change_direction or ChangeDirection.NEUTRAL,
        source_tag=STATIC_SOURCE,
    )


def resolve_macro_quote(node: MacroNode, provider: Optional[QuoteProvider] = None) -> LiveQuote:
    """
    Current value of a macro node.

    The provider is keyed by the node's ``api_key`` (its series id), falling
    back to the node id when the node has none.
    """
    quote = _ask(provider, node.api_key or node.id)
    return quote if quote is not None else static_macro_quote(node)


def resolve_company_price(company: CompanyNode, provider: Optional[QuoteProvider] = None) -> LiveQuote:
    """Current price of a company, keyed by ticker; static valuation price otherwise."""
    quote = _ask(provider, company.ticker)
    if quote is not None:
        return quote
    price = company.valuation.current_price if company.valuation is not None else None
    return LiveQuote(value=price, source_tag=STATIC_SOURCE)
