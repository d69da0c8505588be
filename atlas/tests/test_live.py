"""
Test: live value overrides with static fallback.
"""

import logging

from atlas.graph.live import (
    LiveQuote,
    classify_change,
    resolve_company_price,
    resolve_macro_quote,
)
from atlas.graph.models import ChangeDirection


def _failing_provider(key):
    raise ConnectionError("upstream down")


class TestMacroQuote:
    def test_static_snapshot(self, market_store):
        quote = resolve_macro_quote(market_store.macro_by_id("fed_rate"))
        assert quote.value == "4.33"
        assert quote.change == "-0.25"
        assert quote.direction is ChangeDirection.DOWN
        assert not quote.is_live

    def test_missing_direction_is_neutral(self, market_store):
        quote = resolve_macro_quote(market_store.macro_by_id("wti"))
        assert quote.direction is ChangeDirection.NEUTRAL
        assert quote.change is None

    def test_provider_keyed_by_api_key(self, market_store):
        """Series id first, node id when the node has none."""
        asked = []

        def provider(key):
            asked.append(key)
            return LiveQuote(value="5.00", direction=ChangeDirection.UP, as_of_date="2025-03-01", source_tag="FRED")

        quote = resolve_macro_quote(market_store.macro_by_id("fed_rate"), provider)
        resolve_macro_quote(market_store.macro_by_id("kospi"), provider)
        assert asked == ["FEDFUNDS", "kospi"]
        assert quote.value == "5.00"
        assert quote.is_live

    def test_provider_returns_nothing(self, market_store):
        quote = resolve_macro_quote(market_store.macro_by_id("us10y"), lambda key: None)
        assert quote.value == "4.21"
        assert quote.source_tag == "static"

    def test_provider_failure_falls_back(self, market_store, caplog):
        """A raising provider is logged and the snapshot is used."""
        with caplog.at_level(logging.WARNING, logger="atlas.graph.live"):
            quote = resolve_macro_quote(market_store.macro_by_id("fed_rate"), _failing_provider)
        assert quote.value == "4.33"
        assert "FEDFUNDS" in caplog.text


class TestCompanyPrice:
    def test_valuation_price(self, market_store):
        assert resolve_company_price(market_store.company_by_id("samsung")).value == 71000

    def test_no_valuation(self, market_store):
        quote = resolve_company_price(market_store.company_by_id("hanmi"), _failing_provider)
        assert quote.value is None
        assert not quote.is_live

    def test_provider_keyed_by_ticker(self, market_store):
        quote = resolve_company_price(
            market_store.company_by_id("skhynix"),
            lambda key: LiveQuote(value=190000.0, source_tag="krx") if key == "000660" else None,
        )
        assert quote.value == 190000.0


class TestClassifyChange:
    def test_dead_band(self):
        assert classify_change(0.5) is ChangeDirection.UP
        assert classify_change(-0.5) is ChangeDirection.DOWN
        assert classify_change(0.01) is ChangeDirection.NEUTRAL
        assert classify_change(-0.005) is ChangeDirection.NEUTRAL

    def test_custom_band(self):
        assert classify_change(0.5, dead_band=1.0) is ChangeDirection.NEUTRAL
