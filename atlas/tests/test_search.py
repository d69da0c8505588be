"""
Test: node search and highlight filtering.
"""

from atlas.graph.models import NodeType
from atlas.graph.search import DEFAULT_LIMIT, match_node_ids, score_node, search_nodes


class TestSearchNodes:
    def test_best_match_first(self, market_store):
        hits = search_nodes(market_store, "oil")
        assert hits[0].id == "wti"

    def test_case_insensitive(self, market_store):
        assert search_nodes(market_store, "KOSPI")[0].id == "kospi"

    def test_type_filter(self, market_store):
        hits = search_nodes(market_store, "memory", node_type=NodeType.COMPANY)
        assert hits
        assert all(n.type == "company" for n in hits)

    def test_blank_query_lists_nodes(self, market_store):
        """A blank query lists nodes in dataset order."""
        assert [n.id for n in search_nodes(market_store, "   ", limit=3)] == ["fed_rate", "us10y", "usd_krw"]
        assert [n.id for n in search_nodes(market_store, "", node_type="sector")] == ["semis", "autos"]
        assert len(search_nodes(market_store, "")) == min(DEFAULT_LIMIT, 14)

    def test_limit(self, market_store):
        assert len(search_nodes(market_store, "memory", limit=1)) == 1

    def test_no_hits(self, market_store):
        assert search_nodes(market_store, "qqqqxxxx") == []

    def test_score_zero_below_threshold(self, market_store):
        node = market_store.node_by_id("sentiment")
        assert score_node(node, "qqqqxxxx").score == 0.0
        assert score_node(node, "consumer").score > 0.0

    def test_short_tag_not_matched_inside_longer_query(self, market_store):
        """The "fx" tag must not match queries that merely contain its letters."""
        node = market_store.node_by_id("usd_krw")
        assert score_node(node, "qqqqxxxx").score == 0.0
        assert score_node(node, "zzfxzz").score == 0.0
        assert score_node(node, "fx").score > 0.0
        assert "usd_krw" not in [n.id for n in search_nodes(market_store, "zzfxzz")]


class TestMatchNodeIds:
    def test_empty_query_means_no_filter(self, market_store):
        assert match_node_ids(market_store.nodes, "") is None
        assert match_node_ids(market_store.nodes, None) is None

    def test_name_and_tag_matches(self, market_store):
        """Matches name, English name or tags; description is not searched."""
        assert match_node_ids(market_store.nodes, "MEMORY") == {"samsung", "skhynix", "hbm"}

    def test_no_matches(self, market_store):
        assert match_node_ids(market_store.nodes, "zzz") == set()
