"""
Test: 3D clustered layout.
"""

import math

import pytest

from atlas.graph.models import NodeType
from atlas.layout.cluster3d import ClusterConfig, cluster_layout, group_anchor
from atlas.tests.fixtures import causal, macro


def _distance(a, b):
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


class TestClusterLayout:
    def test_every_node_placed(self, market_store):
        positions = cluster_layout(market_store.nodes, market_store.causal_edges)
        assert set(positions) == {n.id for n in market_store.nodes}
        assert all(len(p) == 3 for p in positions.values())

    def test_seeded(self, market_store):
        a = cluster_layout(market_store.nodes, market_store.edges, seed=1)
        b = cluster_layout(market_store.nodes, market_store.edges, seed=1)
        c = cluster_layout(market_store.nodes, market_store.edges, seed=2)
        assert a == b
        assert a != c

    def test_ring_without_edges(self, market_store):
        """Six macro nodes on a ring of radius 0.6 * 6 around the origin."""
        positions = cluster_layout(market_store.macro_nodes, [])
        x, y, z = positions["fed_rate"]
        assert x == pytest.approx(3.6)
        assert z == pytest.approx(0.0)
        assert -1.5 <= y <= 1.5
        for node_id in ("us10y", "kospi", "sentiment"):
            px, _, pz = positions[node_id]
            assert math.hypot(px, pz) == pytest.approx(3.6)

    def test_groups_sit_around_anchors(self, market_store):
        config = ClusterConfig()
        positions = cluster_layout(market_store.nodes, [], config)
        radius = config.layout_radius(14)
        sx, sz = group_anchor(NodeType.SECTOR, radius)
        for sector in market_store.sector_nodes:
            px, _, pz = positions[sector.id]
            assert math.hypot(px - sx, pz - sz) == pytest.approx(min(radius * 0.5, 2 * 0.6))

    def test_springs_shorten_long_edges(self, market_store):
        nodes = market_store.nodes
        edge = [e for e in market_store.edges if e.id == "bt_hyundai_autos"]
        loose = cluster_layout(nodes, [], seed=5)
        pulled = cluster_layout(nodes, edge, seed=5)
        before = _distance(loose["hyundai"], loose["autos"])
        after = _distance(pulled["hyundai"], pulled["autos"])
        assert before > 4.0
        assert 4.0 <= after < before

    def test_dangling_edges_ignored(self):
        nodes = [macro("a"), macro("b")]
        positions = cluster_layout(nodes, [causal("a", "ghost")])
        assert set(positions) == {"a", "b"}

    def test_empty(self):
        assert cluster_layout([], []) == {}


class TestClusterConfig:
    def test_layout_radius(self):
        config = ClusterConfig()
        assert config.layout_radius(14) == 8.0
        assert config.layout_radius(50) == pytest.approx(20.0)

    def test_anchors(self):
        assert group_anchor(NodeType.MACRO, 10.0) == (0.0, 0.0)
        assert group_anchor(NodeType.SECTOR, 10.0) == pytest.approx((6.0, 3.0))
        assert group_anchor(NodeType.THEME, 10.0) == pytest.approx((-6.0, 3.0))
        assert group_anchor(NodeType.COMPANY, 10.0) == pytest.approx((0.0, -6.0))
