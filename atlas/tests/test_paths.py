"""
Test: Path Finder
"""

from atlas.graph.models import EdgeType
from atlas.graph.paths import GraphPath, PathFinder


class TestFindPath:
    def test_chain(self, chain_store):
        path = PathFinder(chain_store).find_path("A", "C")
        assert path.nodes == ["A", "B", "C"]
        assert [e.id for e in path.edges] == ["A-B", "B-C"]
        assert path.hops == 2

    def test_against_edge_direction(self, chain_store):
        """Edges are walked both ways."""
        path = PathFinder(chain_store).find_path("C", "A")
        assert path.nodes == ["C", "B", "A"]
        assert [e.id for e in path.edges] == ["B-C", "A-B"]

    def test_disconnected(self, chain_store):
        assert PathFinder(chain_store).find_path("A", "Z") is None

    def test_unknown_ids(self, chain_store):
        finder = PathFinder(chain_store)
        assert finder.find_path("A", "missing") is None
        assert finder.find_path("missing", "A") is None
        assert finder.find_path("missing", "missing") is None

    def test_same_node(self, chain_store):
        path = PathFinder(chain_store).find_path("Z", "Z")
        assert path == GraphPath(nodes=["Z"], edges=[])
        assert path.hops == 0


class TestMarketPaths:
    def test_shortest_uses_reverse_edge(self, market_store):
        """fed_rate reaches kospi in one hop through the kospi -> fed_rate edge."""
        path = PathFinder(market_store).find_path("fed_rate", "kospi")
        assert path.nodes == ["fed_rate", "kospi"]
        assert [e.id for e in path.edges] == ["e_kospi_fed"]

    def test_mixed_edge_types(self, market_store):
        """Supply-chain and membership edges count for reachability."""
        path = PathFinder(market_store).find_path("hanmi", "semis")
        assert path.nodes == ["hanmi", "skhynix", "semis"]
        assert [e.type for e in path.edges] == [EdgeType.SUPPLY_CHAIN, EdgeType.BELONGS_TO]

    def test_edges_join_consecutive_nodes(self, market_store):
        path = PathFinder(market_store).find_path("samsung", "skhynix")
        assert path.nodes == ["samsung", "hanmi", "skhynix"]
        for a, b, edge in zip(path.nodes, path.nodes[1:], path.edges):
            assert {a, b} == set(edge.endpoints)

    def test_no_bridge_between_islands(self, market_store):
        """The macro cluster and the company cluster share no edge."""
        finder = PathFinder(market_store)
        assert finder.find_path("fed_rate", "hyundai") is None
        assert finder.find_path("sentiment", "kospi") is None

    def test_to_dict_uses_wire_names(self, market_store):
        data = PathFinder(market_store).find_path("us10y", "kospi").to_dict()
        assert data["nodes"] == ["us10y", "kospi"]
        assert data["edges"][0]["timeLag"] == "1-2 months"
        assert data["edges"][0]["type"] == "causal"

    def test_adjacency_built_once(self, market_store):
        finder = PathFinder(market_store)
        assert finder.adjacency is finder.adjacency
        assert len(finder.adjacency["kospi"]) == 4
