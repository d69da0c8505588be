"""
Test: Scenario Propagation

Direction composition, strength attenuation, first-visit semantics and
depth bounds.
"""

import pytest

from atlas.graph.models import EdgeDirection, EdgeStrength, GraphData
from atlas.graph.scenario import (
    ImpactDirection,
    ScenarioAction,
    ScenarioPropagator,
    attenuate,
    compose_direction,
    scenario_direction_map,
    sort_by_strength,
    summarize,
)
from atlas.graph.store import GraphStore
from atlas.tests.fixtures import causal, macro


def _store(edges, extra_nodes=()):
    ids = []
    for e in edges:
        for nid in (e.source, e.target):
            if nid not in ids:
                ids.append(nid)
    ids.extend(n for n in extra_nodes if n not in ids)
    return GraphStore(GraphData(nodes=[macro(i) for i in ids], edges=edges))


class TestChainExample:
    def test_two_hop_chain(self, chain_store):
        """A -(+,strong)-> B -(-,medium)-> C: B up/strong at 1, C down/medium at 2."""
        results = ScenarioPropagator(chain_store).run("A", "increase", max_depth=2)
        by_id = {r.node_id: r for r in results}

        assert [r.node_id for r in results] == ["B", "C"]
        assert by_id["B"].direction is ImpactDirection.UP
        assert by_id["B"].strength is EdgeStrength.STRONG
        assert by_id["B"].depth == 1
        assert by_id["C"].direction is ImpactDirection.DOWN
        assert by_id["C"].strength.rank >= EdgeStrength.MEDIUM.rank
        assert by_id["C"].depth == 2

    def test_triggering_edge_metadata(self, chain_store):
        result = ScenarioPropagator(chain_store).run("A", ScenarioAction.INCREASE)[0]
        assert result.mechanism == "A moves B"
        assert result.time_lag == "1m"
        assert result.to_dict()["direction"] == "up"

    def test_decrease_flips_everything(self, chain_store):
        results = ScenarioPropagator(chain_store).run("A", "decrease")
        assert [r.direction for r in results] == [ImpactDirection.DOWN, ImpactDirection.UP]

    def test_source_never_in_results(self, market_store):
        """Cycles back to the source are ignored."""
        results = ScenarioPropagator(market_store).run("fed_rate", "increase")
        assert "fed_rate" not in {r.node_id for r in results}


class TestEmptyResults:
    def test_no_outgoing_edges(self, market_store):
        assert ScenarioPropagator(market_store).run("sentiment", "increase") == []

    def test_unknown_node(self, market_store):
        assert ScenarioPropagator(market_store).run("missing", "increase") == []

    def test_zero_depth(self, chain_store):
        assert ScenarioPropagator(chain_store).run("A", "increase", max_depth=0) == []

    def test_non_causal_edges_ignored(self, market_store):
        """Supply-chain and membership edges never carry a scenario."""
        assert ScenarioPropagator(market_store).run("hanmi", "increase") == []
        assert ScenarioPropagator(market_store).run("samsung", "increase") == []


class TestDirectionComposition:
    @pytest.mark.parametrize("first,second,expected", [
        (EdgeDirection.POSITIVE, EdgeDirection.POSITIVE, ImpactDirection.UP),
        (EdgeDirection.NEGATIVE, EdgeDirection.NEGATIVE, ImpactDirection.UP),
        (EdgeDirection.POSITIVE, EdgeDirection.NEGATIVE, ImpactDirection.DOWN),
        (EdgeDirection.NEGATIVE, EdgeDirection.POSITIVE, ImpactDirection.DOWN),
    ])
    def test_two_hop_law(self, first, second, expected):
        """Double inversion restores the stimulus, a single one flips it."""
        store = _store([causal("X", "Y", first), causal("Y", "W", second)])
        results = ScenarioPropagator(store).run("X", "increase")
        assert results[-1].node_id == "W"
        assert results[-1].direction is expected

    def test_complex_is_absorbing(self):
        """A complex edge turns its target and everything below it complex."""
        store = _store([
            causal("X", "Y", EdgeDirection.COMPLEX),
            causal("Y", "W", EdgeDirection.POSITIVE),
            causal("W", "V", EdgeDirection.NEGATIVE),
        ])
        results = ScenarioPropagator(store).run("X", "decrease")
        assert [r.direction for r in results] == [ImpactDirection.COMPLEX] * 3

    def test_missing_direction_is_complex(self):
        store = _store([causal("X", "Y", direction=None)])
        assert ScenarioPropagator(store).run("X", "increase")[0].direction is ImpactDirection.COMPLEX

    def test_compose_direction(self):
        assert compose_direction(ImpactDirection.DOWN, EdgeDirection.NEGATIVE) is ImpactDirection.UP
        assert compose_direction(ImpactDirection.COMPLEX, EdgeDirection.POSITIVE) is ImpactDirection.COMPLEX


class TestAttenuation:
    def test_long_chain_decays(self):
        """Strong edges all the way still weaken with depth, clamped at weak."""
        edges = [causal(a, b, strength=EdgeStrength.STRONG) for a, b in zip("PQRST", "QRSTU")]
        results = ScenarioPropagator(_store(edges), max_depth=5).run("P", "increase")
        assert [r.strength for r in results] == [
            EdgeStrength.STRONG,   # Q, depth 1
            EdgeStrength.STRONG,   # R, depth 2
            EdgeStrength.MEDIUM,   # S, depth 3
            EdgeStrength.WEAK,     # T, depth 4
            EdgeStrength.WEAK,     # U, depth 5
        ]

    def test_never_recovers(self):
        """A strong edge after a weak one stays weak."""
        store = _store([
            causal("X", "Y", strength=EdgeStrength.WEAK),
            causal("Y", "W", strength=EdgeStrength.STRONG),
        ])
        results = ScenarioPropagator(store).run("X", "increase")
        assert [r.strength for r in results] == [EdgeStrength.WEAK, EdgeStrength.WEAK]

    def test_monotonic_along_paths(self, market_store):
        """Every result is no stronger than the result it was reached from."""
        propagator = ScenarioPropagator(market_store, max_depth=3)
        for source in ("fed_rate", "us10y", "wti", "kospi"):
            results = propagator.run(source, "increase")
            by_id = {r.node_id: r for r in results}
            for r in results:
                parents = [
                    by_id[e.source] for e in market_store.causal_edges
                    if e.target == r.node_id and e.source in by_id and by_id[e.source].depth == r.depth - 1
                ]
                for parent in parents:
                    assert r.strength.rank >= parent.strength.rank

    def test_missing_strength_is_medium(self):
        store = _store([causal("X", "Y", strength=None)])
        assert ScenarioPropagator(store).run("X", "increase")[0].strength is EdgeStrength.MEDIUM

    def test_attenuate(self):
        assert attenuate(EdgeStrength.STRONG, EdgeStrength.STRONG, 0) is EdgeStrength.STRONG
        assert attenuate(EdgeStrength.STRONG, EdgeStrength.STRONG, 3) is EdgeStrength.WEAK
        assert attenuate(EdgeStrength.STRONG, EdgeStrength.MEDIUM, 1) is EdgeStrength.MEDIUM


class TestVisitation:
    def test_first_visit_wins(self, market_store):
        """kospi is reached via us10y first and keeps that annotation."""
        results = ScenarioPropagator(market_store).run("fed_rate", "increase")
        assert [r.node_id for r in results] == ["us10y", "usd_krw", "kospi"]
        kospi = results[-1]
        assert kospi.depth == 2
        assert kospi.direction is ImpactDirection.DOWN
        assert kospi.strength is EdgeStrength.MEDIUM
        assert kospi.mechanism.startswith("Higher discount rates")

    def test_no_duplicates(self, market_store):
        propagator = ScenarioPropagator(market_store, max_depth=5)
        for node in market_store.macro_nodes:
            ids = [r.node_id for r in propagator.run(node.id, "increase")]
            assert len(ids) == len(set(ids))

    def test_depth_bound(self):
        edges = [causal(a, b) for a, b in zip("PQRST", "QRSTU")]
        propagator = ScenarioPropagator(_store(edges))
        assert max(r.depth for r in propagator.run("P", "increase")) == 3
        assert [r.node_id for r in propagator.run("P", "increase", max_depth=1)] == ["Q"]

    def test_edge_id_order_breaks_ties(self):
        """With lexical ordering the lower edge id reaches a shared target first."""
        edges = [
            causal("X", "M", edge_id="b_xm"),
            causal("X", "N", EdgeDirection.NEGATIVE, edge_id="a_xn"),
            causal("M", "T", EdgeDirection.POSITIVE, edge_id="c_mt"),
            causal("N", "T", EdgeDirection.POSITIVE, edge_id="d_nt"),
        ]
        nodes = [macro(i) for i in ("X", "M", "N", "T")]
        dataset = GraphStore(GraphData(nodes=nodes, edges=edges))
        lexical = GraphStore(GraphData(nodes=nodes, edges=edges), edge_order="edge_id")

        t_dataset = ScenarioPropagator(dataset).run("X", "increase")[-1]
        t_lexical = ScenarioPropagator(lexical).run("X", "increase")[-1]
        assert t_dataset.node_id == t_lexical.node_id == "T"
        assert t_dataset.direction is ImpactDirection.UP
        assert t_lexical.direction is ImpactDirection.DOWN

    def test_deterministic(self, market_store):
        propagator = ScenarioPropagator(market_store)
        first = [r.to_dict() for r in propagator.run("fed_rate", "increase")]
        propagator.run("wti", "decrease")
        second = [r.to_dict() for r in propagator.run("fed_rate", "increase")]
        assert first == second


class TestArguments:
    def test_bad_action(self, chain_store):
        with pytest.raises(ValueError):
            ScenarioPropagator(chain_store).run("A", "sideways")

    def test_negative_depth(self, chain_store):
        with pytest.raises(ValueError):
            ScenarioPropagator(chain_store, max_depth=-1)
        with pytest.raises(ValueError):
            ScenarioPropagator(chain_store).run("A", "increase", max_depth=-2)


class TestHelpers:
    def test_summary_and_sorting(self, market_store):
        results = ScenarioPropagator(market_store).run("fed_rate", "increase")
        summary = summarize(results)
        assert (summary.total, summary.up, summary.down, summary.complex) == (3, 2, 1, 0)
        assert summary.strong == 1

        ordered = sort_by_strength(results)
        assert [r.strength for r in ordered] == [EdgeStrength.STRONG, EdgeStrength.MEDIUM, EdgeStrength.MEDIUM]
        assert [r.node_id for r in ordered] == ["us10y", "usd_krw", "kospi"]

    def test_direction_map(self, chain_store):
        results = ScenarioPropagator(chain_store).run("A", "increase")
        assert scenario_direction_map(results) == {"B": ImpactDirection.UP, "C": ImpactDirection.DOWN}
