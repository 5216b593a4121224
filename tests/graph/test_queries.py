"""Tests for the dependency index and graph queries."""

import pytest

from codegraft.graph.index import Dependency, DependencyIndex
from codegraft.graph.models import DependencyEdge, EdgeKind
from codegraft.graph.queries import GraphQueryEngine
from codegraft.store import CodeGraphStore
from codegraft.temporal.ops import TemporalStateManager


def _engine(*pairs: tuple[str, str], kind: str = EdgeKind.CALLS) -> GraphQueryEngine:
    edges = [DependencyEdge(a, b, kind, f"src/lib.rs:{i}") for i, (a, b) in enumerate(pairs, 1)]
    return GraphQueryEngine(DependencyIndex.build(edges, revision=1))


@pytest.fixture
def tree() -> GraphQueryEngine:
    """A -> B -> C and B -> D."""
    return _engine(("A", "B"), ("B", "C"), ("B", "D"))


class TestDependencyIndex:
    def test_given_edges_when_built_then_forward_and_reverse_agree(self) -> None:
        # When
        index = DependencyIndex.build(
            [DependencyEdge("A", "B", EdgeKind.CALLS), DependencyEdge("A", "C", EdgeKind.USES)]
        )

        # Then
        assert index.forward["A"] == [
            Dependency("B", EdgeKind.CALLS),
            Dependency("C", EdgeKind.USES),
        ]
        assert index.reverse["B"] == [Dependency("A", EdgeKind.CALLS)]
        assert index.nodes() == {"A", "B", "C"}
        assert index.edge_count == 2

    def test_given_duplicate_edge_when_built_then_kept_once(self) -> None:
        edge = DependencyEdge("A", "B", EdgeKind.CALLS, "x:1")

        index = DependencyIndex.build([edge, edge])

        assert index.edge_count == 1
        assert index.successors("A") == ["B"]

    def test_given_same_pair_different_kinds_when_built_then_both_kept(self) -> None:
        index = DependencyIndex.build(
            [DependencyEdge("A", "B", EdgeKind.CALLS), DependencyEdge("A", "B", EdgeKind.USES)]
        )

        assert index.edge_count == 2


class TestOneHop:
    def test_given_tree_when_forward_then_exact_out_edges(self, tree: GraphQueryEngine) -> None:
        assert {d.identity for d in tree.forward_dependencies("B")} == {"C", "D"}

    def test_given_tree_when_reverse_then_exact_in_edges(self, tree: GraphQueryEngine) -> None:
        assert [d.identity for d in tree.reverse_dependencies("B")] == ["A"]

    def test_given_unknown_identity_when_queried_then_empty(self, tree: GraphQueryEngine) -> None:
        assert tree.forward_dependencies("Z") == []
        assert tree.reverse_dependencies("Z") == []
        assert tree.blast_radius("Z", 3) == {}
        assert tree.transitive_closure("Z") == set()


class TestBlastRadius:
    def test_given_one_hop_when_blast_then_direct_dependencies(
        self, tree: GraphQueryEngine
    ) -> None:
        assert tree.blast_radius("A", 1) == {"B": 1}

    def test_given_two_hops_when_blast_then_distances(self, tree: GraphQueryEngine) -> None:
        assert tree.blast_radius("A", 2) == {"B": 1, "C": 2, "D": 2}

    def test_given_zero_hops_when_blast_then_empty(self, tree: GraphQueryEngine) -> None:
        assert tree.blast_radius("A", 0) == {}

    def test_given_no_limit_when_blast_then_equals_closure(self, tree: GraphQueryEngine) -> None:
        assert set(tree.blast_radius("A", None)) == tree.transitive_closure("A")

    def test_given_hop_limits_when_increasing_then_results_nest(self) -> None:
        engine = _engine(("A", "B"), ("B", "C"), ("C", "D"), ("D", "E"), ("B", "E"))
        previous: set[str] = set()
        for hops in range(5):
            reached = set(engine.blast_radius("A", hops))
            assert previous <= reached
            previous = reached

    def test_given_two_paths_when_blast_then_minimum_distance(self) -> None:
        engine = _engine(("A", "B"), ("B", "C"), ("A", "C"))

        assert engine.blast_radius("A", 5) == {"B": 1, "C": 1}

    def test_given_tree_when_reverse_blast_then_who_is_affected(
        self, tree: GraphQueryEngine
    ) -> None:
        assert tree.reverse_blast_radius("D", 2) == {"B": 1, "A": 2}


class TestTransitiveClosure:
    def test_given_tree_when_closure_then_all_reachable(self, tree: GraphQueryEngine) -> None:
        assert tree.transitive_closure("A") == {"B", "C", "D"}

    def test_given_two_cycle_when_closure_then_terminates_without_origin(self) -> None:
        engine = _engine(("A", "B"), ("B", "A"))

        assert engine.transitive_closure("A") == {"B"}

    def test_given_self_loop_when_closure_then_origin_excluded(self) -> None:
        engine = _engine(("A", "A"), ("A", "B"))

        assert engine.transitive_closure("A") == {"B"}


class TestCycles:
    def test_given_acyclic_graph_when_find_cycles_then_none(self, tree: GraphQueryEngine) -> None:
        assert tree.find_cycles() == []

    def test_given_cycles_when_found_then_sorted_components(self) -> None:
        engine = _engine(("C", "A"), ("A", "B"), ("B", "C"), ("D", "D"), ("E", "A"))

        assert engine.find_cycles() == [["A", "B", "C"], ["D"]]


class TestStatistics:
    def test_given_graph_when_statistics_then_counts(self) -> None:
        edges = [
            DependencyEdge("A", "B", EdgeKind.CALLS),
            DependencyEdge("A", "C", EdgeKind.USES),
            DependencyEdge("B", "A", EdgeKind.CALLS),
        ]
        engine = GraphQueryEngine(DependencyIndex.build(edges))

        # When
        stats = engine.statistics()

        # Then
        assert stats.nodes == 3
        assert stats.edges == 3
        assert stats.edges_by_kind == {EdgeKind.CALLS: 2, EdgeKind.USES: 1}
        assert stats.max_out_degree == 2
        assert stats.max_in_degree == 1
        assert stats.cycles == 1
        assert stats.to_dict()["edges_by_kind"] == {"Calls": 2, "Uses": 1}

class TestStaleness:
    def test_given_index_from_store_when_store_unchanged_then_fresh(
        self, store: CodeGraphStore, entity_factory
    ) -> None:
        # Given
        add = entity_factory("add", start=2, end=4)
        helper = entity_factory("helper", start=6, end=8)
        edge = DependencyEdge(add.identity, helper.identity, EdgeKind.CALLS)
        store.replace_all([add, helper], [edge])

        # When
        index = DependencyIndex.from_store(store)

        # Then
        assert not index.is_stale(store)
        assert index.successors(add.identity) == [helper.identity]

    def test_given_index_when_edit_bumps_revision_then_stale(
        self, store: CodeGraphStore, entity_factory
    ) -> None:
        # Given
        add = entity_factory("add", start=2, end=4)
        store.replace_all([add], [])
        index = DependencyIndex.from_store(store)

        # When
        TemporalStateManager(store).edit(add.identity, "fn add() { 2 }")

        # Then
        assert index.is_stale(store)
        assert not DependencyIndex.from_store(store).is_stale(store)

    def test_given_index_without_revision_then_always_stale(self, store: CodeGraphStore) -> None:
        assert DependencyIndex.build([]).is_stale(store)
