# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the in-memory prerequisite graph."""

import pytest

from src.domains.prerequisite.graph import ChainLink, PrerequisiteGraph


@pytest.fixture
def linear_graph() -> PrerequisiteGraph:
    """c requires b, b requires a."""
    return PrerequisiteGraph.from_edges([
        ("e-cb", "c", "b"),
        ("e-ba", "b", "a"),
    ])


class TestEdges:
    """Tests for adding and removing edges."""

    def test_add_and_has_edge(self) -> None:
        graph = PrerequisiteGraph()
        graph.add("b", "a", "e1")

        assert graph.has_edge("b", "a")
        assert not graph.has_edge("a", "b")

    def test_remove_edge(self, linear_graph: PrerequisiteGraph) -> None:
        linear_graph.remove("c", "b")

        assert not linear_graph.has_edge("c", "b")
        assert linear_graph.has_edge("b", "a")
        assert linear_graph.chain("c") == {}

    def test_remove_missing_edge_is_noop(self, linear_graph: PrerequisiteGraph) -> None:
        linear_graph.remove("x", "y")
        linear_graph.remove("c", "a")

        assert linear_graph.has_edge("c", "b")
        assert linear_graph.has_edge("b", "a")


class TestCycleDetection:
    """Tests for closure and cycle checks."""

    def test_depends_on_direct_and_indirect(self, linear_graph: PrerequisiteGraph) -> None:
        assert linear_graph.depends_on("c", "b")
        assert linear_graph.depends_on("c", "a")
        assert not linear_graph.depends_on("a", "c")

    def test_would_create_cycle(self, linear_graph: PrerequisiteGraph) -> None:
        # a requiring c closes a -> c -> b -> a
        assert linear_graph.would_create_cycle("a", "c")
        assert linear_graph.would_create_cycle("b", "c")

    def test_no_cycle_for_unrelated_subject(self, linear_graph: PrerequisiteGraph) -> None:
        assert not linear_graph.would_create_cycle("c", "a")
        assert not linear_graph.would_create_cycle("d", "a")
        assert not linear_graph.would_create_cycle("a", "d")

    def test_unknown_subjects(self) -> None:
        graph = PrerequisiteGraph()

        assert not graph.would_create_cycle("x", "y")
        assert graph.closure("x") == set()

    def test_closure(self, linear_graph: PrerequisiteGraph) -> None:
        assert linear_graph.closure("c") == {"a", "b"}
        assert linear_graph.closure("a") == set()

    def test_terminates_on_cyclic_data(self) -> None:
        graph = PrerequisiteGraph.from_edges([
            ("e1", "a", "b"),
            ("e2", "b", "c"),
            ("e3", "c", "a"),
        ])

        assert graph.depends_on("a", "a")
        assert not graph.depends_on("a", "z")
        assert graph.closure("a") == {"a", "b", "c"}
        assert set(graph.chain("a")) == {"a", "b", "c"}

    def test_diamond_is_not_a_cycle(self) -> None:
        graph = PrerequisiteGraph.from_edges([
            ("e1", "d", "b"),
            ("e2", "d", "c"),
            ("e3", "b", "a"),
            ("e4", "c", "a"),
        ])

        assert not graph.would_create_cycle("d", "a")
        assert graph.would_create_cycle("a", "d")


class TestChain:
    """Tests for transitive chain construction."""

    def test_empty_chain(self) -> None:
        graph = PrerequisiteGraph.from_edges([("e1", "b", "a")])

        assert graph.chain("a") == {}
        assert graph.chain("unknown") == {}

    def test_levels_count_depth_from_root(self, linear_graph: PrerequisiteGraph) -> None:
        chain = linear_graph.chain("c")

        assert list(chain) == ["c", "b"]
        assert chain["c"] == [ChainLink(edge_id="e-cb", prerequisite_id="b", level=1)]
        assert chain["b"] == [ChainLink(edge_id="e-ba", prerequisite_id="a", level=2)]

    def test_leaf_subjects_are_not_keys(self, linear_graph: PrerequisiteGraph) -> None:
        assert "a" not in linear_graph.chain("c")

    def test_shared_prerequisite_expanded_once(self) -> None:
        # d -> b -> a and d -> c -> a, a -> z
        graph = PrerequisiteGraph.from_edges([
            ("e-db", "d", "b"),
            ("e-dc", "d", "c"),
            ("e-ba", "b", "a"),
            ("e-ca", "c", "a"),
            ("e-az", "a", "z"),
        ])

        chain = graph.chain("d")

        assert list(chain) == ["d", "b", "a", "c"]
        assert [link.prerequisite_id for link in chain["d"]] == ["b", "c"]
        # c still lists a, but a is only expanded under b
        assert chain["c"] == [ChainLink(edge_id="e-ca", prerequisite_id="a", level=2)]
        assert chain["a"] == [ChainLink(edge_id="e-az", prerequisite_id="z", level=3)]

    def test_level_follows_first_discovery_path(self) -> None:
        # r -> a -> x -> y and r -> b -> y; y found first through a at depth 3
        graph = PrerequisiteGraph.from_edges([
            ("e1", "r", "a"),
            ("e2", "r", "b"),
            ("e3", "a", "x"),
            ("e4", "x", "y"),
            ("e5", "b", "y"),
            ("e6", "y", "leaf"),
        ])

        chain = graph.chain("r")

        assert chain["y"] == [ChainLink(edge_id="e6", prerequisite_id="leaf", level=4)]
        assert chain["b"] == [ChainLink(edge_id="e5", prerequisite_id="y", level=2)]
