"""Tests for friend edges, connected components and the NetworkX friendship graph."""

from __future__ import annotations

import pytest

from grouping.graph.friend_graph import (
    build_friend_edges,
    build_friendship_graph,
    find_connected_components,
    get_graph_metrics,
    group_cohesion,
)
from tests.fixtures.grouping_factories import create_camper


class TestBuildFriendEdges:
    """Test edge construction from matched friend ids."""

    def test_mutual_requests_become_one_edge(self):
        """A asks for B and B asks for A: one mutual edge."""
        campers = [create_camper("a", friend_ids=["b"]), create_camper("b", friend_ids=["a"])]

        edges = build_friend_edges(campers)

        assert len(edges) == 1
        assert edges[0].is_mutual is True
        assert edges[0].canonical_pair == ("a", "b")

    def test_one_sided_request(self):
        """A one-way request is still an edge, not mutual."""
        campers = [create_camper("a", friend_ids=["b"]), create_camper("b")]

        edges = build_friend_edges(campers)

        assert [(e.from_camper_id, e.to_camper_id, e.is_mutual) for e in edges] == [("a", "b", False)]

    def test_ignores_self_and_unknown(self):
        """Requests for oneself or someone off the roster are dropped."""
        campers = [create_camper("a", friend_ids=["a", "ghost"])]

        assert build_friend_edges(campers) == []


class TestConnectedComponents:
    """Test union-find grouping of edges."""

    def test_transitive_chain_forms_one_group(self):
        """a-b, b-c chain lands in one component regardless of direction."""
        campers = [
            create_camper("a", friend_ids=["b"]),
            create_camper("b"),
            create_camper("c", friend_ids=["b"]),
            create_camper("d"),
        ]
        edges = build_friend_edges(campers)

        components = list(find_connected_components([c.athlete_id for c in campers], edges).values())

        assert sorted(map(sorted, components)) == [["a", "b", "c"], ["d"]]

    def test_isolated_campers_are_singletons(self):
        """No edges means every camper is alone."""
        components = find_connected_components(["a", "b"], [])

        assert list(components.values()) == [["a"], ["b"]]


class TestFriendshipGraph:
    """Test the NetworkX graph and cohesion metrics."""

    @pytest.fixture
    def triangle(self):
        campers = [
            create_camper("a", grade=2, friend_ids=["b", "c"]),
            create_camper("b", grade=3, friend_ids=["a"]),
            create_camper("c", grade=3),
        ]
        return campers, build_friendship_graph(campers, build_friend_edges(campers))

    def test_nodes_carry_attributes(self, triangle):
        """Nodes have grade and name; edges have is_mutual."""
        _, graph = triangle

        assert graph.nodes["a"]["grade"] == 2
        assert graph.nodes["a"]["name"] == "Campera Test"
        assert graph.edges["a", "b"]["is_mutual"] is True
        assert graph.edges["a", "c"]["is_mutual"] is False

    def test_group_cohesion(self, triangle):
        """Two of three possible edges, one of two mutual."""
        _, graph = triangle

        density, mutual_ratio = group_cohesion(graph, ["a", "b", "c"])

        assert density == pytest.approx(2 / 3)
        assert mutual_ratio == pytest.approx(0.5)

    def test_single_member_has_no_cohesion(self, triangle):
        """Fewer than two members gives zeros."""
        _, graph = triangle

        assert group_cohesion(graph, ["a"]) == (0.0, 0.0)

    def test_graph_metrics(self, triangle):
        """Overall metrics count nodes, edges and components."""
        _, graph = triangle

        metrics = get_graph_metrics(graph)

        assert metrics["node_count"] == 3
        assert metrics["edge_count"] == 2
        assert metrics["connected_components"] == 1
        assert metrics["average_degree"] == pytest.approx(4 / 3)
