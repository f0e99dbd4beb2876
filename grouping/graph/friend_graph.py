"""
Friendship graph construction.

Matched friend requests become edges. Edges are deduplicated into canonical
unordered pairs (a mutual request is one edge flagged ``is_mutual``), then fed
to union-find for components and to a NetworkX graph for cohesion metrics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from ..models import FriendEdge, StandardizedCamper
from .union_find import UnionFind

logger = logging.getLogger(__name__)


def build_friend_edges(campers: list[StandardizedCamper]) -> list[FriendEdge]:
    """Build deduplicated friend edges from each camper's matched friend ids.

    Requests pointing at someone not on the roster, or at the requester
    themselves, are ignored. The first direction seen is kept as the edge's
    from/to orientation.
    """
    roster_ids = {c.athlete_id for c in campers}
    requested: set[tuple[str, str]] = set()
    for camper in campers:
        for friend_id in camper.matched_friend_ids:
            requested.add((camper.athlete_id, friend_id))

    edges: list[FriendEdge] = []
    seen_pairs: set[tuple[str, str]] = set()
    for camper in campers:
        for friend_id in camper.matched_friend_ids:
            if friend_id == camper.athlete_id or friend_id not in roster_ids:
                continue

            edge = FriendEdge(
                from_camper_id=camper.athlete_id,
                to_camper_id=friend_id,
                is_mutual=(friend_id, camper.athlete_id) in requested,
            )
            if edge.canonical_pair in seen_pairs:
                continue
            seen_pairs.add(edge.canonical_pair)
            edges.append(edge)

    logger.debug(
        f"Built {len(edges)} friend edges ({sum(e.is_mutual for e in edges)} mutual) from {len(campers)} campers"
    )
    return edges


def find_connected_components(camper_ids: Iterable[str], edges: Iterable[FriendEdge]) -> dict[str, list[str]]:
    """Connected components over the full camper universe.

    Every camper appears in exactly one component; campers with no edges are
    singleton components. Direction and mutuality do not matter.

    Returns:
        Mapping of component root id -> member ids
    """
    uf = UnionFind(camper_ids)
    for edge in edges:
        uf.add(edge.from_camper_id)
        uf.add(edge.to_camper_id)
        uf.union(edge.from_camper_id, edge.to_camper_id)
    return uf.components()


def build_friendship_graph(campers: list[StandardizedCamper], edges: list[FriendEdge]) -> nx.Graph:
    """Materialize the friendship graph for analysis.

    Nodes carry ``grade`` and ``name``; edges carry ``is_mutual``.
    """
    graph = nx.Graph()
    for camper in campers:
        graph.add_node(camper.athlete_id, grade=camper.grade_validated, name=camper.full_name)
    for edge in edges:
        graph.add_edge(edge.from_camper_id, edge.to_camper_id, is_mutual=edge.is_mutual)
    return graph


def group_cohesion(graph: nx.Graph, member_ids: list[str]) -> tuple[float, float]:
    """Edge density and mutual-edge ratio inside one friend group.

    Args:
        graph: Friendship graph from build_friendship_graph()
        member_ids: Members of the group

    Returns:
        (density, mutual_ratio), both in [0, 1]
    """
    subgraph = graph.subgraph(member_ids)
    if subgraph.number_of_nodes() < 2:
        return 0.0, 0.0

    density = nx.density(subgraph)
    edge_count = subgraph.number_of_edges()
    if edge_count == 0:
        return density, 0.0

    mutual_edges = sum(1 for _, _, is_mutual in subgraph.edges(data="is_mutual") if is_mutual)
    return density, mutual_edges / edge_count


def get_graph_metrics(graph: nx.Graph) -> dict[str, float | int]:
    """Overall graph metrics for clustering stats."""
    if graph.number_of_nodes() == 0:
        return {
            "node_count": 0,
            "edge_count": 0,
            "density": 0.0,
            "connected_components": 0,
            "average_degree": 0.0,
        }

    return {
        "node_count": graph.number_of_nodes(),
        "edge_count": graph.number_of_edges(),
        "density": nx.density(graph),
        "connected_components": nx.number_connected_components(graph),
        "average_degree": sum(d for _, d in graph.degree()) / graph.number_of_nodes(),
    }
