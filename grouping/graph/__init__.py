"""Friendship graph: edges, union-find components, friend groups and splitting."""

from __future__ import annotations

from .clustering import (
    ClusteringResult,
    ClusteringStats,
    FriendGroupSummary,
    cluster_friend_groups,
    summarize_friend_group,
)
from .friend_graph import (
    build_friend_edges,
    build_friendship_graph,
    find_connected_components,
    group_cohesion,
)
from .splitter import split_friend_group
from .union_find import UnionFind

__all__ = [
    "ClusteringResult",
    "ClusteringStats",
    "FriendGroupSummary",
    "cluster_friend_groups",
    "summarize_friend_group",
    "build_friend_edges",
    "build_friendship_graph",
    "find_connected_components",
    "group_cohesion",
    "split_friend_group",
    "UnionFind",
]
