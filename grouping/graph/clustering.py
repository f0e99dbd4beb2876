"""
Friend group clustering.

Connected components of the friendship graph become friend groups. Each group is
checked against the size and grade-spread limits so placement knows up front
which groups can stay together and which will have to be split.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from ..config.types import DEFAULT_GROUPING_CONFIG, GroupingConfig
from ..models import FriendGroup, StandardizedCamper
from ..standardize.grades import format_grade_range
from .friend_graph import (
    build_friend_edges,
    build_friendship_graph,
    find_connected_components,
    get_graph_metrics,
    group_cohesion,
)

logger = logging.getLogger(__name__)


@dataclass
class ClusteringStats:
    total_friend_groups: int = 0
    largest_group_size: int = 0
    groups_exceeding_size: int = 0
    groups_exceeding_grade: int = 0
    solo_camper_count: int = 0
    mutual_edge_count: int = 0
    graph_metrics: dict[str, Any] = field(default_factory=dict)


@dataclass
class ClusteringResult:
    """Friend groups (largest first), solo campers, warnings and stats."""

    friend_groups: list[FriendGroup] = field(default_factory=list)
    solo_campers: list[StandardizedCamper] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: ClusteringStats = field(default_factory=ClusteringStats)


@dataclass
class FriendGroupSummary:
    """Display summary of a friend group."""

    member_names: list[str]
    grade_range: str
    status_label: str
    status_color: Literal["green", "yellow", "red"]


def placement_notes_for(member_count: int, min_grade: int, max_grade: int, config: GroupingConfig) -> list[str]:
    """Explain which limits a friend group breaks, if any."""
    notes: list[str] = []
    if member_count > config.max_group_size:
        notes.append(
            f"Friend group has {member_count} members, exceeding the maximum group size of "
            f"{config.max_group_size}. This group will need to be split."
        )

    spread = max_grade - min_grade
    if spread > config.max_grade_spread:
        notes.append(
            f"Friend group spans grades {format_grade_range(min_grade, max_grade)} ({spread} grade spread), "
            f"exceeding the maximum spread of {config.max_grade_spread}. "
            "Some friends may need to be separated to maintain grade proximity."
        )
    return notes


def cluster_friend_groups(
    campers: list[StandardizedCamper],
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
) -> ClusteringResult:
    """Cluster campers into friend groups.

    Stamps ``friend_group_id`` onto every camper passed in (None for solo
    campers). Nothing else about the campers is modified.

    Args:
        campers: Standardized campers with matched friend ids
        config: Grouping configuration (size and grade-spread limits)

    Returns:
        ClusteringResult with friend groups sorted largest first
    """
    camper_map = {c.athlete_id: c for c in campers}
    edges = build_friend_edges(campers)
    components = find_connected_components(camper_map.keys(), edges)
    graph = build_friendship_graph(campers, edges)

    result = ClusteringResult()
    stats = result.stats
    group_number = 1

    for member_ids in components.values():
        if len(member_ids) == 1:
            camper = camper_map[member_ids[0]]
            camper.friend_group_id = None
            result.solo_campers.append(camper)
            continue

        grades = [camper_map[m].grade_validated for m in member_ids]
        min_grade, max_grade = min(grades), max(grades)
        notes = placement_notes_for(len(member_ids), min_grade, max_grade, config)
        density, mutual_ratio = group_cohesion(graph, member_ids)

        friend_group = FriendGroup(
            id=f"fg-{group_number}",
            group_number=group_number,
            member_ids=member_ids,
            min_grade=min_grade,
            max_grade=max_grade,
            exceeds_size=len(member_ids) > config.max_group_size,
            exceeds_grade_spread=(max_grade - min_grade) > config.max_grade_spread,
            density=density,
            mutual_ratio=mutual_ratio,
            placement_notes=notes,
        )
        result.friend_groups.append(friend_group)

        stats.largest_group_size = max(stats.largest_group_size, friend_group.member_count)
        if friend_group.exceeds_size:
            stats.groups_exceeding_size += 1
        if friend_group.exceeds_grade_spread:
            stats.groups_exceeding_grade += 1

        for note in notes:
            result.warnings.append(f"Friend Group #{group_number}: {note}")

        for member_id in member_ids:
            camper_map[member_id].friend_group_id = friend_group.id

        group_number += 1

    # Placement priority: largest first (stable, so discovery order breaks ties)
    result.friend_groups.sort(key=lambda fg: fg.member_count, reverse=True)

    stats.total_friend_groups = len(result.friend_groups)
    stats.solo_camper_count = len(result.solo_campers)
    stats.mutual_edge_count = sum(e.is_mutual for e in edges)
    stats.graph_metrics = get_graph_metrics(graph)

    logger.info(
        f"Clustered {len(campers)} campers into {stats.total_friend_groups} friend groups "
        f"and {stats.solo_camper_count} solo campers "
        f"(largest={stats.largest_group_size}, oversized={stats.groups_exceeding_size}, "
        f"wide grade spread={stats.groups_exceeding_grade})"
    )
    return result


def summarize_friend_group(
    friend_group: FriendGroup,
    camper_lookup: dict[str, StandardizedCamper],
) -> FriendGroupSummary:
    """Names, grade range and a traffic-light status for display."""
    member_names = [camper_lookup[m].full_name for m in friend_group.member_ids if m in camper_lookup]
    grade_range = format_grade_range(friend_group.min_grade, friend_group.max_grade)

    if friend_group.can_be_placed_intact:
        return FriendGroupSummary(member_names, grade_range, "Can be placed together", "green")
    if friend_group.exceeds_size and friend_group.exceeds_grade_spread:
        return FriendGroupSummary(member_names, grade_range, "Too large and spans too many grades", "red")
    if friend_group.exceeds_size:
        return FriendGroupSummary(member_names, grade_range, "Too large - will be split", "yellow")
    return FriendGroupSummary(member_names, grade_range, "Spans too many grades", "yellow")
