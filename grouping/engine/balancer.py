"""Best-effort size balancing after placement."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

from ..config.types import GroupingConfig
from ..models import GroupAssignment, StandardizedCamper
from .scoring import would_violate_grade_constraint
from .state import GroupState

logger = logging.getLogger(__name__)

BALANCED_SUFFIX = " (balanced)"


def balance_groups(
    groups: list[GroupState],
    camper_lookup: Mapping[str, StandardizedCamper],
    config: GroupingConfig,
    assignments: dict[str, GroupAssignment],
    locked_ids: set[str],
) -> int:
    """Move unlocked campers from oversized groups into undersized ones.

    Target size is ceil(total campers / number of groups). Groups are visited
    largest first (order fixed before any move). For each camper in a group
    above target, the first group that is below target, below capacity and
    would keep its grade spread within the limit receives the camper; there is
    no scoring between candidate destinations. Locked campers (friend group
    members and preserved overrides) never move.

    Moves never push a destination past the grade-spread limit, and the source
    group's spread can only shrink, so balancing never introduces a new
    grade-spread violation. Residual imbalance is left in place when no move
    is possible.

    Args:
        groups: Run state, modified in place
        camper_lookup: Camper records by athlete id
        config: Grouping configuration
        assignments: Assignment records by camper id, updated for moved campers
        locked_ids: Campers that must not be moved

    Returns:
        Number of moves made
    """
    total = sum(g.size for g in groups)
    if not groups or total == 0:
        return 0

    target_size = math.ceil(total / len(groups))
    ordered = sorted(groups, key=lambda g: g.size, reverse=True)
    moves = 0

    for large_group in ordered:
        if large_group.size <= target_size:
            continue

        for camper_id in large_group.camper_ids:
            if camper_id in locked_ids:
                continue
            grade = camper_lookup[camper_id].grade_validated

            for small_group in ordered:
                if small_group is large_group:
                    continue
                if small_group.size >= target_size or small_group.size >= config.max_group_size:
                    continue
                if would_violate_grade_constraint(small_group, grade, config.max_grade_spread):
                    continue

                large_group.remove(camper_id)
                small_group.add(camper_id, grade)
                moves += 1

                assignment = assignments[camper_id]
                assignments[camper_id] = assignment.model_copy(
                    update={
                        "group_id": small_group.id,
                        "group_number": small_group.group_number,
                        "reason": assignment.reason + BALANCED_SUFFIX,
                    }
                )
                logger.debug(f"Balanced {camper_id}: {large_group.id} -> {small_group.id}")
                break

            if large_group.size <= target_size:
                break

    logger.info(f"Balancing made {moves} move(s) toward target size {target_size}")
    return moves
