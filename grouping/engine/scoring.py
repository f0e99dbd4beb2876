"""
Placement scoring functions. Lower scores are better.

Penalty weights are a documented baseline, not a proven optimum. What matters
is their ordering: hard-constraint penalties dwarf the soft tie-breakers, so a
placement that breaks a limit only wins when every alternative breaks one too.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar

from ..config.types import GroupingConfig
from ..logging_config import TRACE

logger = logging.getLogger(__name__)

# Friend group placement
FRIEND_GROUP_SIZE_OVERFLOW_PENALTY = 1000  # per camper over the size limit
FRIEND_GROUP_SPREAD_OVERFLOW_PENALTY = 500  # per grade over the spread limit
SPREAD_INCREASE_WEIGHT = 10  # per grade the group's spread grows
INTACT_PLACEMENT_THRESHOLD = 1000  # at or above this, intact placement is effectively broken

# Solo camper placement
SOLO_FULL_GROUP_PENALTY = 10000
SOLO_SPREAD_OVERFLOW_PENALTY = 5000
SOLO_GRADE_DISTANCE_WEIGHT = 20
SOLO_SIZE_DEVIATION_WEIGHT = 5
GOOD_FIT_THRESHOLD = 100  # below this a solo placement counts as a good fit

# Late registration
LATE_FULL_GROUP_PENALTY = 1000
LATE_SPREAD_OVERFLOW_PENALTY = 500
LATE_MIDPOINT_WEIGHT = 10


class GroupShape(Protocol):
    """Anything with a size and grade bounds (run state or a finalized group)."""

    @property
    def size(self) -> int: ...

    @property
    def min_grade(self) -> int | None: ...

    @property
    def max_grade(self) -> int | None: ...


G = TypeVar("G", bound=GroupShape)


def merged_bounds(group: GroupShape, min_grade: int, max_grade: int) -> tuple[int, int]:
    """Grade bounds of the group after adding campers spanning [min_grade, max_grade]."""
    if group.min_grade is None or group.max_grade is None:
        return min_grade, max_grade
    return min(group.min_grade, min_grade), max(group.max_grade, max_grade)


def would_violate_grade_constraint(group: GroupShape, grade: int, max_spread: int) -> bool:
    """Whether adding one camper of ``grade`` pushes the group past ``max_spread``.

    Empty groups never violate.
    """
    if group.min_grade is None or group.max_grade is None:
        return False
    new_min, new_max = merged_bounds(group, grade, grade)
    return new_max - new_min > max_spread


def score_friend_group_placement(
    group: GroupShape,
    member_count: int,
    min_grade: int,
    max_grade: int,
    config: GroupingConfig,
) -> float:
    """Score placing a whole friend group (or subgroup) into one group.

    Components:
        +1000 per camper the group would end up over the size limit
        +500 per grade the group would end up over the spread limit
        +10 per grade the group's existing spread grows (non-empty groups only)
        +current group size, a mild preference for emptier groups
    """
    score = 0.0

    new_size = group.size + member_count
    if new_size > config.max_group_size:
        score += FRIEND_GROUP_SIZE_OVERFLOW_PENALTY * (new_size - config.max_group_size)

    new_min, new_max = merged_bounds(group, min_grade, max_grade)
    new_spread = new_max - new_min
    if new_spread > config.max_grade_spread:
        score += FRIEND_GROUP_SPREAD_OVERFLOW_PENALTY * (new_spread - config.max_grade_spread)

    if group.min_grade is not None and group.max_grade is not None:
        current_spread = group.max_grade - group.min_grade
        score += SPREAD_INCREASE_WEIGHT * (new_spread - current_spread)

    score += group.size
    return score


def score_solo_camper_placement(
    group: GroupShape,
    grade: int,
    config: GroupingConfig,
    average_size: float,
) -> float:
    """Score placing one solo camper into a group.

    Components:
        +10000 if the group is already at or over capacity
        +5000 if the camper's grade would push the group past the spread limit
        +20 x average distance from the group's current min and max grade
        +5 x (group size - average group size across all groups)
    """
    score = 0.0

    if group.size >= config.max_group_size:
        score += SOLO_FULL_GROUP_PENALTY

    if would_violate_grade_constraint(group, grade, config.max_grade_spread):
        score += SOLO_SPREAD_OVERFLOW_PENALTY

    if group.min_grade is not None and group.max_grade is not None:
        avg_distance = (abs(grade - group.min_grade) + abs(grade - group.max_grade)) / 2
        score += SOLO_GRADE_DISTANCE_WEIGHT * avg_distance

    score += SOLO_SIZE_DEVIATION_WEIGHT * (group.size - average_size)
    return score


def score_late_insertion(group: GroupShape, grade: int, config: GroupingConfig) -> float:
    """Score placing a late registrant into an already finalized group.

    Components:
        +1000 if the group is at or over capacity
        +500 if the camper's grade would push the group past the spread limit
        +10 x distance from the group's grade midpoint
        +current group size
    """
    score = 0.0

    if group.size >= config.max_group_size:
        score += LATE_FULL_GROUP_PENALTY

    if would_violate_grade_constraint(group, grade, config.max_grade_spread):
        score += LATE_SPREAD_OVERFLOW_PENALTY

    if group.min_grade is not None and group.max_grade is not None:
        midpoint = (group.min_grade + group.max_grade) / 2
        score += LATE_MIDPOINT_WEIGHT * abs(grade - midpoint)

    score += group.size
    return score


def pick_best_group(groups: Sequence[G], score_fn: Callable[[G], float]) -> tuple[G, float]:
    """Lowest-scoring group. Ties go to the earliest group in ``groups``.

    Raises:
        ValueError: If ``groups`` is empty
    """
    if not groups:
        raise ValueError("No groups to score")

    best_group = groups[0]
    best_score = score_fn(best_group)
    for group in groups[1:]:
        score = score_fn(group)
        if score < best_score:
            best_group, best_score = group, score

    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, f"Best group {getattr(best_group, 'id', '?')} scored {best_score}")
    return best_group, best_score
