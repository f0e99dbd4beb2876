"""Splitting friend groups that cannot be placed whole."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..config.types import GroupingConfig
from ..models import FriendGroup, StandardizedCamper

logger = logging.getLogger(__name__)


def split_friend_group(
    friend_group: FriendGroup,
    camper_lookup: Mapping[str, StandardizedCamper],
    config: GroupingConfig,
) -> list[list[str]]:
    """Partition a friend group into grade-contiguous, size-bounded subgroups.

    Groups that fit the size limit are returned unchanged as a single subgroup.
    Otherwise members are walked in ascending grade order and accumulated
    greedily; a new subgroup starts whenever the next member would push the
    current one past the size limit or the grade-spread limit.

    This is a greedy approximation with no look-ahead, so it can produce more
    subgroups than a minimal split would.

    Args:
        friend_group: Group to split (not modified)
        camper_lookup: Camper records by athlete id
        config: Grouping configuration

    Returns:
        List of subgroups, each a list of athlete ids
    """
    members = [camper_lookup[m] for m in friend_group.member_ids if m in camper_lookup]
    if len(members) <= config.max_group_size:
        return [list(friend_group.member_ids)]

    # sorted() is stable: members of the same grade keep their group order
    ordered = sorted(members, key=lambda c: c.grade_validated)

    subgroups: list[list[str]] = []
    current: list[str] = []
    current_min: int | None = None
    current_max: int | None = None

    for member in ordered:
        grade = member.grade_validated
        new_min = grade if current_min is None else min(current_min, grade)
        new_max = grade if current_max is None else max(current_max, grade)
        would_exceed_size = len(current) >= config.max_group_size
        would_exceed_grade = (new_max - new_min) > config.max_grade_spread

        if would_exceed_size or would_exceed_grade:
            if current:
                subgroups.append(current)
            current = [member.athlete_id]
            current_min = current_max = grade
        else:
            current.append(member.athlete_id)
            current_min, current_max = new_min, new_max

    if current:
        subgroups.append(current)

    logger.debug(
        f"Split friend group {friend_group.id} ({len(members)} members) into "
        f"{len(subgroups)} subgroups: {[len(s) for s in subgroups]}"
    )
    return subgroups
