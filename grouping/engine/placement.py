"""
Placement phases of a grouping run.

Phase 1 pins preserved manual overrides, phase 2 places friend groups (intact
when possible, split otherwise), phase 3 places the remaining solo campers in
ascending grade order. Every camper gets exactly one assignment record.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..config.types import GroupingConfig
from ..graph.splitter import split_friend_group
from ..models import AssignmentType, FriendGroup, GroupAssignment, StandardizedCamper
from ..violations import ViolationType
from .decision_log import PlacementLogger
from .scoring import (
    GOOD_FIT_THRESHOLD,
    INTACT_PLACEMENT_THRESHOLD,
    pick_best_group,
    score_friend_group_placement,
    score_solo_camper_placement,
)
from .state import GroupState, ViolationLedger
from .validation import check_group_limits, friend_group_split_violation, friend_group_too_large_violation

logger = logging.getLogger(__name__)

OVERRIDE_REASON = "Preserved manual override from previous run"


def restrict_friend_group(
    friend_group: FriendGroup,
    member_ids: list[str],
    camper_lookup: Mapping[str, StandardizedCamper],
    config: GroupingConfig,
) -> FriendGroup:
    """A transient copy of a friend group limited to some of its members.

    Grade bounds and constraint flags are recomputed for the subset. The
    original friend group is never modified.
    """
    grades = [camper_lookup[m].grade_validated for m in member_ids]
    min_grade, max_grade = min(grades), max(grades)
    return friend_group.model_copy(
        update={
            "member_ids": list(member_ids),
            "min_grade": min_grade,
            "max_grade": max_grade,
            "exceeds_size": len(member_ids) > config.max_group_size,
            "exceeds_grade_spread": (max_grade - min_grade) > config.max_grade_spread,
        }
    )


class GroupPlacer:
    """Runs the placement phases against shared run state."""

    def __init__(
        self,
        groups: list[GroupState],
        camper_lookup: Mapping[str, StandardizedCamper],
        config: GroupingConfig,
        ledger: ViolationLedger,
        decision_log: PlacementLogger,
    ):
        self.groups = groups
        self.groups_by_id = {g.id: g for g in groups}
        self.camper_lookup = camper_lookup
        self.config = config
        self.ledger = ledger
        self.decision_log = decision_log

        self.assignments: dict[str, GroupAssignment] = {}
        self.friend_groups_placed_intact = 0
        self.friend_groups_split = 0

    @property
    def placed_ids(self) -> set[str]:
        return set(self.assignments)

    def _place(
        self,
        camper_id: str,
        group: GroupState,
        assignment_type: AssignmentType,
        reason: str,
    ) -> None:
        camper = self.camper_lookup[camper_id]
        group.add(camper_id, camper.grade_validated)
        self.assignments[camper_id] = GroupAssignment(
            camper_id=camper_id,
            group_id=group.id,
            group_number=group.group_number,
            previous_group_id=camper.assigned_group_id,
            assignment_type=assignment_type,
            reason=reason,
        )

    def _mark_caused(self, camper_ids: list[str], caused: list[ViolationType]) -> None:
        if not caused:
            return
        for camper_id in camper_ids:
            assignment = self.assignments[camper_id]
            merged = list(dict.fromkeys([*assignment.caused_violations, *caused]))
            self.assignments[camper_id] = assignment.model_copy(update={"caused_violations": merged})

    def _record_limits(self, group: GroupState, camper_ids: list[str], friend_group_id: str | None = None) -> list[ViolationType]:
        caused, recorded = check_group_limits(group, camper_ids, self.config, self.ledger, friend_group_id)
        for violation in recorded:
            self.decision_log.log_violation(violation)
        return caused

    # Phase 1

    def preserve_overrides(self, overrides: Mapping[str, str]) -> int:
        """Pin campers to their previously chosen groups, before any scoring.

        Args:
            overrides: camper_id -> group_id (already checked to exist)

        Returns:
            Number of overrides placed
        """
        for camper_id, group_id in overrides.items():
            group = self.groups_by_id[group_id]
            self._place(camper_id, group, AssignmentType.MANUAL, OVERRIDE_REASON)
            self.decision_log.log_placement("overrides", [camper_id], group_id, OVERRIDE_REASON)

        self.decision_log.log_phase("overrides", f"Preserved {len(overrides)} manual override(s)")
        return len(overrides)

    # Phase 2

    def place_friend_groups(self, friend_groups: list[FriendGroup]) -> None:
        """Place friend groups: intact-placeable first, then largest first."""
        ordered = sorted(friend_groups, key=lambda fg: (not fg.can_be_placed_intact, -fg.member_count))

        for friend_group in ordered:
            placed = self.placed_ids
            remaining = [m for m in friend_group.member_ids if m not in placed]
            if not remaining:
                continue

            working = friend_group
            if len(remaining) != len(friend_group.member_ids):
                working = restrict_friend_group(friend_group, remaining, self.camper_lookup, self.config)

            if self._place_friend_group(working):
                self.friend_groups_split += 1
            else:
                self.friend_groups_placed_intact += 1

        self.decision_log.log_phase(
            "friend_groups",
            f"Placed {len(friend_groups)} friend group(s): {self.friend_groups_placed_intact} intact, "
            f"{self.friend_groups_split} split",
        )

    def _place_friend_group(self, friend_group: FriendGroup) -> bool:
        """Place one friend group. Returns True if it had to be split."""
        if friend_group.can_be_placed_intact:
            group, score = pick_best_group(
                self.groups,
                lambda g: score_friend_group_placement(
                    g, friend_group.member_count, friend_group.min_grade, friend_group.max_grade, self.config
                ),
            )
            if score < INTACT_PLACEMENT_THRESHOLD:
                reason = f"Placed with friend group #{friend_group.group_number}"
                for member_id in friend_group.member_ids:
                    self._place(member_id, group, AssignmentType.AUTO, reason)
                self.decision_log.log_placement("friend_groups", friend_group.member_ids, group.id, reason, score)
                caused = self._record_limits(group, friend_group.member_ids, friend_group.id)
                self._mark_caused(friend_group.member_ids, caused)
                return False

            logger.debug(
                f"Friend group {friend_group.id} scored {score:g} at best; falling back to splitting"
            )

        if friend_group.exceeds_size:
            violation = self.ledger.add(friend_group_too_large_violation(friend_group, self.config))
            if violation is not None:
                self.decision_log.log_violation(violation)

        subgroups = split_friend_group(friend_group, self.camper_lookup, self.config)
        is_split = len(subgroups) > 1
        if is_split:
            violation = self.ledger.add(friend_group_split_violation(friend_group, len(subgroups)))
            if violation is not None:
                self.decision_log.log_violation(violation)

        reason = (
            f"Placed in subgroup from split friend group #{friend_group.group_number}"
            if is_split
            else f"Placed with friend group #{friend_group.group_number}"
        )

        for subgroup in subgroups:
            part = restrict_friend_group(friend_group, subgroup, self.camper_lookup, self.config)
            group, score = pick_best_group(
                self.groups,
                lambda g: score_friend_group_placement(g, part.member_count, part.min_grade, part.max_grade, self.config),
            )
            for member_id in subgroup:
                self._place(member_id, group, AssignmentType.AUTO, reason)
            self.decision_log.log_placement("friend_groups", subgroup, group.id, reason, score)

            caused = self._record_limits(group, subgroup, friend_group.id)
            if is_split:
                caused.append(ViolationType.FRIEND_GROUP_SPLIT)
            self._mark_caused(subgroup, caused)

        return is_split

    # Phase 3

    def place_solo_campers(self, campers: list[StandardizedCamper]) -> int:
        """Place every not-yet-placed camper one at a time, lowest grade first.

        Returns:
            Number of campers placed
        """
        placed = self.placed_ids
        solo = sorted(
            (c for c in campers if c.athlete_id not in placed),
            key=lambda c: c.grade_validated,
        )

        for camper in solo:
            average_size = sum(g.size for g in self.groups) / len(self.groups)
            group, score = pick_best_group(
                self.groups,
                lambda g: score_solo_camper_placement(g, camper.grade_validated, self.config, average_size),
            )
            reason = "Best fit by grade and balance" if score < GOOD_FIT_THRESHOLD else "Best available option"
            self._place(camper.athlete_id, group, AssignmentType.AUTO, reason)
            self.decision_log.log_placement("solo", [camper.athlete_id], group.id, reason, score)

            caused = self._record_limits(group, [camper.athlete_id])
            self._mark_caused([camper.athlete_id], caused)

        self.decision_log.log_phase("solo", f"Placed {len(solo)} solo camper(s)")
        return len(solo)
