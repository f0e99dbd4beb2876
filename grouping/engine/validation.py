"""
Violation construction and final-state validation.

Placement phases record violations as they cause them; the validation phase
re-scans final membership and records anything still missing. The ledger
deduplicates, so the same fact is never reported twice.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config.types import GroupingConfig
from ..constants import group_color_for, group_name_for
from ..models import CampGroup, FriendGroup, StandardizedCamper
from ..standardize.grades import format_grade_display, format_grade_range
from ..violations import (
    ConstraintViolation,
    FriendGroupSplitViolation,
    FriendGroupTooLargeViolation,
    GradeDiscrepancyViolation,
    GradeSpreadExceededViolation,
    ImpossiblePlacementViolation,
    ResolutionType,
    SizeExceededViolation,
    ViolationSeverity,
    ViolationType,
)
from .state import GroupState, ViolationLedger

logger = logging.getLogger(__name__)


def size_exceeded_violation(
    group: GroupState,
    camper_ids: list[str],
    config: GroupingConfig,
    friend_group_id: str | None = None,
) -> SizeExceededViolation:
    return SizeExceededViolation(
        id="",
        group_id=group.id,
        camper_ids=list(camper_ids),
        friend_group_id=friend_group_id,
        current_size=group.size,
        max_size=config.max_group_size,
        title=f"Group {group.group_number} Exceeds Size Limit",
        description=(
            f"Group {group.group_number} has {group.size} campers, "
            f"exceeding the limit of {config.max_group_size}."
        ),
        suggested_resolution="Move some campers to other groups.",
    )


def grade_spread_violation(
    group: GroupState,
    camper_ids: list[str],
    config: GroupingConfig,
    friend_group_id: str | None = None,
) -> GradeSpreadExceededViolation:
    min_grade = group.min_grade if group.min_grade is not None else 0
    max_grade = group.max_grade if group.max_grade is not None else 0
    return GradeSpreadExceededViolation(
        id="",
        group_id=group.id,
        camper_ids=list(camper_ids),
        friend_group_id=friend_group_id,
        min_grade=min_grade,
        max_grade=max_grade,
        grade_spread=max_grade - min_grade,
        max_grade_spread=config.max_grade_spread,
        title=f"Group {group.group_number} Exceeds Grade Spread",
        description=(
            f"Group {group.group_number} spans {format_grade_range(min_grade, max_grade)}, "
            f"exceeding the maximum spread of {config.max_grade_spread} grades."
        ),
        suggested_resolution="Move the youngest or oldest camper to another group.",
    )


def friend_group_split_violation(
    friend_group: FriendGroup,
    part_count: int,
    group_ids: list[str] | None = None,
) -> FriendGroupSplitViolation:
    if group_ids:
        description = f"Friend group of {friend_group.member_count} campers is spread across {part_count} groups."
        suggestion = "Consider moving friends to the same group if constraints allow."
    else:
        description = (
            f"Friend group of {friend_group.member_count} campers was split into {part_count} "
            "subgroups due to constraint violations."
        )
        suggestion = "Review the split and adjust manually if needed to keep close friends together."

    return FriendGroupSplitViolation(
        id="",
        friend_group_id=friend_group.id,
        camper_ids=list(friend_group.member_ids),
        group_ids=list(group_ids or []),
        title=f"Friend Group #{friend_group.group_number} Split",
        description=description,
        suggested_resolution=suggestion,
    )


def friend_group_too_large_violation(friend_group: FriendGroup, config: GroupingConfig) -> FriendGroupTooLargeViolation:
    return FriendGroupTooLargeViolation(
        id="",
        friend_group_id=friend_group.id,
        camper_ids=list(friend_group.member_ids),
        member_count=friend_group.member_count,
        max_size=config.max_group_size,
        title=f"Friend Group #{friend_group.group_number} Too Large",
        description=(
            f"Friend group of {friend_group.member_count} campers exceeds the maximum group size of "
            f"{config.max_group_size} and must be split."
        ),
        suggested_resolution="Review which friends are closest and keep them together when adjusting.",
    )


def impossible_placement_violation(camper_ids: list[str], group_id: str | None = None) -> ImpossiblePlacementViolation:
    return ImpossiblePlacementViolation(
        id="",
        camper_ids=list(camper_ids),
        group_id=group_id,
        title="Campers Could Not Be Placed",
        description=f"{len(camper_ids)} camper(s) could not be placed into any group: {', '.join(camper_ids)}.",
        suggested_resolution="Add a group or assign these campers manually.",
    )


def grade_discrepancy_violation(camper: StandardizedCamper) -> GradeDiscrepancyViolation:
    reported = camper.reported_grade_numeric if camper.reported_grade_numeric is not None else camper.grade_validated
    return GradeDiscrepancyViolation(
        id="",
        camper_id=camper.athlete_id,
        reported_grade=reported,
        computed_grade=camper.grade_computed,
        title=f"Grade Discrepancy: {camper.full_name}",
        description=(
            f"{camper.full_name} was registered as {format_grade_display(reported)}, "
            f"but their date of birth suggests {format_grade_display(camper.grade_computed)}."
        ),
        suggested_resolution="Confirm the camper's current grade with the parent.",
    )


def check_group_limits(
    group: GroupState,
    camper_ids: list[str],
    config: GroupingConfig,
    ledger: ViolationLedger,
    friend_group_id: str | None = None,
) -> tuple[list[ViolationType], list[ConstraintViolation]]:
    """Record size/grade violations a group currently has.

    Returns:
        (violation types the group has, violations newly recorded in the ledger)
    """
    caused: list[ViolationType] = []
    recorded: list[ConstraintViolation] = []

    if group.size > config.max_group_size:
        caused.append(ViolationType.SIZE_EXCEEDED)
        added = ledger.add(size_exceeded_violation(group, camper_ids, config, friend_group_id))
        if added is not None:
            recorded.append(added)

    if group.grade_spread > config.max_grade_spread:
        caused.append(ViolationType.GRADE_SPREAD_EXCEEDED)
        added = ledger.add(grade_spread_violation(group, camper_ids, config, friend_group_id))
        if added is not None:
            recorded.append(added)

    return caused, recorded


def validate_groups(
    groups: list[GroupState],
    friend_groups: list[FriendGroup],
    campers: Iterable[StandardizedCamper],
    config: GroupingConfig,
    ledger: ViolationLedger,
) -> list[ConstraintViolation]:
    """Re-scan final group state and record any violations not already recorded.

    Size or grade violations recorded earlier in the run that no longer hold
    (for example after balancing) are marked auto-fixed rather than removed.

    Returns:
        Violations newly recorded by this scan
    """
    recorded: list[ConstraintViolation] = []
    groups_by_id = {g.id: g for g in groups}

    for group in groups:
        _, added = check_group_limits(group, group.camper_ids, config, ledger)
        recorded.extend(added)

    for violation in list(ledger):
        if violation.is_resolved or violation.affected_group_id not in groups_by_id:
            continue
        group = groups_by_id[violation.affected_group_id]
        if violation.violation_type == ViolationType.SIZE_EXCEEDED and group.size <= config.max_group_size:
            ledger.resolve(violation.dedup_key, ResolutionType.AUTO_FIXED, "Group size back within limit")
        elif (
            violation.violation_type == ViolationType.GRADE_SPREAD_EXCEEDED
            and group.grade_spread <= config.max_grade_spread
        ):
            ledger.resolve(violation.dedup_key, ResolutionType.AUTO_FIXED, "Grade spread back within limit")

    group_of: dict[str, str] = {}
    for group in groups:
        for camper_id in group.camper_ids:
            group_of[camper_id] = group.id

    for friend_group in friend_groups:
        member_groups = list(dict.fromkeys(group_of[m] for m in friend_group.member_ids if m in group_of))
        if len(member_groups) > 1:
            added = ledger.add(friend_group_split_violation(friend_group, len(member_groups), member_groups))
            if added is not None:
                recorded.append(added)

    camper_list = list(campers)
    unplaced = [c.athlete_id for c in camper_list if c.athlete_id not in group_of]
    if unplaced:
        added = ledger.add(impossible_placement_violation(unplaced))
        if added is not None:
            recorded.append(added)

    for camper in camper_list:
        if camper.has_grade_discrepancy:
            added = ledger.add(grade_discrepancy_violation(camper))
            if added is not None:
                recorded.append(added)

    if recorded:
        logger.debug(f"Validation recorded {len(recorded)} additional violation(s)")
    return recorded


def build_camp_groups(
    groups: list[GroupState],
    violations: list[ConstraintViolation],
    config: GroupingConfig,
) -> list[CampGroup]:
    """Snapshot run state into output CampGroups with derived flags.

    Only unresolved violations raise a group's warning/hard flags.
    """
    open_violations = [v for v in violations if not v.is_resolved]
    split_members: set[str] = set()
    for violation in open_violations:
        if violation.violation_type == ViolationType.FRIEND_GROUP_SPLIT:
            split_members.update(violation.affected_camper_ids)

    result: list[CampGroup] = []
    for index, state in enumerate(groups):
        camper_ids = state.camper_ids
        touching = [
            v
            for v in open_violations
            if v.affected_group_id == state.id or state.id in getattr(v, "group_ids", [])
        ]
        result.append(
            CampGroup(
                id=state.id,
                group_number=state.group_number,
                name=group_name_for(state.group_number),
                color=group_color_for(state.group_number),
                camper_ids=camper_ids,
                min_grade=state.min_grade,
                max_grade=state.max_grade,
                grade_spread=state.grade_spread,
                size_violation=state.size > config.max_group_size,
                grade_violation=state.grade_spread > config.max_grade_spread,
                friend_violation=any(c in split_members for c in camper_ids),
                has_warnings=any(v.severity == ViolationSeverity.WARNING for v in touching),
                has_hard_violations=any(v.severity == ViolationSeverity.HARD for v in touching),
                display_order=index + 1,
            )
        )
    return result
