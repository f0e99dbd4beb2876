"""
Manual moves between groups.

Directors drag campers between finalized groups. validate_move() previews
what a move would break; apply_manual_move() performs it on copies and
re-validates every group.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..config.errors import GroupingInputError
from ..config.types import DEFAULT_GROUPING_CONFIG, GroupingConfig
from ..models import AssignmentType, CampGroup, FriendGroup, GroupAssignment, MoveValidation, StandardizedCamper
from ..violations import ConstraintViolation, ViolationType
from .state import GroupState, ViolationLedger
from .validation import build_camp_groups, validate_groups

logger = logging.getLogger(__name__)

MANUAL_MOVE_REASON = "Manually moved by director"


@dataclass
class ManualMoveResult:
    """Outcome of a manual move. ``groups`` are copies; inputs are untouched."""

    applied: bool
    validation: MoveValidation
    groups: list[CampGroup] = field(default_factory=list)
    assignment: GroupAssignment | None = None
    violations: list[ConstraintViolation] = field(default_factory=list)


def _find_group(groups: list[CampGroup], camper_id: str) -> CampGroup | None:
    for group in groups:
        if camper_id in group.camper_ids:
            return group
    return None


def _friend_group_of(
    camper: StandardizedCamper,
    friend_groups: list[FriendGroup],
) -> FriendGroup | None:
    for friend_group in friend_groups:
        if friend_group.id == camper.friend_group_id or camper.athlete_id in friend_group.member_ids:
            return friend_group
    return None


def validate_move(
    camper_id: str,
    to_group_id: str,
    groups: list[CampGroup],
    campers: Mapping[str, StandardizedCamper],
    friend_groups: list[FriendGroup] | None = None,
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
) -> MoveValidation:
    """Check a manual move without performing it.

    Args:
        camper_id: Camper being moved
        to_group_id: Destination group
        groups: Current groups
        campers: Campers by athlete id
        friend_groups: Friend groups, used to detect separating friends
        config: Grouping configuration

    Returns:
        MoveValidation; ``allowed`` is True only if the move breaks nothing.
        Unknown campers or groups come back as an impossible placement.
    """
    camper = campers.get(camper_id)
    to_group = next((g for g in groups if g.id == to_group_id), None)
    if camper is None or to_group is None:
        return MoveValidation(allowed=False, violation_types=[ViolationType.IMPOSSIBLE_PLACEMENT])

    from_group = _find_group(groups, camper_id)
    if from_group is not None and from_group.id == to_group.id:
        return MoveValidation(
            allowed=True,
            warnings=[f"{camper.full_name} is already in {to_group.name}"],
            new_size=to_group.size,
            new_min_grade=to_group.min_grade,
            new_max_grade=to_group.max_grade,
            new_grade_spread=to_group.grade_spread,
        )

    grade = camper.grade_validated
    new_size = to_group.size + 1
    new_min = grade if to_group.min_grade is None else min(to_group.min_grade, grade)
    new_max = grade if to_group.max_grade is None else max(to_group.max_grade, grade)

    violation_types: list[ViolationType] = []
    warnings: list[str] = []

    if new_size > config.max_group_size:
        violation_types.append(ViolationType.SIZE_EXCEEDED)

    if new_max - new_min > config.max_grade_spread:
        violation_types.append(ViolationType.GRADE_SPREAD_EXCEEDED)

    friend_group = _friend_group_of(camper, friend_groups or [])
    if friend_group is not None and from_group is not None:
        friends_left_behind = [
            m for m in friend_group.member_ids if m != camper_id and m in from_group.camper_ids
        ]
        if friends_left_behind:
            violation_types.append(ViolationType.FRIEND_GROUP_SPLIT)
            warnings.append(f"This will separate {camper.full_name} from friends in their group")

    return MoveValidation(
        allowed=not violation_types,
        violation_types=violation_types,
        warnings=warnings,
        new_size=new_size,
        new_min_grade=new_min,
        new_max_grade=new_max,
        new_grade_spread=new_max - new_min,
    )


def apply_manual_move(
    camper_id: str,
    to_group_id: str,
    groups: list[CampGroup],
    campers: Mapping[str, StandardizedCamper],
    friend_groups: list[FriendGroup] | None = None,
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
    force: bool = False,
    reason: str = MANUAL_MOVE_REASON,
) -> ManualMoveResult:
    """Move a camper by hand and re-validate every group.

    A move that breaks a constraint is only performed with ``force=True``
    (a director accepting the consequences). Input groups are never modified.

    Args:
        camper_id: Camper being moved
        to_group_id: Destination group
        groups: Current groups
        campers: Campers by athlete id
        friend_groups: Friend groups
        config: Grouping configuration
        force: Apply even if the move is not allowed
        reason: Reason recorded on the override assignment

    Returns:
        ManualMoveResult with updated group copies and fresh violations

    Raises:
        GroupingInputError: If the camper or destination group does not exist,
            or a group contains a camper missing from ``campers``
    """
    if camper_id not in campers:
        raise GroupingInputError(f"Unknown camper {camper_id}")
    if not any(g.id == to_group_id for g in groups):
        raise GroupingInputError(f"Unknown group {to_group_id}")

    friend_groups = friend_groups or []
    validation = validate_move(camper_id, to_group_id, groups, campers, friend_groups, config)
    if not validation.allowed and not force:
        logger.info(f"Manual move of {camper_id} to {to_group_id} rejected: {[v.value for v in validation.violation_types]}")
        return ManualMoveResult(applied=False, validation=validation, groups=[g.model_copy(deep=True) for g in groups])

    states: list[GroupState] = []
    for group in groups:
        state = GroupState(id=group.id, group_number=group.group_number)
        for member_id in group.camper_ids:
            if member_id not in campers:
                raise GroupingInputError(f"Group {group.id} contains unknown camper {member_id}")
            if member_id != camper_id:
                state.add(member_id, campers[member_id].grade_validated)
        states.append(state)

    from_group = _find_group(groups, camper_id)
    destination = next(s for s in states if s.id == to_group_id)
    destination.add(camper_id, campers[camper_id].grade_validated)

    ledger = ViolationLedger()
    placed_campers = [campers[cid] for s in states for cid in s.camper_ids]
    validate_groups(states, friend_groups, placed_campers, config, ledger)
    violations = ledger.violations

    originals = {g.id: g for g in groups}
    updated_groups = [
        snapshot.model_copy(
            update={
                "name": originals[snapshot.id].name,
                "color": originals[snapshot.id].color,
                "display_order": originals[snapshot.id].display_order,
            }
        )
        for snapshot in build_camp_groups(states, violations, config)
    ]

    assignment = GroupAssignment(
        camper_id=camper_id,
        group_id=destination.id,
        group_number=destination.group_number,
        previous_group_id=from_group.id if from_group else None,
        assignment_type=AssignmentType.OVERRIDE,
        reason=reason,
        caused_violations=list(validation.violation_types),
    )

    logger.info(
        f"Manual move applied: {camper_id} {from_group.id if from_group else '(unplaced)'} -> {to_group_id}"
        f"{' (forced)' if not validation.allowed else ''}"
    )
    return ManualMoveResult(
        applied=True,
        validation=validation,
        groups=updated_groups,
        assignment=assignment,
        violations=violations,
    )
