"""
Incremental placement of late registrations.

A camper who registers after groups were finalized is scored against the
existing groups only. Nothing already placed moves and the balancer never runs;
if the best available group would break a limit, the violation is returned for
the caller to accept or fix.
"""

from __future__ import annotations

import logging

from ..config.errors import GroupingInputError
from ..config.types import DEFAULT_GROUPING_CONFIG, GroupingConfig
from ..models import AssignmentType, CampGroup, GroupAssignment, LateInsertionResult, StandardizedCamper
from ..violations import (
    ConstraintViolation,
    GradeSpreadExceededViolation,
    SizeExceededViolation,
    ViolationType,
)
from .scoring import pick_best_group, score_late_insertion, would_violate_grade_constraint
from .state import ViolationLedger

logger = logging.getLogger(__name__)

LATE_REGISTRATION_REASON = "Late registration placed in best available group"


def insert_late_camper(
    camper: StandardizedCamper,
    existing_groups: list[CampGroup],
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
) -> LateInsertionResult:
    """Place one late registrant into the least-bad existing group.

    Always returns a placement, even when every group is full; the resulting
    size or grade problem is reported as a hard violation instead of raising.

    Args:
        camper: The late registrant (standardized)
        existing_groups: Finalized groups (not modified)
        config: Grouping configuration

    Returns:
        LateInsertionResult with the chosen group, an updated copy of it, the
        assignment record and any violations

    Raises:
        GroupingInputError: If there are no groups, or the camper is already in one
    """
    if not existing_groups:
        raise GroupingInputError("No groups available for late registration")

    for group in existing_groups:
        if camper.athlete_id in group.camper_ids:
            raise GroupingInputError(f"Camper {camper.athlete_id} is already in {group.id}")

    grade = camper.grade_validated
    best, score = pick_best_group(existing_groups, lambda g: score_late_insertion(g, grade, config))

    ledger = ViolationLedger()
    caused: list[ViolationType] = []
    new_size = best.size + 1
    new_min = grade if best.min_grade is None else min(best.min_grade, grade)
    new_max = grade if best.max_grade is None else max(best.max_grade, grade)

    if best.size >= config.max_group_size:
        caused.append(ViolationType.SIZE_EXCEEDED)
        ledger.add(
            SizeExceededViolation(
                id="",
                group_id=best.id,
                camper_ids=[camper.athlete_id],
                current_size=new_size,
                max_size=config.max_group_size,
                title="Late Registration Exceeds Group Size",
                description=f"Adding {camper.full_name} to Group {best.group_number} exceeds the size limit.",
                suggested_resolution="Consider moving another camper or accepting the overflow.",
            )
        )

    if would_violate_grade_constraint(best, grade, config.max_grade_spread):
        caused.append(ViolationType.GRADE_SPREAD_EXCEEDED)
        ledger.add(
            GradeSpreadExceededViolation(
                id="",
                group_id=best.id,
                camper_ids=[camper.athlete_id],
                min_grade=new_min,
                max_grade=new_max,
                grade_spread=new_max - new_min,
                max_grade_spread=config.max_grade_spread,
                title="Late Registration Exceeds Grade Spread",
                description=(
                    f"Adding {camper.full_name} ({camper.grade_display}) to Group {best.group_number} "
                    "exceeds the grade spread limit."
                ),
                suggested_resolution="Consider placing in a different group or accepting the grade spread.",
            )
        )

    violations: list[ConstraintViolation] = ledger.violations
    updated_group = best.model_copy(
        update={
            "camper_ids": [*best.camper_ids, camper.athlete_id],
            "min_grade": new_min,
            "max_grade": new_max,
            "grade_spread": new_max - new_min,
            "size_violation": new_size > config.max_group_size,
            "grade_violation": (new_max - new_min) > config.max_grade_spread,
            "has_hard_violations": best.has_hard_violations or bool(violations),
        }
    )

    assignment = GroupAssignment(
        camper_id=camper.athlete_id,
        group_id=best.id,
        group_number=best.group_number,
        previous_group_id=camper.assigned_group_id,
        assignment_type=AssignmentType.AUTO,
        reason=LATE_REGISTRATION_REASON,
        caused_violations=caused,
    )

    if violations:
        logger.warning(
            f"Late registration {camper.athlete_id} placed in {best.id} with "
            f"{len(violations)} violation(s) (score {score:g})"
        )
    else:
        logger.info(f"Late registration {camper.athlete_id} placed in {best.id} (score {score:g})")

    return LateInsertionResult(
        group_id=best.id,
        score=score,
        updated_group=updated_group,
        assignment=assignment,
        violations=violations,
    )
