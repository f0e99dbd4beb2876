"""
End-to-end grouping pipeline.

Raw roster -> standardize -> cluster friend groups -> place -> output.
Also the helpers that move results back onto camper records.
"""

from __future__ import annotations

import logging
from datetime import date

from .config.types import DEFAULT_GROUPING_CONFIG, GroupingConfig
from .engine.engine import run_grouping_algorithm
from .graph.clustering import cluster_friend_groups
from .models import (
    AssignmentType,
    GroupingInput,
    GroupingOutput,
    RawCamper,
    StandardizedCamper,
)
from .standardize.standardizer import standardize_roster

logger = logging.getLogger(__name__)

# Only these assignment types survive a re-run when overrides are preserved
PRESERVED_ASSIGNMENT_TYPES = (AssignmentType.MANUAL, AssignmentType.OVERRIDE)


def collect_manual_overrides(campers: list[StandardizedCamper]) -> dict[str, str]:
    """Map camper id -> group id for every manually placed camper."""
    return {
        c.athlete_id: c.assigned_group_id
        for c in campers
        if c.assigned_group_id and c.assignment_type in PRESERVED_ASSIGNMENT_TYPES
    }


def run_camp_grouping(
    raw_campers: list[RawCamper],
    camp_start_date: date,
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
    preserve_manual_overrides: bool = False,
    debug_mode: bool = False,
) -> GroupingOutput:
    """Run the whole pipeline for one camp.

    Standardization and clustering warnings are folded into the output
    warnings ahead of the engine's own.

    Args:
        raw_campers: Registrations for the camp
        camp_start_date: First day of camp
        config: Grouping configuration
        preserve_manual_overrides: Keep manual/override placements from a previous run
        debug_mode: Keep per-decision detail in the phase log

    Returns:
        GroupingOutput from the engine

    Raises:
        GroupingInputError: If the roster is structurally invalid
    """
    standardized = standardize_roster(raw_campers, camp_start_date, config)
    clustering = cluster_friend_groups(standardized.campers, config)

    existing = collect_manual_overrides(standardized.campers) if preserve_manual_overrides else {}
    if existing:
        logger.info(f"Preserving {len(existing)} manual override(s)")

    output = run_grouping_algorithm(
        GroupingInput(
            campers=standardized.campers,
            friend_groups=clustering.friend_groups,
            config=config,
            preserve_manual_overrides=preserve_manual_overrides,
            existing_assignments=existing,
        ),
        debug_mode=debug_mode,
    )

    output.warnings = [*standardized.all_warnings, *clustering.warnings, *output.warnings]
    return output


def apply_assignments(
    campers: list[StandardizedCamper],
    output: GroupingOutput,
) -> list[StandardizedCamper]:
    """Copies of ``campers`` stamped with their assigned group.

    Campers without an assignment in ``output`` are copied unchanged.
    """
    groups_by_id = {g.id: g for g in output.groups}
    assignments = {a.camper_id: a for a in output.assignments}

    result: list[StandardizedCamper] = []
    for camper in campers:
        assignment = assignments.get(camper.athlete_id)
        if assignment is None:
            result.append(camper.model_copy())
            continue

        group = groups_by_id.get(assignment.group_id)
        result.append(
            camper.model_copy(
                update={
                    "assigned_group_id": assignment.group_id,
                    "assigned_group_number": assignment.group_number,
                    "assigned_group_name": group.name if group else None,
                    "assignment_type": assignment.assignment_type,
                    "assignment_reason": assignment.reason,
                }
            )
        )
    return result
