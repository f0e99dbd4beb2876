"""
Grouping engine - places campers into a fixed number of groups.

Phases run strictly in order over shared run state:
    1. Preserve manual overrides (if requested)
    2. Place friend groups (intact when possible, split otherwise)
    3. Place solo campers (ascending grade)
    4. Balance group sizes (best effort)
    5. Validate final state and build the report

The engine does not modify caller-owned inputs. Structural checks all run
before the first placement, so a raised error leaves nothing half-done.
"""

from __future__ import annotations

import logging
import time
from collections import Counter

from ..config.errors import GroupingInputError
from ..models import (
    AssignmentType,
    GroupingInput,
    GroupingOutput,
    GroupingStats,
)
from ..violations import ViolationSeverity
from .balancer import balance_groups
from .decision_log import PlacementLogger
from .placement import GroupPlacer
from .state import ViolationLedger, initialize_groups
from .validation import build_camp_groups, validate_groups

logger = logging.getLogger(__name__)


class GroupingEngine:
    """Runs one full grouping pass over a camp roster."""

    def __init__(self, input_data: GroupingInput, debug_mode: bool = False):
        """Initialize the engine with input data.

        Args:
            input_data: Campers, friend groups, config and override settings
            debug_mode: Keep every placement decision in the returned phase log
        """
        self.input = input_data
        self.config = input_data.config
        self.camper_lookup = input_data.camper_by_id
        self.decision_log = PlacementLogger(debug_mode=debug_mode)

    def _check_input(self) -> dict[str, str]:
        """Structural precondition checks. Returns the overrides to apply."""
        if self.config.num_groups < 1:
            raise GroupingInputError("At least one group is required")

        counts = Counter(c.athlete_id for c in self.input.campers)
        duplicates = sorted(cid for cid, n in counts.items() if n > 1)
        if duplicates:
            raise GroupingInputError(f"Duplicate camper ids in roster: {', '.join(duplicates)}")

        seen_members: dict[str, str] = {}
        for friend_group in self.input.friend_groups:
            for member_id in friend_group.member_ids:
                if member_id not in self.camper_lookup:
                    raise GroupingInputError(
                        f"Friend group {friend_group.id} references unknown camper {member_id}"
                    )
                if member_id in seen_members:
                    raise GroupingInputError(
                        f"Camper {member_id} appears in friend groups {seen_members[member_id]} and {friend_group.id}"
                    )
                seen_members[member_id] = friend_group.id

        if not self.input.preserve_manual_overrides:
            return {}

        group_ids = {g.id for g in initialize_groups(self.config.num_groups)}
        for camper_id, group_id in self.input.existing_assignments.items():
            if camper_id not in self.camper_lookup:
                raise GroupingInputError(f"Manual override references unknown camper {camper_id}")
            if group_id not in group_ids:
                raise GroupingInputError(f"Manual override for {camper_id} references unknown group {group_id}")
        return dict(self.input.existing_assignments)

    def run(self) -> GroupingOutput:
        """Execute all phases and build the output report.

        Raises:
            GroupingInputError: If the input is structurally invalid (nothing is placed)
        """
        start_time = time.perf_counter()
        overrides = self._check_input()

        campers = self.input.campers
        friend_groups = self.input.friend_groups
        config = self.config

        logger.info(
            f"Starting grouping run: {len(campers)} campers, {len(friend_groups)} friend groups, "
            f"{config.num_groups} groups of up to {config.max_group_size} (max spread {config.max_grade_spread})"
        )

        groups = initialize_groups(config.num_groups)
        ledger = ViolationLedger()
        placer = GroupPlacer(groups, self.camper_lookup, config, ledger, self.decision_log)

        # Phase 1
        overrides_preserved = placer.preserve_overrides(overrides) if overrides else 0

        # Phase 2
        placer.place_friend_groups(friend_groups)

        # Phase 3
        placer.place_solo_campers(campers)

        # Phase 4
        locked_ids = set(overrides) | {m for fg in friend_groups for m in fg.member_ids}
        balance_moves = balance_groups(groups, self.camper_lookup, config, placer.assignments, locked_ids)
        self.decision_log.log_phase("balance", f"Made {balance_moves} balancing move(s)")

        # Phase 5
        for violation in validate_groups(groups, friend_groups, campers, config, ledger):
            self.decision_log.log_violation(violation)

        violations = ledger.violations
        open_violations = [v for v in violations if not v.is_resolved]
        hard_count = sum(1 for v in open_violations if v.severity == ViolationSeverity.HARD)
        warning_violations = [v for v in open_violations if v.severity == ViolationSeverity.WARNING]

        camp_groups = build_camp_groups(groups, violations, config)
        placed_ids = {cid for g in groups for cid in g.camper_ids}
        assignments = [placer.assignments[c.athlete_id] for c in campers if c.athlete_id in placer.assignments]

        sizes = [g.size for g in groups]
        average_size = sum(sizes) / len(sizes)
        variance = sum((s - average_size) ** 2 for s in sizes) / len(sizes)

        stats = GroupingStats(
            total_campers=len(campers),
            total_friend_groups=len(friend_groups),
            campers_auto_placed=sum(1 for a in assignments if a.assignment_type == AssignmentType.AUTO),
            friend_groups_placed_intact=placer.friend_groups_placed_intact,
            friend_groups_split=placer.friend_groups_split,
            constraint_violations=hard_count,
            warnings=len(warning_violations),
            late_registrations=sum(1 for c in campers if c.is_late_registration),
            grade_discrepancies=sum(1 for c in campers if c.has_grade_discrepancy),
            average_group_size=average_size,
            group_size_variance=variance,
            balance_moves=balance_moves,
        )

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        self.decision_log.log_phase(
            "validate",
            f"{hard_count} hard violation(s), {len(warning_violations)} warning(s), "
            f"{overrides_preserved} override(s) preserved",
        )
        logger.info(
            f"Grouping run finished in {execution_time_ms:.1f}ms: success={hard_count == 0}, "
            f"sizes={sizes}, hard violations={hard_count}, warnings={len(warning_violations)}"
        )

        return GroupingOutput(
            success=hard_count == 0,
            groups=camp_groups,
            assignments=assignments,
            violations=violations,
            warnings=[v.description for v in warning_violations],
            stats=stats,
            execution_time_ms=execution_time_ms,
            unplaced_camper_ids=[c.athlete_id for c in campers if c.athlete_id not in placed_ids],
            phase_log=self.decision_log.get_summary(),
        )


def run_grouping_algorithm(input_data: GroupingInput, debug_mode: bool = False) -> GroupingOutput:
    """Run a full grouping pass. See GroupingEngine."""
    return GroupingEngine(input_data, debug_mode=debug_mode).run()
