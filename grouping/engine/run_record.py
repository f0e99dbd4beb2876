"""Audit records for grouping runs."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from ..config.types import GroupingConfig
from ..constants import ALGORITHM_VERSION
from ..models import GroupingOutput, GroupingRun, RunType


def build_grouping_run(
    output: GroupingOutput | None,
    config: GroupingConfig,
    run_type: RunType = RunType.INITIAL,
    triggered_by: str | None = None,
    trigger_reason: str = "",
    camp_id: str | None = None,
    preserved_manual_overrides: bool = False,
    overrides_preserved_count: int = 0,
    error_message: str | None = None,
    run_id: str | None = None,
    created_at: datetime | None = None,
) -> GroupingRun:
    """Build the write-once audit record for one run.

    Pass ``output=None`` with an ``error_message`` to record a run that failed
    before producing output.

    Args:
        output: Engine output, or None if the run failed
        config: Configuration the run used
        run_type: initial, rerun or incremental
        triggered_by: User or job that started the run
        trigger_reason: Free-text reason
        camp_id: Camp the run belongs to
        preserved_manual_overrides: Whether overrides were preserved
        overrides_preserved_count: How many overrides were preserved
        error_message: Failure reason, if any
        run_id: Explicit id (defaults to a new UUID)
        created_at: Timestamp (defaults to now, UTC)

    Returns:
        Frozen GroupingRun
    """
    common = {
        "id": run_id or str(uuid4()),
        "camp_id": camp_id,
        "run_type": run_type,
        "triggered_by": triggered_by,
        "trigger_reason": trigger_reason,
        "config": config,
        "algorithm_version": ALGORITHM_VERSION,
        "preserved_manual_overrides": preserved_manual_overrides,
        "overrides_preserved_count": overrides_preserved_count,
        "error_message": error_message,
        "created_at": created_at or datetime.now(UTC),
    }

    if output is None:
        return GroupingRun(**common, success=False)

    stats = output.stats
    return GroupingRun(
        **common,
        total_campers=stats.total_campers,
        total_friend_groups=stats.total_friend_groups,
        late_registrations=stats.late_registrations,
        grade_discrepancies=stats.grade_discrepancies,
        execution_time_ms=output.execution_time_ms,
        campers_auto_placed=stats.campers_auto_placed,
        friend_groups_placed_intact=stats.friend_groups_placed_intact,
        friend_groups_split=stats.friend_groups_split,
        constraint_violations=stats.constraint_violations,
        success=output.success and error_message is None,
        warnings=list(output.warnings),
    )
