"""
Grouping - camper grouping for day camps.

This package contains:
- standardize: Raw registrations -> standardized campers (age, grade, friends)
- graph: Friendship graph, union-find clustering and friend group splitting
- engine: Constrained placement, balancing, validation, late insertion, manual moves
- pipeline: End-to-end roster -> groups
"""

from grouping.config import DEFAULT_GROUPING_CONFIG, GroupingConfig, GroupingError, GroupingInputError
from grouping.engine import (
    GroupingEngine,
    apply_manual_move,
    build_grouping_run,
    insert_late_camper,
    run_grouping_algorithm,
    validate_move,
)
from grouping.models import (
    CampGroup,
    FriendGroup,
    GroupAssignment,
    GroupingInput,
    GroupingOutput,
    RawCamper,
    StandardizedCamper,
)
from grouping.pipeline import apply_assignments, run_camp_grouping
from grouping.violations import ConstraintViolation, ViolationSeverity, ViolationType

__all__ = [
    "DEFAULT_GROUPING_CONFIG",
    "GroupingConfig",
    "GroupingError",
    "GroupingInputError",
    "GroupingEngine",
    "apply_manual_move",
    "build_grouping_run",
    "insert_late_camper",
    "run_grouping_algorithm",
    "validate_move",
    "CampGroup",
    "FriendGroup",
    "GroupAssignment",
    "GroupingInput",
    "GroupingOutput",
    "RawCamper",
    "StandardizedCamper",
    "apply_assignments",
    "run_camp_grouping",
    "ConstraintViolation",
    "ViolationSeverity",
    "ViolationType",
]
