"""
Data models for the grouping engine.

Raw roster records come in, standardized campers and friend groups flow through
the engine, and camp groups, assignments, violations and stats come out.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .config.types import DEFAULT_GROUPING_CONFIG, GroupingConfig
from .constants import MAX_GRADE, MIN_GRADE
from .violations import ConstraintViolation, ViolationSeverity, ViolationType


class AssignmentType(str, Enum):
    """How a camper ended up in a group."""

    AUTO = "auto"
    MANUAL = "manual"
    OVERRIDE = "override"


class RunType(str, Enum):
    """Why a grouping run was executed."""

    INITIAL = "initial"
    RERUN = "rerun"
    INCREMENTAL = "incremental"


class RawCamper(BaseModel):
    """A registration record as supplied by the roster source.

    Date fields are kept as strings; malformed values are handled by the
    standardizer with best-effort defaults instead of failing the whole roster.
    """

    athlete_id: str
    registration_id: str | None = None
    first_name: str
    last_name: str
    date_of_birth: str | None = None  # ISO date, e.g. "2015-03-14"
    reported_grade: str | None = None  # Free text: "3rd", "Kindergarten", "pre-k"
    friend_requests: str | list[str] | None = None
    registered_at: str | None = None  # ISO date or datetime

    # Opaque to placement
    medical_notes: str | None = None
    allergies: str | None = None
    special_considerations: str | None = None

    # Current assignment, if the camper was grouped before
    assigned_group_id: str | None = None
    assignment_type: AssignmentType | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class StandardizedCamper(BaseModel):
    """A camper with age, grade and friend requests normalized for placement."""

    athlete_id: str
    registration_id: str | None = None
    first_name: str
    last_name: str
    date_of_birth: str | None = None

    # Computed demographics (as of camp start)
    age_years: int = 0
    age_months: int = 0
    reported_grade: str | None = None
    reported_grade_numeric: int | None = None
    grade_validated: int = Field(ge=MIN_GRADE, le=MAX_GRADE)
    grade_computed: int = Field(ge=MIN_GRADE, le=MAX_GRADE)
    has_grade_discrepancy: bool = False
    grade_display: str = ""
    grade_name: str = ""

    # Friend requests
    friend_requests: list[str] = Field(default_factory=list)
    matched_friend_ids: list[str] = Field(default_factory=list)
    friend_group_id: str | None = None

    # Registration
    registered_at: str | None = None
    is_late_registration: bool = False

    medical_notes: str | None = None
    allergies: str | None = None
    special_considerations: str | None = None

    # Assignment
    assigned_group_id: str | None = None
    assigned_group_number: int | None = None
    assigned_group_name: str | None = None
    assignment_type: AssignmentType | None = None
    assignment_reason: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class FriendEdge(BaseModel):
    """A directed friend request between two campers."""

    model_config = ConfigDict(frozen=True)

    from_camper_id: str
    to_camper_id: str
    is_mutual: bool = False

    @property
    def canonical_pair(self) -> tuple[str, str]:
        """The unordered pair as a sorted tuple."""
        if self.from_camper_id <= self.to_camper_id:
            return (self.from_camper_id, self.to_camper_id)
        return (self.to_camper_id, self.from_camper_id)


class FriendGroup(BaseModel):
    """A connected component of the friendship graph."""

    model_config = ConfigDict(frozen=True)

    id: str
    group_number: int
    member_ids: list[str]
    min_grade: int
    max_grade: int
    exceeds_size: bool = False
    exceeds_grade_spread: bool = False

    # Cohesion metrics from the friendship graph
    density: float = 0.0
    mutual_ratio: float = 0.0

    placement_notes: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def member_count(self) -> int:
        return len(self.member_ids)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def grade_spread(self) -> int:
        return self.max_grade - self.min_grade

    @computed_field  # type: ignore[prop-decorator]
    @property
    def can_be_placed_intact(self) -> bool:
        return not (self.exceeds_size or self.exceeds_grade_spread)


class CampGroup(BaseModel):
    """A group (team) snapshot: identity, roster and derived constraint flags."""

    id: str
    group_number: int
    name: str
    color: str
    camper_ids: list[str] = Field(default_factory=list)
    min_grade: int | None = None
    max_grade: int | None = None
    grade_spread: int = 0
    size_violation: bool = False
    grade_violation: bool = False
    friend_violation: bool = False
    has_warnings: bool = False
    has_hard_violations: bool = False
    display_order: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def camper_count(self) -> int:
        return len(self.camper_ids)

    @property
    def size(self) -> int:
        return len(self.camper_ids)


class GroupAssignment(BaseModel):
    """Audit record of where one camper was placed and why."""

    camper_id: str
    group_id: str
    group_number: int
    previous_group_id: str | None = None
    assignment_type: AssignmentType = AssignmentType.AUTO
    reason: str
    caused_violations: list[ViolationType] = Field(default_factory=list)


class GroupingStats(BaseModel):
    """Aggregate statistics for a run."""

    total_campers: int = 0
    total_friend_groups: int = 0
    campers_auto_placed: int = 0
    friend_groups_placed_intact: int = 0
    friend_groups_split: int = 0
    constraint_violations: int = 0  # Hard severity only
    warnings: int = 0
    late_registrations: int = 0
    grade_discrepancies: int = 0
    average_group_size: float = 0.0
    group_size_variance: float = 0.0
    balance_moves: int = 0


class GroupingInput(BaseModel):
    """Everything a full run needs."""

    campers: list[StandardizedCamper]
    friend_groups: list[FriendGroup] = Field(default_factory=list)
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG
    preserve_manual_overrides: bool = False
    existing_assignments: dict[str, str] = Field(default_factory=dict)  # camper_id -> group_id

    @property
    def camper_by_id(self) -> dict[str, StandardizedCamper]:
        """Quick lookup of campers by athlete id."""
        return {c.athlete_id: c for c in self.campers}


class GroupingOutput(BaseModel):
    """Results of a full run."""

    success: bool
    groups: list[CampGroup]
    assignments: list[GroupAssignment]
    violations: list[ConstraintViolation] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stats: GroupingStats
    execution_time_ms: float = 0.0
    unplaced_camper_ids: list[str] = Field(default_factory=list)
    phase_log: dict[str, Any] = Field(default_factory=dict)

    @property
    def hard_violations(self) -> list[ConstraintViolation]:
        return [v for v in self.violations if v.severity == ViolationSeverity.HARD]

    def group_for(self, camper_id: str) -> CampGroup | None:
        """Find the group a camper ended up in."""
        for group in self.groups:
            if camper_id in group.camper_ids:
                return group
        return None


class LateInsertionResult(BaseModel):
    """Outcome of placing one late registrant into existing groups."""

    group_id: str
    score: float
    updated_group: CampGroup
    assignment: GroupAssignment
    violations: list[ConstraintViolation] = Field(default_factory=list)


class MoveValidation(BaseModel):
    """What would happen if a camper were moved by hand."""

    allowed: bool
    violation_types: list[ViolationType] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    new_size: int = 0
    new_min_grade: int | None = None
    new_max_grade: int | None = None
    new_grade_spread: int = 0


class GroupingRun(BaseModel):
    """Write-once audit snapshot of one grouping execution."""

    model_config = ConfigDict(frozen=True)

    id: str
    camp_id: str | None = None
    run_type: RunType = RunType.INITIAL
    triggered_by: str | None = None
    trigger_reason: str = ""

    # Input stats
    total_campers: int = 0
    total_friend_groups: int = 0
    late_registrations: int = 0
    grade_discrepancies: int = 0

    config: GroupingConfig

    # Results
    algorithm_version: str
    execution_time_ms: float = 0.0
    campers_auto_placed: int = 0
    friend_groups_placed_intact: int = 0
    friend_groups_split: int = 0
    constraint_violations: int = 0

    # Outcome
    success: bool = False
    error_message: str | None = None
    warnings: list[str] = Field(default_factory=list)

    # Preservation
    preserved_manual_overrides: bool = False
    overrides_preserved_count: int = 0

    created_at: datetime
