"""
Constraint violation records.

Violations are typed evidence produced by a run, not exceptions. Each kind is
its own model carrying exactly the fields relevant to it; the union is
discriminated on ``violation_type`` so serialized records round-trip back into
the right variant.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .config.errors import ViolationAlreadyResolvedError


class ViolationType(str, Enum):
    """Kinds of constraint violation."""

    SIZE_EXCEEDED = "size_exceeded"
    GRADE_SPREAD_EXCEEDED = "grade_spread_exceeded"
    FRIEND_GROUP_SPLIT = "friend_group_split"
    FRIEND_GROUP_TOO_LARGE = "friend_group_too_large"
    IMPOSSIBLE_PLACEMENT = "impossible_placement"
    GRADE_DISCREPANCY = "grade_discrepancy"


class ViolationSeverity(str, Enum):
    """Severity of a violation.

    A run succeeds only when no HARD violations remain.
    """

    WARNING = "warning"
    HARD = "hard"


class ResolutionType(str, Enum):
    """How a director closed out a violation."""

    AUTO_FIXED = "auto_fixed"
    MANUAL_OVERRIDE = "manual_override"
    ACCEPTED = "accepted"
    DISMISSED = "dismissed"


class ViolationResolution(BaseModel):
    """Who resolved a violation, when, and how."""

    model_config = ConfigDict(frozen=True)

    resolved_by: str
    resolved_at: datetime
    resolution_type: ResolutionType
    note: str | None = None


class _ViolationBase(BaseModel):
    """Fields shared by every violation kind."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    suggested_resolution: str | None = None
    resolution: ViolationResolution | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolution is not None

    @property
    def affected_camper_ids(self) -> list[str]:
        return list(getattr(self, "camper_ids", []))

    @property
    def affected_group_id(self) -> str | None:
        return getattr(self, "group_id", None)

    @property
    def affected_friend_group_id(self) -> str | None:
        return getattr(self, "friend_group_id", None)

    @property
    def dedup_key(self) -> tuple[str, str]:
        """Identity of the fact this violation reports: (type, affected entity)."""
        raise NotImplementedError

    def resolve(
        self,
        resolved_by: str,
        resolution_type: ResolutionType,
        note: str | None = None,
        resolved_at: datetime | None = None,
    ) -> Self:
        """Return a resolved copy of this violation.

        Args:
            resolved_by: Who resolved it (user id or "system")
            resolution_type: How it was resolved
            note: Optional free-text note
            resolved_at: Resolution timestamp (defaults to now, UTC)

        Raises:
            ViolationAlreadyResolvedError: If the violation already has a resolution
        """
        if self.resolution is not None:
            raise ViolationAlreadyResolvedError(
                f"Violation {self.id} was already resolved by {self.resolution.resolved_by}"
            )
        resolution = ViolationResolution(
            resolved_by=resolved_by,
            resolved_at=resolved_at or datetime.now(UTC),
            resolution_type=resolution_type,
            note=note,
        )
        return self.model_copy(update={"resolution": resolution})


class SizeExceededViolation(_ViolationBase):
    """A group holds more campers than the size ceiling."""

    violation_type: Literal["size_exceeded"] = "size_exceeded"
    severity: Literal["hard"] = "hard"
    group_id: str
    camper_ids: list[str] = Field(default_factory=list)
    friend_group_id: str | None = None
    current_size: int
    max_size: int

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.violation_type, self.group_id)


class GradeSpreadExceededViolation(_ViolationBase):
    """A group spans more grade levels than allowed."""

    violation_type: Literal["grade_spread_exceeded"] = "grade_spread_exceeded"
    severity: Literal["hard"] = "hard"
    group_id: str
    camper_ids: list[str] = Field(default_factory=list)
    friend_group_id: str | None = None
    min_grade: int
    max_grade: int
    grade_spread: int
    max_grade_spread: int

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.violation_type, self.group_id)


class FriendGroupSplitViolation(_ViolationBase):
    """Members of one friend group ended up in more than one group."""

    violation_type: Literal["friend_group_split"] = "friend_group_split"
    severity: Literal["warning"] = "warning"
    friend_group_id: str
    camper_ids: list[str] = Field(default_factory=list)
    group_ids: list[str] = Field(default_factory=list)

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.violation_type, self.friend_group_id)


class FriendGroupTooLargeViolation(_ViolationBase):
    """A friend group has more members than one group can hold."""

    violation_type: Literal["friend_group_too_large"] = "friend_group_too_large"
    severity: Literal["warning"] = "warning"
    friend_group_id: str
    camper_ids: list[str] = Field(default_factory=list)
    member_count: int
    max_size: int

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.violation_type, self.friend_group_id)


class ImpossiblePlacementViolation(_ViolationBase):
    """Campers that could not be placed into any group."""

    violation_type: Literal["impossible_placement"] = "impossible_placement"
    severity: Literal["hard"] = "hard"
    camper_ids: list[str]
    group_id: str | None = None

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.violation_type, self.group_id or ",".join(self.camper_ids))


class GradeDiscrepancyViolation(_ViolationBase):
    """Reported grade and DOB-derived grade disagree by more than the threshold."""

    violation_type: Literal["grade_discrepancy"] = "grade_discrepancy"
    severity: Literal["warning"] = "warning"
    camper_id: str
    reported_grade: int
    computed_grade: int

    @property
    def affected_camper_ids(self) -> list[str]:
        return [self.camper_id]

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.violation_type, self.camper_id)


ConstraintViolation = Annotated[
    SizeExceededViolation
    | GradeSpreadExceededViolation
    | FriendGroupSplitViolation
    | FriendGroupTooLargeViolation
    | ImpossiblePlacementViolation
    | GradeDiscrepancyViolation,
    Field(discriminator="violation_type"),
]

violation_adapter: TypeAdapter[ConstraintViolation] = TypeAdapter(ConstraintViolation)


def parse_violation(data: dict) -> ConstraintViolation:
    """Parse a serialized violation back into its concrete variant."""
    return violation_adapter.validate_python(data)
