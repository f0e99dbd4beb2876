"""The immutable configuration value object consumed by every grouping stage."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GroupingConfig(BaseModel):
    """Parameters for one grouping run.

    Attributes:
        max_group_size: Hard ceiling on campers per group
        num_groups: Number of groups (bins) to fill
        max_grade_spread: Largest allowed max-min grade difference inside a group
        school_year_cutoff_month: Month (1-12) the school year starts in
        late_registration_days: Registrations within this many days of camp start are late
        grade_discrepancy_threshold: Reported vs DOB grade difference tolerated before flagging
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_group_size: int = Field(default=12, ge=1)
    num_groups: int = Field(default=5, ge=1)
    max_grade_spread: int = Field(default=2, ge=0)
    school_year_cutoff_month: int = Field(default=9, ge=1, le=12)
    late_registration_days: int = Field(default=7, ge=0)
    grade_discrepancy_threshold: int = Field(default=1, ge=0)

    @property
    def total_capacity(self) -> int:
        return self.max_group_size * self.num_groups


DEFAULT_GROUPING_CONFIG = GroupingConfig()
