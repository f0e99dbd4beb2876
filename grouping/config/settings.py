"""
Deployment-wide grouping defaults using pydantic-settings.

Every field can be set through a GROUPING_-prefixed environment variable or a
.env file. Per-camp overrides are layered on top by resolve_grouping_config().
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigValidationError
from .types import GroupingConfig

logger = logging.getLogger(__name__)


class GroupingSettings(BaseSettings):
    """Grouping defaults loaded from the environment.

    All settings have sensible defaults matching the camp's standard setup
    (five groups of up to twelve, two-grade spread, September school year).
    """

    model_config = SettingsConfigDict(
        env_prefix="GROUPING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    max_group_size: int = Field(default=12, ge=1, description="Maximum campers per group")
    num_groups: int = Field(default=5, ge=1, description="Number of groups per camp")
    max_grade_spread: int = Field(default=2, ge=0, description="Maximum grade spread inside a group")
    school_year_cutoff_month: int = Field(
        default=9,
        ge=1,
        le=12,
        description="Month the school year starts (used to derive grade from date of birth)",
    )
    late_registration_days: int = Field(
        default=7,
        ge=0,
        description="Registrations within this many days of camp start are flagged late",
    )
    grade_discrepancy_threshold: int = Field(
        default=1,
        ge=0,
        description="Reported vs DOB grade difference tolerated before flagging a discrepancy",
    )

    def to_config(self) -> GroupingConfig:
        """Build the immutable config value object from these settings."""
        return GroupingConfig(**self.model_dump())


@lru_cache
def get_grouping_settings() -> GroupingSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the process.
    """
    return GroupingSettings()


def resolve_grouping_config(
    overrides: Mapping[str, Any] | None = None,
    settings: GroupingSettings | None = None,
) -> GroupingConfig:
    """Merge per-camp overrides onto the deployment defaults.

    Args:
        overrides: Per-camp values keyed by GroupingConfig field name (None values are ignored)
        settings: Settings to start from (defaults to the cached environment settings)

    Returns:
        Validated, immutable GroupingConfig

    Raises:
        ConfigValidationError: If an override key is unknown or a value is invalid
    """
    base = (settings or get_grouping_settings()).model_dump()

    if overrides:
        unknown = sorted(set(overrides) - set(GroupingConfig.model_fields))
        if unknown:
            raise ConfigValidationError(f"Unknown grouping config keys: {', '.join(unknown)}")
        base.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = GroupingConfig(**base)
    except PydanticValidationError as e:
        raise ConfigValidationError(f"Invalid grouping config: {e}") from e

    logger.debug(f"Resolved grouping config: {config.model_dump()}")
    return config
