"""
Configuration for the grouping engine.

Usage:
    from grouping.config import GroupingConfig, resolve_grouping_config

    # Deployment defaults (GROUPING_* env vars) plus per-camp overrides
    config = resolve_grouping_config({"num_groups": 6})

    # Or build one directly
    config = GroupingConfig(max_group_size=10)
"""

from __future__ import annotations

from .errors import (
    ConfigError,
    ConfigValidationError,
    GroupingError,
    GroupingInputError,
    ViolationAlreadyResolvedError,
)
from .settings import GroupingSettings, get_grouping_settings, resolve_grouping_config
from .types import DEFAULT_GROUPING_CONFIG, GroupingConfig

__all__ = [
    # Value object
    "GroupingConfig",
    "DEFAULT_GROUPING_CONFIG",
    # Settings
    "GroupingSettings",
    "get_grouping_settings",
    "resolve_grouping_config",
    # Error classes
    "GroupingError",
    "ConfigError",
    "ConfigValidationError",
    "GroupingInputError",
    "ViolationAlreadyResolvedError",
]
