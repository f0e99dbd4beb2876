"""Tests for the grouping config value object, env-backed settings and override resolution."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from grouping.config import (
    DEFAULT_GROUPING_CONFIG,
    ConfigValidationError,
    GroupingConfig,
    GroupingSettings,
    get_grouping_settings,
    resolve_grouping_config,
)


class TestGroupingConfig:
    """Test the immutable config value object."""

    def test_defaults(self):
        """Defaults are five groups of twelve with a two-grade spread."""
        config = GroupingConfig()

        assert config.max_group_size == 12
        assert config.num_groups == 5
        assert config.max_grade_spread == 2
        assert config.school_year_cutoff_month == 9
        assert config.late_registration_days == 7
        assert config.grade_discrepancy_threshold == 1
        assert config.total_capacity == 60

    def test_frozen(self):
        """Config cannot be mutated after creation."""
        with pytest.raises(ValidationError):
            DEFAULT_GROUPING_CONFIG.num_groups = 3

    def test_rejects_out_of_range_values(self):
        """Zero groups and an invalid cutoff month are rejected."""
        with pytest.raises(ValidationError):
            GroupingConfig(num_groups=0)
        with pytest.raises(ValidationError):
            GroupingConfig(school_year_cutoff_month=13)

    def test_rejects_unknown_fields(self):
        """Typos in field names fail loudly."""
        with pytest.raises(ValidationError):
            GroupingConfig(max_groups=4)


class TestGroupingSettings:
    """Test environment-backed defaults."""

    def test_reads_prefixed_env_vars(self, monkeypatch):
        """GROUPING_* variables override the defaults."""
        monkeypatch.setenv("GROUPING_NUM_GROUPS", "7")
        monkeypatch.setenv("GROUPING_MAX_GRADE_SPREAD", "3")

        config = GroupingSettings().to_config()

        assert config.num_groups == 7
        assert config.max_grade_spread == 3
        assert config.max_group_size == 12

    def test_settings_are_cached(self):
        """The settings accessor returns the same instance until cleared."""
        assert get_grouping_settings() is get_grouping_settings()


class TestResolveGroupingConfig:
    """Test layering per-camp overrides onto the defaults."""

    def test_no_overrides_returns_defaults(self):
        """Without overrides the settings defaults come through."""
        assert resolve_grouping_config() == GroupingConfig()

    def test_overrides_win(self, monkeypatch):
        """Per-camp values beat environment defaults."""
        monkeypatch.setenv("GROUPING_NUM_GROUPS", "7")

        config = resolve_grouping_config({"num_groups": 4}, settings=GroupingSettings())

        assert config.num_groups == 4

    def test_none_values_are_ignored(self):
        """A None override leaves the default alone."""
        config = resolve_grouping_config({"num_groups": None, "max_group_size": 10})

        assert config.num_groups == 5
        assert config.max_group_size == 10

    def test_unknown_key_raises(self):
        """Unknown override keys raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="max_groups"):
            resolve_grouping_config({"max_groups": 4})

    def test_invalid_value_raises(self):
        """Invalid values are reported as ConfigValidationError, not a raw pydantic error."""
        with pytest.raises(ConfigValidationError):
            resolve_grouping_config({"max_group_size": 0})
