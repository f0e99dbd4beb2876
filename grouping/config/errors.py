"""Error classes for the grouping engine.

Constraint violations are NOT exceptions - they are returned as records.
Everything here signals either bad configuration or a structural precondition
failure that makes a run meaningless.
"""

from __future__ import annotations


class GroupingError(Exception):
    """Base exception for the grouping package."""

    pass


class ConfigError(GroupingError):
    """Base exception for configuration errors."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when a config value or override key fails validation."""

    pass


class GroupingInputError(GroupingError):
    """Raised when engine input is structurally invalid.

    Examples: no groups configured, duplicate camper ids, an override that
    points at a camper or group that does not exist.
    """

    pass


class ViolationAlreadyResolvedError(GroupingError):
    """Raised when resolving a violation that already carries a resolution."""

    pass
