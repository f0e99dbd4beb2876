"""Raw registration data -> standardized campers."""

from __future__ import annotations

from .ages import calculate_age_at_date, calculate_age_months_at_date, is_late_registration
from .friend_matching import (
    FriendMatcher,
    RosterEntry,
    match_friends_to_campers,
    normalize_friend_name,
    parse_friend_requests,
)
from .grades import (
    compute_grade_from_dob,
    detect_grade_discrepancy,
    format_grade_display,
    format_grade_name,
    format_grade_range,
    get_discrepancy_explanation,
    get_grade_level_info,
    parse_grade,
)
from .standardizer import (
    RosterStandardization,
    StandardizationResult,
    standardize_camper,
    standardize_roster,
)

__all__ = [
    "calculate_age_at_date",
    "calculate_age_months_at_date",
    "is_late_registration",
    "FriendMatcher",
    "RosterEntry",
    "match_friends_to_campers",
    "normalize_friend_name",
    "parse_friend_requests",
    "compute_grade_from_dob",
    "detect_grade_discrepancy",
    "format_grade_display",
    "format_grade_name",
    "format_grade_range",
    "get_discrepancy_explanation",
    "get_grade_level_info",
    "parse_grade",
    "RosterStandardization",
    "StandardizationResult",
    "standardize_camper",
    "standardize_roster",
]
