"""Inert lookup tables shared by the grouping engine.

Grade levels, display palettes and the algorithm version tag. Everything here is
a tuple or a frozen mapping so nothing can be mutated at runtime.
"""

from __future__ import annotations

from typing import NamedTuple

ALGORITHM_VERSION = "1.0.0"

MIN_GRADE = -1  # Pre-K
MAX_GRADE = 12


class GradeLevel(NamedTuple):
    """Reference row for a single school grade."""

    grade_numeric: int
    grade_name: str
    grade_short: str
    typical_age_start: int
    typical_age_end: int


GRADE_LEVELS: tuple[GradeLevel, ...] = (
    GradeLevel(-1, "Pre-Kindergarten", "PK", 4, 5),
    GradeLevel(0, "Kindergarten", "K", 5, 6),
    GradeLevel(1, "1st Grade", "1", 6, 7),
    GradeLevel(2, "2nd Grade", "2", 7, 8),
    GradeLevel(3, "3rd Grade", "3", 8, 9),
    GradeLevel(4, "4th Grade", "4", 9, 10),
    GradeLevel(5, "5th Grade", "5", 10, 11),
    GradeLevel(6, "6th Grade", "6", 11, 12),
    GradeLevel(7, "7th Grade", "7", 12, 13),
    GradeLevel(8, "8th Grade", "8", 13, 14),
    GradeLevel(9, "9th Grade", "9", 14, 15),
    GradeLevel(10, "10th Grade", "10", 15, 16),
    GradeLevel(11, "11th Grade", "11", 16, 17),
    GradeLevel(12, "12th Grade", "12", 17, 18),
)

# Indexed by position: group N uses entry N-1, falling back past the end of the table
GROUP_COLORS: tuple[str, ...] = (
    "#CCFF00",  # Neon Green
    "#FF2DCE",  # Hot Magenta
    "#6F00D8",  # Electric Purple
    "#22C55E",  # Success Green
    "#F59E0B",  # Warning Orange
    "#06B6D4",  # Cyan
    "#EC4899",  # Pink
    "#8B5CF6",  # Violet
    "#10B981",  # Emerald
    "#F97316",  # Orange
)

GROUP_NAMES: tuple[str, ...] = (
    "Lightning",
    "Thunder",
    "Storm",
    "Blaze",
    "Phoenix",
    "Titans",
    "Falcons",
    "Panthers",
    "Vipers",
    "Wolves",
)

DEFAULT_GROUP_COLOR = GROUP_COLORS[0]


def group_id_for(group_number: int) -> str:
    """Stable identifier for the Nth group of a camp."""
    return f"group-{group_number}"


def group_name_for(group_number: int) -> str:
    idx = group_number - 1
    if 0 <= idx < len(GROUP_NAMES):
        return GROUP_NAMES[idx]
    return f"Group {group_number}"


def group_color_for(group_number: int) -> str:
    idx = group_number - 1
    if 0 <= idx < len(GROUP_COLORS):
        return GROUP_COLORS[idx]
    return DEFAULT_GROUP_COLOR
