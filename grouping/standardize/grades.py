"""
Grade parsing, DOB-based grade computation and grade display.

Grades are integers from -1 (Pre-K) through 12. Parent-entered grade strings
are free text ("Kindergarten", "3rd grade", "pre-k", "fifth"), so parsing is
pattern based and returns None rather than guessing.
"""

from __future__ import annotations

import re
from datetime import date

from ..constants import GRADE_LEVELS, MAX_GRADE, MIN_GRADE, GradeLevel
from .ages import calculate_age_at_date

_PRE_K_PATTERN = re.compile(r"^(pre-?k|pre-?kindergarten|pk|preschool)$", re.IGNORECASE)
_KINDERGARTEN_PATTERN = re.compile(r"^(kindergarten|kinder|k)$", re.IGNORECASE)
_NUMERIC_PATTERN = re.compile(r"^(\d+)(st|nd|rd|th)?(\s*(grade)?)?$", re.IGNORECASE)

# Matched by substring, in order
_WORD_GRADES: tuple[tuple[str, int], ...] = (
    ("first", 1),
    ("second", 2),
    ("third", 3),
    ("fourth", 4),
    ("fifth", 5),
    ("sixth", 6),
    ("seventh", 7),
    ("eighth", 8),
    ("ninth", 9),
    ("tenth", 10),
    ("eleventh", 11),
    ("twelfth", 12),
)

_GRADE_LEVELS_BY_NUMBER: dict[int, GradeLevel] = {level.grade_numeric: level for level in GRADE_LEVELS}


def parse_grade(grade_str: str | None) -> int | None:
    """Parse a free-text grade into its numeric value.

    Handles:
        - "Pre-K", "PreK", "PK", "preschool" -> -1
        - "Kindergarten", "Kinder", "K" -> 0
        - "1", "1st", "1st Grade", "12th grade" -> 1..12
        - "First" .. "Twelfth" -> 1..12

    Args:
        grade_str: Grade as entered on the registration form

    Returns:
        Numeric grade (-1 to 12), or None if the text is not recognized
    """
    if not grade_str or not grade_str.strip():
        return None

    normalized = grade_str.strip().lower()

    if _PRE_K_PATTERN.match(normalized):
        return -1

    if _KINDERGARTEN_PATTERN.match(normalized):
        return 0

    numeric_match = _NUMERIC_PATTERN.match(normalized)
    if numeric_match:
        grade = int(numeric_match.group(1))
        if 1 <= grade <= MAX_GRADE:
            return grade

    for word, grade in _WORD_GRADES:
        if word in normalized:
            return grade

    return None


def school_year_start(camp_start_date: date, cutoff_month: int) -> date:
    """First day of the school year a camp date falls in.

    Camps on or after the cutoff month belong to the school year starting that
    calendar year; earlier camps belong to the one that started the year before.
    """
    year = camp_start_date.year if camp_start_date.month >= cutoff_month else camp_start_date.year - 1
    return date(year, cutoff_month, 1)


def compute_grade_from_dob(date_of_birth: date, camp_start_date: date, cutoff_month: int = 9) -> int:
    """Expected grade for a child based only on date of birth.

    A child who is 5 at the start of the school year is in Kindergarten, 6 is
    1st grade, and so on. The result is clamped to [-1, 12].
    """
    age_at_school_start = calculate_age_at_date(date_of_birth, school_year_start(camp_start_date, cutoff_month))
    return clamp_grade(age_at_school_start - 5)


def clamp_grade(grade: int) -> int:
    return max(MIN_GRADE, min(MAX_GRADE, grade))


def get_grade_level_info(grade_numeric: int) -> GradeLevel | None:
    """Look up the reference row for a numeric grade."""
    return _GRADE_LEVELS_BY_NUMBER.get(grade_numeric)


def format_grade_display(grade_numeric: int) -> str:
    """Short display label: "Pre-K", "K", "1st", "2nd", "3rd", "4th" ... "12th"."""
    if get_grade_level_info(grade_numeric) is None:
        return f"Grade {grade_numeric}"
    if grade_numeric == -1:
        return "Pre-K"
    if grade_numeric == 0:
        return "K"
    if grade_numeric == 1:
        return "1st"
    if grade_numeric == 2:
        return "2nd"
    if grade_numeric == 3:
        return "3rd"
    return f"{grade_numeric}th"


def format_grade_name(grade_numeric: int) -> str:
    """Long display label, e.g. "Kindergarten" or "3rd Grade"."""
    info = get_grade_level_info(grade_numeric)
    return info.grade_name if info else f"Grade {grade_numeric}"


def format_grade_range(min_grade: int, max_grade: int) -> str:
    """Display a grade range, e.g. "K - 2nd" (a single label when min == max)."""
    if min_grade == max_grade:
        return format_grade_display(min_grade)
    return f"{format_grade_display(min_grade)} - {format_grade_display(max_grade)}"


def detect_grade_discrepancy(reported_grade: int | None, computed_grade: int, threshold: int = 1) -> bool:
    """Whether reported and DOB-derived grades disagree by more than ``threshold`` levels.

    A one-level difference is normal (state cutoff differences, parents entering
    the upcoming grade), so the default threshold tolerates it. A missing
    reported grade is never a discrepancy.
    """
    if reported_grade is None:
        return False
    return abs(reported_grade - computed_grade) > threshold


def get_discrepancy_explanation(
    reported_grade: int,
    computed_grade: int,
    date_of_birth: date,
    camp_start_date: date,
) -> str:
    """Human-readable explanation of a grade discrepancy for directors."""
    age_at_camp = calculate_age_at_date(date_of_birth, camp_start_date)
    reported_display = format_grade_display(reported_grade)
    computed_display = format_grade_display(computed_grade)

    prefix = (
        f"Parent reported {reported_display}, but DOB ({age_at_camp} years old at camp) "
        f"suggests {computed_display}."
    )
    if reported_grade > computed_grade:
        return f"{prefix} This camper may be advanced or the parent entered the upcoming school year grade."
    return f"{prefix} This camper may have been held back or there may be a data entry error."
