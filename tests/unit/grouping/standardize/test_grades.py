"""Tests for grade parsing, DOB-based grade computation and grade display."""

from __future__ import annotations

from datetime import date

import pytest

from grouping.standardize.grades import (
    compute_grade_from_dob,
    detect_grade_discrepancy,
    format_grade_display,
    format_grade_name,
    format_grade_range,
    get_discrepancy_explanation,
    get_grade_level_info,
    parse_grade,
    school_year_start,
)

CAMP_START = date(2025, 6, 16)


class TestParseGrade:
    """Test free-text grade parsing."""

    @pytest.mark.parametrize("text", ["Pre-K", "prek", "PK", "Preschool", "pre-kindergarten"])
    def test_pre_k(self, text):
        """Pre-K spellings map to -1."""
        assert parse_grade(text) == -1

    @pytest.mark.parametrize("text", ["K", "kinder", "Kindergarten", "  k  "])
    def test_kindergarten(self, text):
        """Kindergarten spellings map to 0."""
        assert parse_grade(text) == 0

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("1", 1), ("3rd", 3), ("3rd grade", 3), ("12th Grade", 12), ("fifth", 5), ("Second Grade", 2)],
    )
    def test_numeric_and_words(self, text, expected):
        """Ordinals, digits and spelled-out grades are recognized."""
        assert parse_grade(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "13", "0", "senior", "grade three"])
    def test_unrecognized_returns_none(self, text):
        """Unrecognized or out-of-range text is None, never a guess."""
        assert parse_grade(text) is None


class TestComputeGradeFromDob:
    """Test expected grade from date of birth."""

    def test_summer_camp_uses_previous_school_year(self):
        """A June camp belongs to the school year that started the previous September."""
        assert school_year_start(CAMP_START, 9) == date(2024, 9, 1)
        assert school_year_start(date(2025, 10, 1), 9) == date(2025, 9, 1)

    def test_age_eight_at_school_start_is_third_grade(self):
        """Age 8 on September 1 means 3rd grade."""
        assert compute_grade_from_dob(date(2016, 3, 10), CAMP_START) == 3

    def test_birthday_after_cutoff(self):
        """A child still 4 on September 1 is Pre-K."""
        assert compute_grade_from_dob(date(2019, 10, 1), CAMP_START) == -1

    def test_clamped_to_range(self):
        """Very young and very old children are clamped to [-1, 12]."""
        assert compute_grade_from_dob(date(2023, 1, 1), CAMP_START) == -1
        assert compute_grade_from_dob(date(2000, 1, 1), CAMP_START) == 12

    def test_cutoff_month_is_configurable(self):
        """An April cutoff puts a June camp in the school year that started that April."""
        assert compute_grade_from_dob(date(2016, 3, 10), CAMP_START, cutoff_month=4) == 4


class TestGradeDisplay:
    """Test display helpers."""

    @pytest.mark.parametrize(
        ("grade", "expected"),
        [(-1, "Pre-K"), (0, "K"), (1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (12, "12th"), (15, "Grade 15")],
    )
    def test_format_grade_display(self, grade, expected):
        """Short labels use ordinals."""
        assert format_grade_display(grade) == expected

    def test_format_grade_name(self):
        """Long names come from the reference table."""
        assert format_grade_name(0) == "Kindergarten"
        assert format_grade_name(3) == "3rd Grade"
        assert format_grade_name(20) == "Grade 20"

    def test_format_grade_range(self):
        """Ranges are joined with a dash; a single grade is shown once."""
        assert format_grade_range(0, 2) == "K - 2nd"
        assert format_grade_range(3, 3) == "3rd"

    def test_grade_level_info(self):
        """Reference rows carry typical ages."""
        info = get_grade_level_info(1)

        assert info is not None
        assert info.grade_short == "1"
        assert (info.typical_age_start, info.typical_age_end) == (6, 7)
        assert get_grade_level_info(13) is None


class TestGradeDiscrepancy:
    """Test discrepancy detection and explanation."""

    def test_one_level_is_tolerated(self):
        """A single-grade difference is normal."""
        assert detect_grade_discrepancy(4, 3) is False
        assert detect_grade_discrepancy(2, 3) is False

    def test_two_levels_flagged(self):
        """More than one level apart is a discrepancy."""
        assert detect_grade_discrepancy(5, 3) is True
        assert detect_grade_discrepancy(1, 3) is True

    def test_missing_reported_grade_never_flags(self):
        """No reported grade, nothing to compare."""
        assert detect_grade_discrepancy(None, 3) is False

    def test_threshold_is_configurable(self):
        """A zero threshold flags any difference."""
        assert detect_grade_discrepancy(4, 3, threshold=0) is True

    def test_explanation_advanced(self):
        """Higher reported grade suggests advanced placement."""
        text = get_discrepancy_explanation(5, 3, date(2016, 3, 10), CAMP_START)

        assert text.startswith("Parent reported 5th, but DOB (9 years old at camp) suggests 3rd.")
        assert "advanced" in text

    def test_explanation_held_back(self):
        """Lower reported grade suggests the camper was held back."""
        text = get_discrepancy_explanation(1, 3, date(2016, 3, 10), CAMP_START)

        assert "held back" in text
