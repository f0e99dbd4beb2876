"""
Camper standardization.

Turns raw registration records into StandardizedCamper records: age at camp
start, validated grade, discrepancy and lateness flags, and matched friend ids.
Bad input never raises here; the camper is standardized with best-effort
defaults and a warning is recorded instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from ..config.types import DEFAULT_GROUPING_CONFIG, GroupingConfig
from ..models import RawCamper, StandardizedCamper
from .ages import (
    calculate_age_at_date,
    calculate_age_months_at_date,
    is_late_registration,
    parse_date,
    parse_datetime,
)
from .friend_matching import FriendMatcher, RosterEntry, parse_friend_requests
from .grades import (
    compute_grade_from_dob,
    detect_grade_discrepancy,
    format_grade_display,
    format_grade_name,
    get_discrepancy_explanation,
    parse_grade,
)

logger = logging.getLogger(__name__)


@dataclass
class StandardizationResult:
    """One standardized camper plus the warnings raised while standardizing it."""

    camper: StandardizedCamper
    warnings: list[str] = field(default_factory=list)


@dataclass
class RosterStandardization:
    """A whole standardized roster."""

    campers: list[StandardizedCamper] = field(default_factory=list)
    warnings: dict[str, list[str]] = field(default_factory=dict)  # athlete_id -> warnings

    @property
    def all_warnings(self) -> list[str]:
        """Flattened warnings, prefixed with the camper they belong to."""
        return [f"{athlete_id}: {w}" for athlete_id, items in self.warnings.items() for w in items]


def roster_entries(raw_campers: list[RawCamper]) -> list[RosterEntry]:
    return [RosterEntry(c.athlete_id, c.first_name, c.last_name) for c in raw_campers]


def standardize_camper(
    raw: RawCamper,
    camp_start_date: date,
    roster: list[RosterEntry] | FriendMatcher,
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
) -> StandardizationResult:
    """Standardize one camper's registration data.

    Args:
        raw: Registration record
        camp_start_date: First day of camp (ages and grades are computed as of this date)
        roster: Everyone registered for the camp, or a prebuilt matcher over them
        config: Grouping configuration (cutoff month, late window, discrepancy threshold)

    Returns:
        StandardizationResult with the camper and any warnings
    """
    warnings: list[str] = []

    reported_numeric = parse_grade(raw.reported_grade)
    if raw.reported_grade and raw.reported_grade.strip() and reported_numeric is None:
        warnings.append(f"Reported grade '{raw.reported_grade}' was not recognized; using grade from date of birth")

    dob = parse_date(raw.date_of_birth)
    if dob is None:
        warnings.append(
            f"Date of birth '{raw.date_of_birth or ''}' could not be parsed; "
            "age unknown and grade taken from registration"
        )
        age_years = 0
        age_months = 0
        grade_computed = reported_numeric if reported_numeric is not None else 0
        has_discrepancy = False
    else:
        age_years = calculate_age_at_date(dob, camp_start_date)
        age_months = calculate_age_months_at_date(dob, camp_start_date)
        grade_computed = compute_grade_from_dob(dob, camp_start_date, config.school_year_cutoff_month)
        has_discrepancy = detect_grade_discrepancy(
            reported_numeric, grade_computed, config.grade_discrepancy_threshold
        )
        if has_discrepancy:
            warnings.append(get_discrepancy_explanation(reported_numeric, grade_computed, dob, camp_start_date))

    grade_validated = reported_numeric if reported_numeric is not None else grade_computed

    friend_requests = parse_friend_requests(raw.friend_requests)
    matcher = roster if isinstance(roster, FriendMatcher) else FriendMatcher(roster)
    match = matcher.match(friend_requests, exclude_id=raw.athlete_id)
    if match.unmatched_names:
        warnings.append(
            f"{len(match.unmatched_names)} friend request(s) could not be matched to registered campers"
        )

    is_late = False
    if raw.registered_at:
        registered_at = parse_datetime(raw.registered_at)
        if registered_at is None:
            warnings.append(f"Registration timestamp '{raw.registered_at}' could not be parsed")
        else:
            is_late = is_late_registration(registered_at, camp_start_date, config.late_registration_days)
            if is_late:
                warnings.append(
                    f"Late registration - registered within {config.late_registration_days} days of camp start"
                )

    camper = StandardizedCamper(
        athlete_id=raw.athlete_id,
        registration_id=raw.registration_id,
        first_name=raw.first_name,
        last_name=raw.last_name,
        date_of_birth=raw.date_of_birth,
        age_years=age_years,
        age_months=age_months,
        reported_grade=raw.reported_grade,
        reported_grade_numeric=reported_numeric,
        grade_validated=grade_validated,
        grade_computed=grade_computed,
        has_grade_discrepancy=has_discrepancy,
        grade_display=format_grade_display(grade_validated),
        grade_name=format_grade_name(grade_validated),
        friend_requests=friend_requests,
        matched_friend_ids=match.matched_ids,
        registered_at=raw.registered_at,
        is_late_registration=is_late,
        medical_notes=raw.medical_notes,
        allergies=raw.allergies,
        special_considerations=raw.special_considerations,
        assigned_group_id=raw.assigned_group_id,
        assignment_type=raw.assignment_type,
    )

    if warnings:
        logger.debug(f"Standardized {raw.athlete_id} with {len(warnings)} warning(s)")

    return StandardizationResult(camper=camper, warnings=warnings)


def standardize_roster(
    raw_campers: list[RawCamper],
    camp_start_date: date,
    config: GroupingConfig = DEFAULT_GROUPING_CONFIG,
) -> RosterStandardization:
    """Standardize every camper in a camp against the same roster.

    Args:
        raw_campers: All registrations for the camp
        camp_start_date: First day of camp
        config: Grouping configuration

    Returns:
        RosterStandardization with campers in input order and per-camper warnings
    """
    matcher = FriendMatcher(roster_entries(raw_campers))
    result = RosterStandardization()

    for raw in raw_campers:
        standardized = standardize_camper(raw, camp_start_date, matcher, config)
        result.campers.append(standardized.camper)
        if standardized.warnings:
            result.warnings[raw.athlete_id] = standardized.warnings

    logger.info(
        f"Standardized {len(result.campers)} campers "
        f"({sum(c.has_grade_discrepancy for c in result.campers)} grade discrepancies, "
        f"{sum(c.is_late_registration for c in result.campers)} late registrations)"
    )
    return result
