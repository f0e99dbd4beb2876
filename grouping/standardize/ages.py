"""Date parsing, age arithmetic and late-registration detection."""

from __future__ import annotations

from datetime import UTC, date, datetime, time


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date or datetime string into a date.

    Returns None for empty or malformed input instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse an ISO datetime (or bare date) into a naive UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def calculate_age_at_date(date_of_birth: date, at_date: date) -> int:
    """Age in complete years on a given date (never negative)."""
    age = at_date.year - date_of_birth.year
    if (at_date.month, at_date.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return max(0, age)


def calculate_age_months_at_date(date_of_birth: date, at_date: date) -> int:
    """Age in complete months on a given date (never negative)."""
    total_months = (at_date.year - date_of_birth.year) * 12 + (at_date.month - date_of_birth.month)
    if at_date.day < date_of_birth.day:
        total_months -= 1
    return max(0, total_months)


def is_late_registration(registered_at: datetime, camp_start_date: date, window_days: int) -> bool:
    """Whether a registration landed fewer than ``window_days`` days before camp starts.

    Args:
        registered_at: When the registration was made (naive UTC)
        camp_start_date: First day of camp
        window_days: Late-registration window in days

    Returns:
        True if (camp start - registered_at) in days is below the window
    """
    camp_start = datetime.combine(camp_start_date, time.min)
    days_before_camp = (camp_start - registered_at).total_seconds() / 86400
    return days_before_camp < window_days
