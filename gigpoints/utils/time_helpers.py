"""
UTC time helpers.

All day-boundary decisions in the service are made on UTC dates so that
clients in different time zones agree on what "today" is.
"""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_date(value: datetime | str | None) -> date | None:
    """UTC calendar date of a timestamp (ISO strings accepted)."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return ensure_utc(value).date()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def time_ago(created_at: datetime, now: datetime | None = None) -> str:
    """
    Human readable age used by the points history list.

    Months are 30 days and years are 12 months. Seconds are always
    rendered as "N seconds ago".
    """
    now = ensure_utc(now or utc_now())
    diff_sec = max(0, int((now - ensure_utc(created_at)).total_seconds()))

    if diff_sec < 60:
        return f"{diff_sec} seconds ago"

    diff_min = diff_sec // 60
    if diff_min < 60:
        return _plural(diff_min, "minute")

    diff_hrs = diff_min // 60
    if diff_hrs < 24:
        return _plural(diff_hrs, "hour")

    diff_days = diff_hrs // 24
    if diff_days < 30:
        return _plural(diff_days, "day")

    diff_months = diff_days // 30
    if diff_months < 12:
        return _plural(diff_months, "month")

    return _plural(diff_months // 12, "year")
