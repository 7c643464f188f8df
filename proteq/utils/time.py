"""Time utilities."""
from datetime import UTC, date, datetime, time, timedelta


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def start_of_day(day: date) -> datetime:
    """Return midnight UTC at the beginning of ``day``."""

    return datetime.combine(day, time.min, tzinfo=UTC)


def start_of_next_day(day: date) -> datetime:
    """Return midnight UTC at the end of ``day`` (exclusive upper bound)."""

    return start_of_day(day + timedelta(days=1))


__all__ = ["utcnow", "start_of_day", "start_of_next_day"]
