"""
Timezone-aware datetime helpers and the injectable clock.
- Store and compute in UTC in DB.
- Business dates (leave ranges, attendance days) are plain calendar dates.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC. Used for all API response datetime fields."""
    if dt is None:
        return None
    s = ensure_utc(dt).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar date in [start, end], inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(check_date: date) -> bool:
    """Saturday or Sunday (Monday=0 ... Sunday=6)"""
    return check_date.weekday() >= 5


class Clock:
    """Wall clock used by the leave engine. Swap for FixedClock in tests."""

    def now(self) -> datetime:
        return now_utc()

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime):
        self.instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self.instant

    def advance(self, **kwargs) -> None:
        self.instant = self.instant + timedelta(**kwargs)
