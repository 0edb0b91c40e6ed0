from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v[:10])
    except ValueError:
        return None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_working_days(start: date, end: date, holidays: Iterable[date] = ()) -> int:
    """Days in [start, end] that are neither weekend nor holiday."""
    skip = set(holidays)
    return sum(1 for d in iter_days(start, end) if d.weekday() < 5 and d not in skip)


def hours_between(start: datetime, end: datetime) -> int:
    """Whole hours between two datetimes, regardless of order."""
    return int(abs((end - start).total_seconds()) // 3600)


def iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)
