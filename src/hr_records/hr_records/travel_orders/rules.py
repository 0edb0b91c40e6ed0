"""Day counting and the full-day rule for travel orders."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Optional, Tuple

from ..common.datetime_utils import count_working_days, hours_between
from ..core.constants import (
    EARLY_DEPARTURE_HOUR,
    FULL_DAY_COMBINED_HOURS,
    FULL_DAY_TRAVEL_HOURS,
    LATE_RETURN_HOUR,
    SHORT_OFFICE_RETURN_HOURS,
)


def day_counts(start: date, end: date, holidays: Iterable[date] = ()) -> Tuple[int, int]:
    """``(total_days, working_days)``; both ends inclusive."""
    total = (end - start).days + 1
    return total, count_working_days(start, end, holidays)


def _hours(a: time, b: time) -> int:
    return hours_between(datetime.combine(date.min, a), datetime.combine(date.min, b))


def is_full_day(
    departure: Optional[time],
    return_: Optional[time],
    return_to_office: bool = False,
    office_return: Optional[time] = None,
) -> bool:
    if departure is None or return_ is None:
        return True

    travel_hours = _hours(departure, return_)

    if return_to_office and office_return is not None:
        office_hours = _hours(return_, office_return)
        if office_hours < SHORT_OFFICE_RETURN_HOURS:
            return True
        return travel_hours + office_hours >= FULL_DAY_COMBINED_HOURS

    if travel_hours >= FULL_DAY_TRAVEL_HOURS:
        return True
    return departure.hour < EARLY_DEPARTURE_HOUR or return_.hour >= LATE_RETURN_HOUR
