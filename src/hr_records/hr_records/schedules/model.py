from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, Mapping, Optional

from ..common.datetime_utils import iso
from ..core.enums import WorkDay


def _hms(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value is not None else None


@dataclass(frozen=True)
class ScheduleFilter:
    search: Optional[str] = None
    department: Optional[str] = None
    shift_type: Optional[str] = None
    status: Optional[str] = None
    work_day: Optional[str] = None
    employee_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    current_on: Optional[date] = None


@dataclass(frozen=True)
class EmployeeSchedule:
    """One working day of an employee's schedule."""

    schedule_id: int
    employee_id: int
    shift_type: str
    work_day: str
    start_time: time
    end_time: time
    effective_date: date
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    end_date: Optional[date] = None
    status: str = "active"
    notes: Optional[str] = None
    created_by: Optional[int] = None
    employee: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    @property
    def work_day_abbrev(self) -> str:
        return WorkDay(self.work_day).abbrev

    def applies_on(self, day: date) -> bool:
        """Active, on this weekday, and within its validity window."""
        return (
            self.status == "active"
            and self.work_day == WorkDay.from_weekday(day.weekday()).value
            and self.effective_date <= day
            and (self.end_date is None or self.end_date >= day)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.schedule_id,
            "employee_id": self.employee_id,
            "shift_type": self.shift_type,
            "work_day": self.work_day,
            "work_day_abbrev": self.work_day_abbrev,
            "start_time": _hms(self.start_time),
            "end_time": _hms(self.end_time),
            "break_start": _hms(self.break_start),
            "break_end": _hms(self.break_end),
            "effective_date": iso(self.effective_date),
            "end_date": iso(self.end_date),
            "status": self.status,
            "notes": self.notes,
            "created_by": self.created_by,
        }
