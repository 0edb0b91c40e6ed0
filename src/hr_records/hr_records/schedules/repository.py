from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import EmployeeSchedule, ScheduleFilter


class ScheduleRepository(Protocol):
    """Per-day schedule rows.

    A "group" is every row sharing ``(employee_id, effective_date)``: the days
    created together from one form submission.
    """

    def list_rows(self, flt: ScheduleFilter) -> Sequence[EmployeeSchedule]:
        """Rows ordered by employee, then monday..sunday, then newest effective date."""
        raise NotImplementedError

    def get(self, schedule_id: int) -> Optional[EmployeeSchedule]:
        raise NotImplementedError

    def find_conflicts(
        self, employee_id: int, work_days: Sequence[str], effective_date: date
    ) -> Sequence[EmployeeSchedule]:
        """Non-inactive rows on ``work_days`` still in effect on ``effective_date``."""
        raise NotImplementedError

    def create_many(self, rows: Sequence[Mapping[str, Any]]) -> Sequence[int]:
        raise NotImplementedError

    def replace_group(self, employee_id: int, effective_date: date, rows: Sequence[Mapping[str, Any]]) -> Sequence[int]:
        raise NotImplementedError

    def delete_group(self, employee_id: int, effective_date: date) -> int:
        raise NotImplementedError

    def set_group_status(self, employee_id: int, effective_date: date, status: str) -> int:
        raise NotImplementedError

    def import_rows(
        self, effective_date: date, rows: Sequence[Mapping[str, Any]], *, replace: Sequence[int] = ()
    ) -> Sequence[int]:
        """Insert ``rows`` after dropping the ``effective_date`` group of each
        employee in ``replace``; all of it in one transaction."""
        raise NotImplementedError
