from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from werkzeug.datastructures import FileStorage

from ..common.datetime_utils import iso, iter_days, now_local, parse_optional_date
from ..common.query import optional_int
from ..common.validators import FieldErrors, to_bool
from ..core.constants import MAX_SCHEDULE_IMPORT_BYTES, SCHEDULE_IMPORT_EXTENSIONS
from ..core.enums import Role, ScheduleStatus, ShiftType, WorkDay
from ..core.exceptions import DomainError, NotFoundError, ScheduleConflictError, ValidationError
from ..employees.service import EmployeeService
from ..uploads.storage import extension_of, file_size
from ..users.permissions import ensure_manager
from . import importer
from .model import EmployeeSchedule, ScheduleFilter
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 42

_DAY_INDEX = {d.value: i for i, d in enumerate(WorkDay.ordered())}


def _choice(value: Any, enum_cls) -> Optional[str]:
    v = (value or "").strip().lower() if isinstance(value, str) else None
    return v if v in {e.value for e in enum_cls} else None


def group_by_employee(rows: Sequence[EmployeeSchedule]) -> List[Dict[str, Any]]:
    """One entry per employee, days ordered monday..sunday.

    The first row of each employee is the representative: its id addresses
    the group for update, status and delete.
    """
    grouped: Dict[int, List[EmployeeSchedule]] = {}
    for row in rows:
        grouped.setdefault(row.employee_id, []).append(row)

    result: List[Dict[str, Any]] = []
    for employee_id, items in grouped.items():
        items = sorted(items, key=lambda s: (_DAY_INDEX[s.work_day], -s.effective_date.toordinal()))
        first = items[0]
        data = first.to_dict()
        data.update(
            {
                "employee_id": employee_id,
                "employee": dict(first.employee) if first.employee is not None else None,
                "work_days": [s.work_day for s in items],
                "work_days_formatted": ", ".join(s.work_day_abbrev for s in items),
                "schedules_count": len(items),
                "individual_schedules": [s.to_dict() for s in items],
            }
        )
        result.append(data)
    return result


class ScheduleService:
    """Employee schedules stored as one row per working day."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        employees: EmployeeService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._schedules = schedules
        self._employees = employees
        self._clock = clock

    # ---- reads

    def _filter(self, args: Mapping[str, Any]) -> ScheduleFilter:
        return ScheduleFilter(
            search=(args.get("search") or "").strip() or None,
            department=(args.get("department") or "").strip() or None,
            shift_type=_choice(args.get("shift_type"), ShiftType),
            status=_choice(args.get("status"), ScheduleStatus),
            work_day=_choice(args.get("work_day"), WorkDay),
            employee_id=optional_int(args.get("employee_id")),
            date_from=parse_optional_date(args.get("date_from")),
            date_to=parse_optional_date(args.get("date_to")),
            current_on=self._clock().date() if to_bool(args.get("current_only")) else None,
        )

    def list_grouped(self, args: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._schedules.list_rows(self._filter(args))
        grouped = group_by_employee(rows)
        return {"schedules": grouped, "total": len(grouped), "raw_schedules_count": len(rows)}

    def get(self, schedule_id: int) -> EmployeeSchedule:
        schedule = self._schedules.get(int(schedule_id))
        if schedule is None:
            raise NotFoundError("Employee schedule not found.")
        return schedule

    def calendar(self, args: Mapping[str, Any]) -> Dict[str, Any]:
        today = self._clock().date()
        start = parse_optional_date(args.get("start")) or today - timedelta(days=today.weekday())
        end = parse_optional_date(args.get("end")) or start + timedelta(days=6)
        if end < start:
            raise ValidationError.for_field("end", "The end must be a date after or equal to start.")
        if (end - start).days + 1 > MAX_CALENDAR_DAYS:
            raise ValidationError.for_field("end", f"The calendar may span at most {MAX_CALENDAR_DAYS} days.")

        flt = self._filter(args)
        rows = self._schedules.list_rows(
            ScheduleFilter(
                search=flt.search,
                department=flt.department,
                shift_type=flt.shift_type,
                employee_id=flt.employee_id,
                status=ScheduleStatus.ACTIVE.value,
            )
        )

        days = []
        for day in iter_days(start, end):
            entries = []
            for s in rows:
                if not s.applies_on(day):
                    continue
                employee = s.employee or {}
                entries.append(
                    {
                        "schedule_id": s.schedule_id,
                        "employee_id": s.employee_id,
                        "employee_name": f"{employee.get('Lname')}, {employee.get('Fname')}",
                        "shift_type": s.shift_type,
                        "start_time": s.to_dict()["start_time"],
                        "end_time": s.to_dict()["end_time"],
                    }
                )
            days.append({"date": iso(day), "work_day": WorkDay.from_weekday(day.weekday()).value, "schedules": entries})
        return {"start": iso(start), "end": iso(end), "days": days}

    def for_employee_on(self, employee_id: int, day: Optional[date] = None) -> Optional[EmployeeSchedule]:
        day = day or self._clock().date()
        rows = self._schedules.list_rows(ScheduleFilter(employee_id=int(employee_id), status=ScheduleStatus.ACTIVE.value))
        for row in rows:
            if row.applies_on(day):
                return row
        return None

    def statistics(self, args: Mapping[str, Any]) -> Dict[str, Any]:
        flt = self._filter(args)
        rows = self._schedules.list_rows(
            ScheduleFilter(department=flt.department, shift_type=flt.shift_type, status=flt.status)
        )
        return {
            "total_schedules": len(rows),
            "total_employees": len({r.employee_id for r in rows}),
            "by_shift_type": dict(Counter(r.shift_type for r in rows)),
            "by_status": dict(Counter(r.status for r in rows)),
            "by_work_day": {d.value: sum(1 for r in rows if r.work_day == d.value) for d in WorkDay.ordered()},
        }

    # ---- writes

    def create(self, *, current_role: Role, user_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        ensure_manager(current_role)
        v = FieldErrors(data)
        employee_ids = self._employee_ids(v)
        fields = self._validate(v)
        v.raise_if_any()

        conflicts = []
        for employee_id in employee_ids:
            existing = self._schedules.find_conflicts(employee_id, fields["work_days"], fields["effective_date"])
            if existing:
                employee = self._employees.get(employee_id)
                conflicts.append(
                    {
                        "employee_id": employee_id,
                        "idno": employee.idno if employee else None,
                        "employee_name": f"{employee.first_name} {employee.last_name}" if employee else str(employee_id),
                        "conflicts": sorted({s.work_day for s in existing}, key=_DAY_INDEX.__getitem__),
                    }
                )
        if conflicts:
            raise ScheduleConflictError(conflicts)

        rows = [self._row(employee_id, day, fields, user_id) for employee_id in employee_ids for day in fields["work_days"]]
        ids = self._schedules.create_many(rows)
        logger.info("Created %d schedule rows for %d employees by user %s", len(ids), len(employee_ids), user_id)
        return {
            "message": "Employee schedules created successfully",
            "schedules": [self.get(i).to_dict() for i in ids],
            "total_created": len(ids),
        }

    def update(self, *, current_role: Role, user_id: int, schedule_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Replace every day of the schedule's group with the submitted days."""
        ensure_manager(current_role)
        schedule = self.get(schedule_id)
        v = FieldErrors(data)
        fields = self._validate(v, default_status=schedule.status)
        v.raise_if_any()

        rows = [self._row(schedule.employee_id, day, fields, user_id) for day in fields["work_days"]]
        ids = self._schedules.replace_group(schedule.employee_id, schedule.effective_date, rows)
        logger.info("Schedule group of employee %s replaced (%d rows) by user %s", schedule.employee_id, len(ids), user_id)
        return {
            "message": "Employee schedule updated successfully",
            "schedules": [self.get(i).to_dict() for i in ids],
            "total_updated": len(ids),
        }

    def update_status(self, *, current_role: Role, user_id: int, schedule_id: int, status: str) -> Dict[str, Any]:
        ensure_manager(current_role)
        target = _choice(status, ScheduleStatus)
        if target is None:
            raise ValidationError.for_field("status", "The selected status is invalid.")
        schedule = self.get(schedule_id)
        count = self._schedules.set_group_status(schedule.employee_id, schedule.effective_date, target)
        logger.info("Schedule group of employee %s set %s by user %s", schedule.employee_id, target, user_id)
        return {"message": "Schedule status updated successfully", "status": target, "schedules_updated": count}

    def delete(self, *, current_role: Role, user_id: int, schedule_id: int) -> int:
        ensure_manager(current_role)
        schedule = self.get(schedule_id)
        count = self._schedules.delete_group(schedule.employee_id, schedule.effective_date)
        logger.info("Schedule group of employee %s deleted (%d rows) by user %s", schedule.employee_id, count, user_id)
        return count

    def import_file(
        self,
        *,
        current_role: Role,
        user_id: int,
        data: Mapping[str, Any],
        files: Optional[Mapping[str, FileStorage]],
    ) -> Dict[str, Any]:
        """Bulk-create schedules from an uploaded sheet.

        Rows that fail validation are reported as ``"Row N: ..."`` strings and
        skipped; the valid rows are written in one transaction.
        """
        ensure_manager(current_role)
        v = FieldErrors(data)
        file = files.get("file") if files else None
        if file is None or not file.filename:
            v.add("file", "The file field is required.")
        elif extension_of(file.filename) not in SCHEDULE_IMPORT_EXTENSIONS:
            v.add("file", f"The file must be a file of type: {', '.join(sorted(SCHEDULE_IMPORT_EXTENSIONS))}.")
        elif file_size(file) > MAX_SCHEDULE_IMPORT_BYTES:
            v.add("file", f"The file may not be greater than {MAX_SCHEDULE_IMPORT_BYTES // 1024} kilobytes.")
        today = self._clock().date()
        effective_date = v.date("effective_date")
        v.after_or_equal("effective_date", effective_date, "today", today)
        overwrite = v.boolean("overwrite_existing")
        v.raise_if_any()

        effective_date = effective_date or today + timedelta(days=1)
        rows = importer.read_rows(file.filename, file.stream)
        if len(rows) < 2:
            raise DomainError("File appears to be empty or contains no data rows")

        new_rows: List[Dict[str, Any]] = []
        errors: List[str] = []
        skipped = 0
        taken: Dict[int, set] = {}
        # header is row 1
        for number, row in enumerate(rows[1:], start=2):
            if importer.is_blank(row):
                skipped += 1
                continue
            parsed = self._import_row(row, number, effective_date, overwrite, taken)
            if isinstance(parsed, str):
                errors.append(parsed)
                continue
            new_rows.extend(dict(r, created_by=user_id) for r in parsed)

        replace = sorted(taken) if overwrite else []
        ids = self._schedules.import_rows(effective_date, new_rows, replace=replace) if new_rows or replace else []
        logger.info(
            "Schedule import by user %s: %d imported, %d skipped, %d errors, effective %s",
            user_id,
            len(ids),
            skipped,
            len(errors),
            effective_date,
        )

        message = "Import completed successfully."
        if ids:
            message += f" {len(ids)} schedules imported."
        if skipped:
            message += f" {skipped} empty rows skipped."
        if errors:
            message += f" {len(errors)} errors occurred."
        return {
            "success": True,
            "message": message,
            "imported": len(ids),
            "skipped": skipped,
            "errors": errors,
            "effective_date": iso(effective_date),
        }

    def _import_row(
        self, row: Sequence[Any], number: int, effective_date: date, overwrite: bool, taken: Dict[int, set]
    ):
        """Schedule rows for one sheet row, or the error string for it."""
        text = [importer.cell_text(importer.cell(row, i)) for i in range(importer.COL_END_TIME + 1)]
        idno, raw_shift, raw_days = text[importer.COL_IDNO], text[importer.COL_SHIFT_TYPE], text[importer.COL_WORK_DAYS]
        if not all(text):
            return f"Row {number}: Missing required fields (Employee ID, Shift Type, Work Days, Start Time, End Time)"

        employee = self._employees.get_by_idno(idno)
        if employee is None:
            return f"Row {number}: Employee ID '{idno}' not found"

        shift_types = [s.value for s in ShiftType]
        shift_type = raw_shift.lower()
        if shift_type not in shift_types:
            return f"Row {number}: Invalid shift type '{raw_shift}'. Must be one of: {', '.join(shift_types)}"

        days: List[str] = []
        for day in (d.strip().lower() for d in raw_days.split(",")):
            if day and day not in days:
                days.append(day)
        invalid = [d for d in days if d not in _DAY_INDEX]
        if not days or invalid:
            return f"Row {number}: Invalid work days: {', '.join(invalid) or raw_days}"
        days.sort(key=_DAY_INDEX.__getitem__)

        start_time = importer.cell_time(importer.cell(row, importer.COL_START_TIME))
        end_time = importer.cell_time(importer.cell(row, importer.COL_END_TIME))
        if start_time is None or end_time is None:
            return f"Row {number}: Invalid time format. Use HH:MM format (e.g., 09:00, 17:30)"

        break_start = break_end = None
        raw_break_start = importer.cell(row, importer.COL_BREAK_START)
        raw_break_end = importer.cell(row, importer.COL_BREAK_END)
        if importer.cell_text(raw_break_start) and importer.cell_text(raw_break_end):
            break_start = importer.cell_time(raw_break_start)
            break_end = importer.cell_time(raw_break_end)
            if break_start is None or break_end is None:
                return f"Row {number}: Invalid break time format"

        end_date = None
        raw_end_date = importer.cell(row, importer.COL_END_DATE)
        if importer.cell_text(raw_end_date):
            end_date = importer.cell_date(raw_end_date)
            if end_date is None or end_date <= effective_date:
                return f"Row {number}: Invalid end date '{importer.cell_text(raw_end_date)}'"

        status = importer.cell_text(importer.cell(row, importer.COL_STATUS)).lower() or ScheduleStatus.ACTIVE.value
        if status not in {s.value for s in ScheduleStatus}:
            return f"Row {number}: Invalid status '{status}'"

        if employee.employee_id not in taken:
            # with overwrite the stored group is dropped, so only this file's days count
            existing = [] if overwrite else self._schedules.list_rows(ScheduleFilter(employee_id=employee.employee_id))
            taken[employee.employee_id] = {s.work_day for s in existing if s.effective_date == effective_date}
        for day in days:
            if day in taken[employee.employee_id]:
                return (
                    f"Row {number}: Schedule for {employee.first_name} {employee.last_name} "
                    f"on {day} already exists for {iso(effective_date)}"
                )
        taken[employee.employee_id].update(days)

        notes = importer.cell_text(importer.cell(row, importer.COL_NOTES)) or None
        fields = {
            "shift_type": shift_type,
            "start_time": start_time,
            "end_time": end_time,
            "break_start": break_start,
            "break_end": break_end,
            "effective_date": effective_date,
            "end_date": end_date,
            "status": status,
            "notes": notes[:500] if notes else None,
        }
        return [dict(fields, employee_id=employee.employee_id, work_day=day) for day in days]

    # ---- helpers

    def _employee_ids(self, v: FieldErrors) -> List[int]:
        raw = v.string_list("employee_ids") or v.string_list("employee_id")
        if not raw:
            v.add("employee_ids", "The employee_ids field is required.")
        ids: List[int] = []
        for i, value in enumerate(raw):
            try:
                employee_id = int(value)
            except ValueError:
                v.add(f"employee_ids.{i}", f"The employee_ids.{i} must be an integer.")
                continue
            if self._employees.get(employee_id) is None:
                v.add(f"employee_ids.{i}", f"The selected employee_ids.{i} is invalid.")
                continue
            if employee_id not in ids:
                ids.append(employee_id)
        return ids

    def _validate(self, v: FieldErrors, *, default_status: str = ScheduleStatus.ACTIVE.value) -> Dict[str, Any]:
        shift_type = v.choice("shift_type", [s.value for s in ShiftType], required=True)

        days: List[str] = []
        raw_days = v.string_list("work_days", required=True)
        for i, raw in enumerate(raw_days):
            day = raw.lower()
            if day not in _DAY_INDEX:
                v.add(f"work_days.{i}", f"The selected work_days.{i} is invalid.")
            elif day not in days:
                days.append(day)
        days.sort(key=_DAY_INDEX.__getitem__)

        start_time = v.time("start_time", required=True)
        end_time = v.time("end_time", required=True)
        break_start = v.time("break_start")
        break_end = v.time("break_end")
        effective_date = v.date("effective_date", required=True)
        end_date = v.date("end_date")
        status = v.choice("status", [s.value for s in ScheduleStatus]) or default_status
        notes = v.string("notes", max_length=500)

        # night shifts end on the next day
        if shift_type != ShiftType.NIGHT.value:
            v.after("end_time", end_time, "start_time", start_time)
        v.after("break_end", break_end, "break_start", break_start)
        v.after("end_date", end_date, "effective_date", effective_date)

        return {
            "shift_type": shift_type,
            "work_days": days,
            "start_time": start_time,
            "end_time": end_time,
            "break_start": break_start,
            "break_end": break_end,
            "effective_date": effective_date,
            "end_date": end_date,
            "status": status,
            "notes": notes,
        }

    @staticmethod
    def _row(employee_id: int, day: str, fields: Mapping[str, Any], user_id: int) -> Dict[str, Any]:
        row = {k: v for k, v in fields.items() if k != "work_days"}
        row.update(employee_id=employee_id, work_day=day, created_by=user_id)
        return row
