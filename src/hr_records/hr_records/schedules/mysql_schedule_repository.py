from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.enums import WorkDay
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import EmployeeSchedule, ScheduleFilter
from .repository import ScheduleRepository

COLUMNS = (
    "employee_id",
    "shift_type",
    "work_day",
    "start_time",
    "end_time",
    "break_start",
    "break_end",
    "effective_date",
    "end_date",
    "status",
    "notes",
    "created_by",
)

_SELECT = (
    "SELECT s.id, "
    + ", ".join(f"s.{c}" for c in COLUMNS)
    + ", e.idno AS emp_idno, e.Fname AS emp_Fname, e.Lname AS emp_Lname, e.Department AS emp_Department"
    + " FROM employee_schedules s JOIN employees e ON e.id = s.employee_id"
)

_DAY_ORDER = "FIELD(s.work_day, " + ", ".join(f"'{d.value}'" for d in WorkDay) + ")"


def _to_schedule(row: Dict[str, Any]) -> EmployeeSchedule:
    return EmployeeSchedule(
        schedule_id=int(row["id"]),
        employee_id=int(row["employee_id"]),
        shift_type=row["shift_type"],
        work_day=row["work_day"],
        start_time=normalize_mysql_time(row["start_time"]),
        end_time=normalize_mysql_time(row["end_time"]),
        break_start=normalize_mysql_time(row.get("break_start")),
        break_end=normalize_mysql_time(row.get("break_end")),
        effective_date=row["effective_date"],
        end_date=row.get("end_date"),
        status=row["status"],
        notes=row.get("notes"),
        created_by=row.get("created_by"),
        employee={
            "id": int(row["employee_id"]),
            "idno": row.get("emp_idno"),
            "Fname": row.get("emp_Fname"),
            "Lname": row.get("emp_Lname"),
            "Department": row.get("emp_Department"),
        },
    )


def _insert(cur, rows: Sequence[Mapping[str, Any]]) -> List[int]:
    ids: List[int] = []
    placeholders = ", ".join(["%s"] * len(COLUMNS))
    for row in rows:
        cur.execute(
            f"INSERT INTO employee_schedules ({', '.join(COLUMNS)}) VALUES ({placeholders})",
            tuple(row.get(c) for c in COLUMNS),
        )
        ids.append(int(cur.lastrowid))
    return ids


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_rows(self, flt: ScheduleFilter) -> Sequence[EmployeeSchedule]:
        where = WhereBuilder()
        if flt.search:
            where.like_any(
                (
                    "e.Fname",
                    "e.Lname",
                    "e.idno",
                    "e.Department",
                    "CONCAT(e.Fname, ' ', e.Lname)",
                    "CONCAT(e.Lname, ', ', e.Fname)",
                    "s.shift_type",
                    "s.notes",
                ),
                flt.search,
            )
        if flt.department:
            where.add("e.Department=%s", flt.department)
        if flt.shift_type:
            where.add("s.shift_type=%s", flt.shift_type)
        if flt.status:
            where.add("s.status=%s", flt.status)
        if flt.work_day:
            where.add("s.work_day=%s", flt.work_day)
        if flt.employee_id is not None:
            where.add("s.employee_id=%s", int(flt.employee_id))
        if flt.date_from:
            where.add("s.effective_date >= %s", flt.date_from)
        if flt.date_to:
            where.add("(s.end_date IS NULL OR s.end_date <= %s)", flt.date_to)
        if flt.current_on:
            where.add("s.status=%s", "active")
            where.add("s.effective_date <= %s", flt.current_on)
            where.add("(s.end_date IS NULL OR s.end_date >= %s)", flt.current_on)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where.sql} ORDER BY s.employee_id, {_DAY_ORDER}, s.effective_date DESC",
                tuple(where.params),
            )
            return [_to_schedule(r) for r in fetchall(cur)]

    def get(self, schedule_id: int) -> Optional[EmployeeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE s.id=%s", (int(schedule_id),))
            row = fetchone(cur)
            return _to_schedule(row) if row else None

    def find_conflicts(
        self, employee_id: int, work_days: Sequence[str], effective_date: date
    ) -> Sequence[EmployeeSchedule]:
        if not work_days:
            return []
        days = ", ".join(["%s"] * len(work_days))
        sql = (
            f"{_SELECT} WHERE s.employee_id=%s AND s.work_day IN ({days})"
            " AND s.effective_date <= %s AND (s.end_date IS NULL OR s.end_date >= %s)"
            " AND s.status <> 'inactive'"
            f" ORDER BY {_DAY_ORDER}"
        )
        params = (int(employee_id), *work_days, effective_date, effective_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_schedule(r) for r in fetchall(cur)]

    def create_many(self, rows: Sequence[Mapping[str, Any]]) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _insert(cur, rows)

    def replace_group(self, employee_id: int, effective_date: date, rows: Sequence[Mapping[str, Any]]) -> Sequence[int]:
        # one transaction: db_cursor rolls back the delete if an insert fails
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM employee_schedules WHERE employee_id=%s AND effective_date=%s",
                (int(employee_id), effective_date),
            )
            return _insert(cur, rows)

    def delete_group(self, employee_id: int, effective_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM employee_schedules WHERE employee_id=%s AND effective_date=%s",
                (int(employee_id), effective_date),
            )
            return int(cur.rowcount)

    def set_group_status(self, employee_id: int, effective_date: date, status: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee_schedules SET status=%s WHERE employee_id=%s AND effective_date=%s",
                (status, int(employee_id), effective_date),
            )
            return int(cur.rowcount)

    def import_rows(
        self, effective_date: date, rows: Sequence[Mapping[str, Any]], *, replace: Sequence[int] = ()
    ) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            for employee_id in replace:
                cur.execute(
                    "DELETE FROM employee_schedules WHERE employee_id=%s AND effective_date=%s",
                    (int(employee_id), effective_date),
                )
            return _insert(cur, rows)
