from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchone, paginate
from ..employees.mysql_employee_repository import update_employee
from .definitions import RecordKind
from .model import HRRecord, RecordFilter
from .repository import RecordRepository

_EMPLOYEE_COLUMNS = ("idno", "Fname", "Lname", "Department", "Line", "Jobtitle")


def _select(kind: RecordKind) -> str:
    cols = ["r.id", "r.employee_id", "r.created_at"] + [f"r.{c}" for c in kind.columns]
    if kind.workflow:
        cols += ["r.status", "r.approved_by", "r.approved_at", "r.remarks"]
    cols += [f"e.{c} AS emp_{c}" for c in _EMPLOYEE_COLUMNS]
    return f"SELECT {', '.join(cols)} FROM {kind.table} r JOIN employees e ON e.id = r.employee_id"


def _to_record(kind: RecordKind, row: Dict[str, Any]) -> HRRecord:
    employee = {"id": int(row["employee_id"])}
    employee.update({c: row.get(f"emp_{c}") for c in _EMPLOYEE_COLUMNS})
    return HRRecord(
        record_id=int(row["id"]),
        resource=kind.resource,
        employee_id=int(row["employee_id"]),
        values={c: row.get(c) for c in kind.columns},
        status=row.get("status") if kind.workflow else None,
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        remarks=row.get("remarks"),
        created_at=row.get("created_at"),
        employee=employee,
    )


class MySQLRecordRepository(RecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_records(
        self, kind: RecordKind, flt: RecordFilter, *, page: int, per_page: int
    ) -> Tuple[Sequence[HRRecord], int]:
        where = WhereBuilder()
        if flt.employee_id is not None:
            where.add("r.employee_id=%s", int(flt.employee_id))
        if flt.status and kind.workflow:
            where.add("r.status=%s", flt.status)
        if flt.date_from:
            where.add(f"r.{kind.date_field} >= %s", flt.date_from)
        if flt.date_to:
            where.add(f"r.{kind.date_field} <= %s", flt.date_to)
        if flt.search:
            columns = ["e.Fname", "e.Lname", "e.idno"] + [f"r.{c}" for c in kind.search_fields]
            where.like_any(columns, flt.search)

        # sort is checked against kind.sortable by the service
        direction = "ASC" if flt.direction == "asc" else "DESC"
        select_sql = f"{_select(kind)} WHERE {where.sql} ORDER BY r.{flt.sort} {direction}, r.id {direction}"
        count_sql = (
            f"SELECT COUNT(*) AS total FROM {kind.table} r JOIN employees e ON e.id = r.employee_id WHERE {where.sql}"
        )
        with db_cursor(self._conn_factory) as (_, cur):
            rows, total = paginate(
                cur, select_sql=select_sql, count_sql=count_sql, params=where.params, page=page, per_page=per_page
            )
            return [_to_record(kind, r) for r in rows], total

    def get(self, kind: RecordKind, record_id: int) -> Optional[HRRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_select(kind)} WHERE r.id=%s", (int(record_id),))
            row = fetchone(cur)
            return _to_record(kind, row) if row else None

    def create(self, kind: RecordKind, *, employee_id: int, values: Mapping[str, Any], created_by: Optional[int]) -> int:
        columns: List[str] = ["employee_id"] + [c for c in kind.columns if c in values]
        params: List[Any] = [int(employee_id)] + [values[c] for c in columns[1:]]
        if kind.owner_column:
            columns.append(kind.owner_column)
            params.append(created_by)
        if kind.workflow:
            columns.append("status")
            params.append("pending")

        placeholders = ", ".join(["%s"] * len(columns))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO {kind.table} ({', '.join(columns)}) VALUES ({placeholders})",
                tuple(params),
            )
            return int(cur.lastrowid)

    def update(self, kind: RecordKind, record_id: int, *, employee_id: int, values: Mapping[str, Any]) -> None:
        columns = [c for c in kind.columns if c in values]
        assignments = ", ".join(["employee_id=%s"] + [f"{c}=%s" for c in columns])
        params = [int(employee_id)] + [values[c] for c in columns] + [int(record_id)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE {kind.table} SET {assignments} WHERE id=%s", tuple(params))

    def set_status(
        self,
        kind: RecordKind,
        record_id: int,
        *,
        from_status: str,
        status: str,
        approved_by: Optional[int],
        approved_at: Optional[datetime],
        remarks: Optional[str],
        employee_fields: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE {kind.table} SET status=%s, approved_by=%s, approved_at=%s, remarks=%s "
                "WHERE id=%s AND status=%s",
                (status, approved_by, approved_at, remarks, int(record_id), from_status),
            )
            if cur.rowcount != 1:
                return False
            if employee_fields:
                cur.execute(f"SELECT employee_id FROM {kind.table} WHERE id=%s", (int(record_id),))
                update_employee(cur, int(fetchone(cur)["employee_id"]), employee_fields)
            return True

    def delete(self, kind: RecordKind, record_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {kind.table} WHERE id=%s", (int(record_id),))
