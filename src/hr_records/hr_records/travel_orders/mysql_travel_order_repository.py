from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone
from .model import TravelOrder, TravelOrderFilter
from .repository import TravelOrderRepository

COLUMNS = (
    "employee_id",
    "start_date",
    "end_date",
    "departure_time",
    "return_time",
    "destination",
    "transportation_type",
    "purpose",
    "accommodation_required",
    "meal_allowance",
    "other_expenses",
    "estimated_cost",
    "return_to_office",
    "office_return_time",
    "total_days",
    "working_days",
    "is_full_day",
    "status",
    "approved_by",
    "approved_at",
    "remarks",
    "created_by",
    "document_paths",
    "force_approved",
    "force_approved_by",
    "force_approved_at",
    "force_approve_remarks",
)

_SELECT = (
    "SELECT t.id, t.created_at, "
    + ", ".join(f"t.{c}" for c in COLUMNS)
    + ", e.idno AS emp_idno, e.Fname AS emp_Fname, e.Lname AS emp_Lname, e.Department AS emp_Department"
    + " FROM travel_orders t JOIN employees e ON e.id = t.employee_id"
)

_BOOLEAN_COLUMNS = ("accommodation_required", "meal_allowance", "return_to_office", "is_full_day", "force_approved")


def _documents(value: Any) -> tuple:
    if not value:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value)
    return tuple(str(v) for v in value or [])


def _to_order(row: Dict[str, Any]) -> TravelOrder:
    cost = row.get("estimated_cost")
    return TravelOrder(
        order_id=int(row["id"]),
        employee_id=int(row["employee_id"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        destination=row["destination"],
        transportation_type=row["transportation_type"],
        purpose=row["purpose"],
        departure_time=row.get("departure_time"),
        return_time=row.get("return_time"),
        accommodation_required=bool(row.get("accommodation_required")),
        meal_allowance=bool(row.get("meal_allowance")),
        other_expenses=row.get("other_expenses"),
        estimated_cost=Decimal(str(cost)) if cost is not None else None,
        return_to_office=bool(row.get("return_to_office")),
        office_return_time=row.get("office_return_time"),
        total_days=int(row.get("total_days") or 0),
        working_days=int(row.get("working_days") or 0),
        is_full_day=bool(row.get("is_full_day")),
        status=row["status"],
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        remarks=row.get("remarks"),
        created_by=row.get("created_by"),
        document_paths=_documents(row.get("document_paths")),
        force_approved=bool(row.get("force_approved")),
        force_approved_by=row.get("force_approved_by"),
        force_approved_at=row.get("force_approved_at"),
        force_approve_remarks=row.get("force_approve_remarks"),
        created_at=row.get("created_at"),
        employee={
            "id": int(row["employee_id"]),
            "idno": row.get("emp_idno"),
            "Fname": row.get("emp_Fname"),
            "Lname": row.get("emp_Lname"),
            "Department": row.get("emp_Department"),
        },
    )


def _db_value(column: str, value: Any) -> Any:
    if column == "document_paths":
        return json.dumps(list(value or []))
    if column in _BOOLEAN_COLUMNS:
        return 1 if value else 0
    return value


class MySQLTravelOrderRepository(TravelOrderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_orders(self, flt: TravelOrderFilter) -> Sequence[TravelOrder]:
        where = WhereBuilder()
        if flt.employee_id is not None:
            where.add("t.employee_id=%s", int(flt.employee_id))
        if flt.status:
            where.add("t.status=%s", flt.status)
        if flt.date_from:
            where.add("t.end_date >= %s", flt.date_from)
        if flt.date_to:
            where.add("t.start_date <= %s", flt.date_to)
        if flt.search:
            where.like_any(("e.Fname", "e.Lname", "e.idno", "t.destination", "t.purpose"), flt.search)

        direction = "ASC" if flt.direction == "asc" else "DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where.sql} ORDER BY t.{flt.sort} {direction}, t.id {direction}",
                tuple(where.params),
            )
            return [_to_order(r) for r in fetchall(cur)]

    def get(self, order_id: int) -> Optional[TravelOrder]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.id=%s", (int(order_id),))
            row = fetchone(cur)
            return _to_order(row) if row else None

    def find_overlap(
        self, employee_id: int, start: date, end: date, *, exclude_id: Optional[int] = None
    ) -> Optional[TravelOrder]:
        where = WhereBuilder()
        where.add("t.employee_id=%s", int(employee_id))
        where.add("t.status <> %s", "rejected")
        where.add("t.start_date <= %s AND t.end_date >= %s", end, start)
        if exclude_id is not None:
            where.add("t.id <> %s", int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where.sql} ORDER BY t.start_date LIMIT 1", tuple(where.params))
            row = fetchone(cur)
            return _to_order(row) if row else None

    def create(self, values: Mapping[str, Any]) -> int:
        columns: List[str] = [c for c in COLUMNS if c in values]
        placeholders = ", ".join(["%s"] * len(columns))
        params = [_db_value(c, values[c]) for c in columns]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO travel_orders ({', '.join(columns)}) VALUES ({placeholders})", tuple(params))
            return int(cur.lastrowid)

    def update(self, order_id: int, values: Mapping[str, Any]) -> None:
        columns = [c for c in COLUMNS if c in values]
        if not columns:
            return
        assignments = ", ".join(f"{c}=%s" for c in columns)
        params = [_db_value(c, values[c]) for c in columns] + [int(order_id)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE travel_orders SET {assignments} WHERE id=%s", tuple(params))

    def transition(self, order_id: int, from_status: str, values: Mapping[str, Any]) -> bool:
        columns = [c for c in COLUMNS if c in values]
        assignments = ", ".join(f"{c}=%s" for c in columns)
        params = [_db_value(c, values[c]) for c in columns] + [int(order_id), from_status]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE travel_orders SET {assignments} WHERE id=%s AND status=%s", tuple(params))
            return cur.rowcount == 1

    def delete(self, order_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM travel_orders WHERE id=%s", (int(order_id),))
