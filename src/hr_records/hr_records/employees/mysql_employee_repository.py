from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "id, idno, Fname, Lname, MName, Department, Line, Jobtitle, JobStatus, payrate, EndOfContract"
_UPDATABLE = frozenset({"Department", "Line", "Jobtitle", "JobStatus", "payrate", "EndOfContract"})


def to_employee(row: Dict[str, Any]) -> Employee:
    payrate = row.get("payrate")
    return Employee(
        employee_id=int(row["id"]),
        idno=str(row["idno"]),
        first_name=row["Fname"],
        last_name=row["Lname"],
        middle_name=row.get("MName"),
        department=row.get("Department"),
        line=row.get("Line"),
        job_title=row.get("Jobtitle"),
        job_status=row.get("JobStatus") or "Active",
        payrate=Decimal(str(payrate)) if payrate is not None else None,
        end_of_contract=row.get("EndOfContract"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(employee_id),))
            row = fetchone(cur)
            return to_employee(row) if row else None

    def get_by_idno(self, idno: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE idno=%s", (str(idno),))
            row = fetchone(cur)
            return to_employee(row) if row else None

    def list_employees(self, *, active_only: bool = False, search: Optional[str] = None) -> List[Employee]:
        where = WhereBuilder()
        if active_only:
            where.add("JobStatus=%s", "Active")
        if search:
            where.like_any(("Fname", "Lname", "idno"), search)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {where.sql} ORDER BY Lname, Fname",
                tuple(where.params),
            )
            return [to_employee(r) for r in fetchall(cur)]


def update_employee(cur, employee_id: int, fields: Mapping[str, Any]) -> None:
    """Run the employees UPDATE on an open cursor, inside the caller's transaction."""
    unknown = set(fields) - _UPDATABLE
    if unknown:
        raise ValueError(f"Not an updatable employee column: {sorted(unknown)}")
    if not fields:
        return
    columns = list(fields)
    assignments = ", ".join(f"{c}=%s" for c in columns)
    params = [fields[c] for c in columns] + [int(employee_id)]
    cur.execute(f"UPDATE employees SET {assignments} WHERE id=%s", tuple(params))
