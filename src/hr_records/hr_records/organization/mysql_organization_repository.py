from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department, Line
from .repository import OrganizationRepository


def _to_department(r: Dict[str, Any]) -> Department:
    return Department(department_id=int(r["id"]), name=r["name"], code=r.get("code"), is_active=bool(r["is_active"]))


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_departments(self, *, active_only: bool = True) -> Sequence[Department]:
        sql = "SELECT id, name, code, is_active FROM departments"
        if active_only:
            sql += " WHERE is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY name")
            return [_to_department(r) for r in fetchall(cur)]

    def list_lines(self, *, active_only: bool = True) -> Sequence[Line]:
        sql = "SELECT id, name, code, department_id, is_active FROM production_lines"
        if active_only:
            sql += " WHERE is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY name")
            rows = fetchall(cur)
            return [
                Line(
                    line_id=int(r["id"]),
                    name=r["name"],
                    code=r.get("code"),
                    department_id=r.get("department_id"),
                    is_active=bool(r["is_active"]),
                )
                for r in rows
            ]

    def get_department_by_name(self, name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, code, is_active FROM departments WHERE name=%s", (name,))
            row = fetchone(cur)
            return _to_department(row) if row else None
