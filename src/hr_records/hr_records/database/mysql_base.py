from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as ``timedelta`` from the pure connector,
    sometimes as ``time`` or ``'HH:MM[:SS]'``; schedules want ``time``."""
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        minutes, seconds = divmod(int(value.total_seconds()) % 86400, 60)
        return time(minutes // 60, minutes % 60, seconds)
    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*parts[:3])
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


class WhereBuilder:
    """Accumulates ``AND``-joined clauses with their positional params."""

    def __init__(self) -> None:
        self.clauses: list[str] = ["1=1"]
        self.params: list[object] = []

    def add(self, clause: str, *params: object) -> "WhereBuilder":
        self.clauses.append(clause)
        self.params.extend(params)
        return self

    def like_any(self, columns: Sequence[str], term: str) -> "WhereBuilder":
        pattern = f"%{term}%"
        self.clauses.append("(" + " OR ".join(f"{c} LIKE %s" for c in columns) + ")")
        self.params.extend([pattern] * len(columns))
        return self

    @property
    def sql(self) -> str:
        return " AND ".join(self.clauses)


def paginate(cur, *, select_sql: str, count_sql: str, params: Sequence[object], page: int, per_page: int) -> Tuple[List[Dict[str, Any]], int]:
    cur.execute(count_sql, tuple(params))
    total_row = fetchone(cur)
    total = int(next(iter(total_row.values()))) if total_row else 0
    offset = max(page - 1, 0) * per_page
    cur.execute(f"{select_sql} LIMIT %s OFFSET %s", tuple(list(params) + [int(per_page), int(offset)]))
    return fetchall(cur), total
