from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

from .definitions import RecordKind
from .model import HRRecord, RecordFilter


class RecordRepository(Protocol):
    """Storage for every corehr record kind; the kind selects the table."""

    def list_records(
        self, kind: RecordKind, flt: RecordFilter, *, page: int, per_page: int
    ) -> Tuple[Sequence[HRRecord], int]:
        raise NotImplementedError

    def get(self, kind: RecordKind, record_id: int) -> Optional[HRRecord]:
        raise NotImplementedError

    def create(self, kind: RecordKind, *, employee_id: int, values: Mapping[str, Any], created_by: Optional[int]) -> int:
        raise NotImplementedError

    def update(self, kind: RecordKind, record_id: int, *, employee_id: int, values: Mapping[str, Any]) -> None:
        raise NotImplementedError

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
        """Move the record out of ``from_status`` and apply ``employee_fields``
        to its employee, atomically.

        Returns False, changing nothing, when the record is no longer in
        ``from_status``.
        """
        raise NotImplementedError

    def delete(self, kind: RecordKind, record_id: int) -> None:
        raise NotImplementedError
