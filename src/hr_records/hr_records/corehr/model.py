from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from ..common.datetime_utils import iso


def _plain(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return iso(value)
    if isinstance(value, Decimal):
        return str(value)
    return value


@dataclass(frozen=True)
class RecordFilter:
    search: Optional[str] = None
    status: Optional[str] = None
    employee_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort: str = "created_at"
    direction: str = "desc"


@dataclass(frozen=True)
class HRRecord:
    """One row of an HR record table (award, warning, promotion, ...).

    ``values`` holds the kind-specific columns; workflow columns are only
    meaningful for kinds with an approval workflow.
    """

    record_id: int
    resource: str
    employee_id: int
    values: Mapping[str, Any] = field(default_factory=dict)
    status: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    employee: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.record_id, "employee_id": self.employee_id}
        data.update({k: _plain(v) for k, v in self.values.items()})
        if self.status is not None:
            data.update(
                {
                    "status": self.status,
                    "approved_by": self.approved_by,
                    "approved_at": iso(self.approved_at),
                    "remarks": self.remarks,
                }
            )
        data["created_at"] = iso(self.created_at)
        if self.employee is not None:
            data["employee"] = dict(self.employee)
        return data
