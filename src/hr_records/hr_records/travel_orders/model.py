from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.datetime_utils import iso


@dataclass(frozen=True)
class TravelOrderFilter:
    search: Optional[str] = None
    status: Optional[str] = None
    employee_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort: str = "created_at"
    direction: str = "desc"


@dataclass(frozen=True)
class TravelOrder:
    order_id: int
    employee_id: int
    start_date: date
    end_date: date
    destination: str
    transportation_type: str
    purpose: str
    departure_time: Optional[datetime] = None
    return_time: Optional[datetime] = None
    accommodation_required: bool = False
    meal_allowance: bool = False
    other_expenses: Optional[str] = None
    estimated_cost: Optional[Decimal] = None
    return_to_office: bool = False
    office_return_time: Optional[datetime] = None
    total_days: int = 1
    working_days: int = 0
    is_full_day: bool = True
    status: str = "pending"
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None
    document_paths: Tuple[str, ...] = ()
    force_approved: bool = False
    force_approved_by: Optional[int] = None
    force_approved_at: Optional[datetime] = None
    force_approve_remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    employee: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.order_id,
            "employee_id": self.employee_id,
            "employee": dict(self.employee) if self.employee is not None else None,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "departure_time": iso(self.departure_time),
            "return_time": iso(self.return_time),
            "destination": self.destination,
            "transportation_type": self.transportation_type,
            "purpose": self.purpose,
            "accommodation_required": self.accommodation_required,
            "meal_allowance": self.meal_allowance,
            "other_expenses": self.other_expenses,
            "estimated_cost": str(self.estimated_cost) if self.estimated_cost is not None else None,
            "return_to_office": self.return_to_office,
            "office_return_time": iso(self.office_return_time),
            "total_days": self.total_days,
            "working_days": self.working_days,
            "is_full_day": self.is_full_day,
            "status": self.status,
            "approved_by": self.approved_by,
            "approved_at": iso(self.approved_at),
            "remarks": self.remarks,
            "created_by": self.created_by,
            "document_paths": list(self.document_paths),
            "force_approved": self.force_approved,
            "force_approved_by": self.force_approved_by,
            "force_approved_at": iso(self.force_approved_at),
            "force_approve_remarks": self.force_approve_remarks,
            "created_at": iso(self.created_at),
        }
