from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from ..common.datetime_utils import iso
from ..core.enums import JobStatus


@dataclass(frozen=True)
class Employee:
    """Roster entry. Field names follow the employees table."""

    employee_id: int
    idno: str
    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    department: Optional[str] = None
    line: Optional[str] = None
    job_title: Optional[str] = None
    job_status: str = JobStatus.ACTIVE.value
    payrate: Optional[Decimal] = None
    end_of_contract: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.job_status == JobStatus.ACTIVE.value

    @property
    def full_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.employee_id,
            "idno": self.idno,
            "Fname": self.first_name,
            "Lname": self.last_name,
            "MName": self.middle_name,
            "Department": self.department,
            "Line": self.line,
            "Jobtitle": self.job_title,
            "JobStatus": self.job_status,
            "payrate": str(self.payrate) if self.payrate is not None else None,
            "EndOfContract": iso(self.end_of_contract),
        }
