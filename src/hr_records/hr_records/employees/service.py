from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from .model import Employee
from .repository import EmployeeRepository


class EmployeeService:
    """Roster lookups and active-employee resolution."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_roster(self, *, active_only: bool = False, search: Optional[str] = None) -> Sequence[Employee]:
        search = (search or "").strip() or None
        return self._employees.list_employees(active_only=active_only, search=search)

    def get(self, employee_id: int) -> Optional[Employee]:
        return self._employees.get_by_id(employee_id)

    def get_by_idno(self, idno: str) -> Optional[Employee]:
        return self._employees.get_by_idno(str(idno).strip())

    def require_active(self, employee_id: Optional[int], field: str = "employee_id") -> Employee:
        """Resolve the referenced employee or fail with a field error."""
        if employee_id is None:
            raise ValidationError.for_field(field, f"The {field} field is required.")
        employee = self._employees.get_by_id(int(employee_id))
        if employee is None:
            raise ValidationError.for_field(field, f"The selected {field} is invalid.")
        if not employee.is_active:
            raise ValidationError.for_field(field, "The selected employee is not active.")
        return employee
