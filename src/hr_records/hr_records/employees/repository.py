from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_idno(self, idno: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_employees(self, *, active_only: bool = False, search: Optional[str] = None) -> Sequence[Employee]:
        raise NotImplementedError
