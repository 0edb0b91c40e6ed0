from __future__ import annotations

from typing import Optional, Sequence

from .model import Department, Line
from .repository import OrganizationRepository


class OrganizationService:
    def __init__(self, repo: OrganizationRepository):
        self._repo = repo

    def departments(self) -> Sequence[Department]:
        return self._repo.list_departments(active_only=True)

    def lines(self) -> Sequence[Line]:
        return self._repo.list_lines(active_only=True)

    def is_department_active(self, name: Optional[str]) -> bool:
        """Employees without a department are not blocked."""
        if not name:
            return True
        department = self._repo.get_department_by_name(name)
        return department is None or department.is_active
