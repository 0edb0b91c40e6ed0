from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department, Line


class OrganizationRepository(Protocol):
    def list_departments(self, *, active_only: bool = True) -> Sequence[Department]:
        raise NotImplementedError

    def list_lines(self, *, active_only: bool = True) -> Sequence[Line]:
        raise NotImplementedError

    def get_department_by_name(self, name: str) -> Optional[Department]:
        raise NotImplementedError
