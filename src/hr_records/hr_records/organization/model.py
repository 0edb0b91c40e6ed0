from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    code: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {"id": self.department_id, "name": self.name, "code": self.code}


@dataclass(frozen=True)
class Line:
    line_id: int
    name: str
    code: Optional[str] = None
    department_id: Optional[int] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {"id": self.line_id, "name": self.name, "code": self.code, "department_id": self.department_id}
