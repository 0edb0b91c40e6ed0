from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles seeded for HR users; used by the route guards."""

    SUPERADMIN = "superadmin"
    HRD = "hrd"
    FINANCE = "finance"


class WorkflowStatus(str, Enum):
    """Approval status for promotions, resignations, terminations and transfers."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TravelOrderStatus(str, Enum):
    """Travel orders add a post-approval branch."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScheduleStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class ShiftType(str, Enum):
    REGULAR = "regular"
    NIGHT = "night"
    FLEXIBLE = "flexible"
    ROTATING = "rotating"


class WorkDay(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def abbrev(self) -> str:
        return self.value[:3].capitalize()

    @classmethod
    def ordered(cls) -> list["WorkDay"]:
        return list(cls)

    @classmethod
    def from_weekday(cls, weekday: int) -> "WorkDay":
        """Map ``date.weekday()`` (Monday == 0) to a WorkDay."""
        return list(cls)[weekday]


class JobStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    TERMINATED = "Terminated"
