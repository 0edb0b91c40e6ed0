from __future__ import annotations

from ..core.constants import MANAGER_ROLES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def ensure_manager(role: Role) -> None:
    if role not in MANAGER_ROLES:
        raise AuthorizationError("This action is unauthorized.")


def ensure_superadmin(role: Role, message: str = "Only a superadmin can perform this action.") -> None:
    if role != Role.SUPERADMIN:
        raise AuthorizationError(message)
