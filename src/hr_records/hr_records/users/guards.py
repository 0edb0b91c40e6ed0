from __future__ import annotations

from functools import wraps

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthenticationError("Unauthenticated.") from None


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Unauthenticated.")
        return view(*args, **kwargs)

    return wrapper
