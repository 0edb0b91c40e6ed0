from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """JSON body sent with ``http_status``."""
        return {"message": self.message}


class ValidationError(DomainError):
    """Raised when input data is invalid.

    ``errors`` maps field names to a list of messages, the shape the 422
    response body carries.
    """

    http_status = 422

    def __init__(self, message: str = "The given data was invalid.", errors: Optional[Mapping[str, Sequence[str]]] = None):
        super().__init__(message)
        self.errors: dict[str, list[str]] = {k: list(v) for k, v in (errors or {}).items()}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class ScheduleConflictError(ValidationError):
    """New schedule days collide with schedules already in effect."""

    def __init__(self, conflicts: Sequence[Mapping[str, Any]]):
        super().__init__("Conflicting schedules found for some employees")
        self.conflicts = [dict(c) for c in conflicts]

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "conflicts": self.conflicts}


class NotFoundError(DomainError):
    """Raised when a record does not exist."""

    http_status = 404


class WorkflowError(DomainError):
    """Raised for an illegal status transition or a mutation after resolution."""

    http_status = 409


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the session is missing."""

    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    http_status = 403
