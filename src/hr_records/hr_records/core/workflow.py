"""Approval workflow transition tables.

Each record kind carries its own table; a status missing from a table's keys
is terminal for that kind.
"""
from __future__ import annotations

from typing import Mapping

from .enums import TravelOrderStatus, WorkflowStatus
from .exceptions import ValidationError, WorkflowError

STANDARD = "standard"
TRAVEL_ORDER = "travel_order"

TRANSITIONS: Mapping[str, Mapping[str, frozenset[str]]] = {
    STANDARD: {
        WorkflowStatus.PENDING.value: frozenset({WorkflowStatus.APPROVED.value, WorkflowStatus.REJECTED.value}),
    },
    TRAVEL_ORDER: {
        TravelOrderStatus.PENDING.value: frozenset({TravelOrderStatus.APPROVED.value, TravelOrderStatus.REJECTED.value}),
        TravelOrderStatus.APPROVED.value: frozenset(
            {TravelOrderStatus.COMPLETED.value, TravelOrderStatus.CANCELLED.value}
        ),
    },
}

STATUS_VALUES: Mapping[str, frozenset[str]] = {
    STANDARD: frozenset(s.value for s in WorkflowStatus),
    TRAVEL_ORDER: frozenset(s.value for s in TravelOrderStatus),
}


def allowed_targets(kind: str, current: str) -> frozenset[str]:
    return TRANSITIONS[kind].get(current, frozenset())


def is_terminal(kind: str, current: str) -> bool:
    return not allowed_targets(kind, current)


def is_editable(current: str) -> bool:
    return current == WorkflowStatus.PENDING.value


def ensure_transition(kind: str, current: str, target: str) -> str:
    """Validate ``current -> target`` and return the normalized target value."""

    target = (target or "").strip().lower()
    if target not in STATUS_VALUES[kind]:
        raise ValidationError.for_field("status", "The selected status is invalid.")
    if target not in allowed_targets(kind, current):
        raise WorkflowError(f"Cannot change status from {current} to {target}.")
    return target


def ensure_pending(current: str, action: str) -> None:
    if not is_editable(current):
        raise WorkflowError(f"Only pending records can be {action}; this record is {current}.")
