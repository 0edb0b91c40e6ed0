from __future__ import annotations

import pytest

from hr_records.core import workflow
from hr_records.core.exceptions import ValidationError, WorkflowError


def test_standard_kinds_resolve_once():
    assert workflow.ensure_transition(workflow.STANDARD, "pending", "Approved") == "approved"
    assert workflow.is_terminal(workflow.STANDARD, "approved")
    assert workflow.is_terminal(workflow.STANDARD, "rejected")
    with pytest.raises(WorkflowError):
        workflow.ensure_transition(workflow.STANDARD, "approved", "rejected")


def test_standard_kinds_have_no_post_approval_branch():
    with pytest.raises(ValidationError):
        workflow.ensure_transition(workflow.STANDARD, "approved", "completed")


def test_travel_orders_extend_after_approval():
    assert workflow.allowed_targets(workflow.TRAVEL_ORDER, "approved") == {"completed", "cancelled"}
    assert workflow.ensure_transition(workflow.TRAVEL_ORDER, "approved", "completed") == "completed"
    for terminal in ("rejected", "completed", "cancelled"):
        assert workflow.is_terminal(workflow.TRAVEL_ORDER, terminal)
    with pytest.raises(WorkflowError):
        workflow.ensure_transition(workflow.TRAVEL_ORDER, "pending", "completed")


def test_unknown_status_is_a_field_error():
    with pytest.raises(ValidationError) as exc:
        workflow.ensure_transition(workflow.STANDARD, "pending", "maybe")
    assert exc.value.errors == {"status": ["The selected status is invalid."]}


def test_only_pending_is_editable():
    workflow.ensure_pending("pending", "edited")
    with pytest.raises(WorkflowError):
        workflow.ensure_pending("approved", "deleted")
