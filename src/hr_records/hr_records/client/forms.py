from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core import workflow
from .api import HRApiClient
from .errors import ApiError, ApiValidationError
from .matcher import EmployeeMatcher, MatchResult, display_name
from .notifier import ToastNotifier
from .resources import ResourcePage

logger = logging.getLogger(__name__)

# Columns the server owns; never sent back on edit.
SERVER_FIELDS = frozenset(
    {"id", "employee", "status", "approved_by", "approved_at", "remarks", "created_at", "created_by", "force_approved"}
)

CREATE = "create"
EDIT = "edit"
VIEW = "view"


class RecordForm:
    """Create / edit / view state for one record.

    Holds field values, the employee search box and the server's field
    errors. Persistence and all validation that matters happen on the server.
    """

    def __init__(
        self,
        api: HRApiClient,
        page: ResourcePage,
        roster: Any,
        notifier: ToastNotifier,
        *,
        mode: str = CREATE,
        record: Optional[Mapping[str, Any]] = None,
    ):
        self.api = api
        self.page = page
        self.roster = roster
        self.notifier = notifier
        self.mode = mode
        self.record = dict(record or {})
        self.values: Dict[str, Any] = {k: v for k, v in self.record.items() if k not in SERVER_FIELDS}
        self.files: Dict[str, Any] = {}
        self.errors: Dict[str, List[str]] = {}
        self.submitting = False

        self.employee_id: Any = self.record.get("employee_id")
        self._matcher = EmployeeMatcher(on_select=self._select)
        self.match: MatchResult = self._matcher.update("", roster, self.employee_id)
        self.employee_query = ""

    @property
    def read_only(self) -> bool:
        return self.mode == VIEW

    @property
    def no_matches(self) -> bool:
        return self.match.no_matches

    @property
    def filtered_employees(self) -> List[Mapping[str, Any]]:
        return self.match.filtered

    @property
    def can_submit(self) -> bool:
        return not self.read_only and not self.submitting and not self.no_matches and self.employee_id is not None

    def _select(self, employee: Mapping[str, Any]) -> None:
        self.employee_id = employee.get("id")
        self.errors.pop("employee_id", None)

    def search_employee(self, query: str) -> MatchResult:
        self.employee_query = query
        self.match = self._matcher.update(query, self.roster, self.employee_id)
        return self.match

    def choose_employee(self, employee: Mapping[str, Any]) -> None:
        self._select(employee)
        self.employee_query = display_name(employee)
        self.match = self._matcher.update(self.employee_query, self.roster, self.employee_id)

    def set_roster(self, roster: Any) -> None:
        self.roster = roster
        self.match = self._matcher.update(self.employee_query, roster, self.employee_id)

    def set(self, field: str, value: Any) -> None:
        if self.read_only:
            return
        self.values[field] = value
        self.errors.pop(field, None)

    def attach(self, field: str, filename: str, stream: Any, content_type: Optional[str] = None) -> None:
        if field not in self.page.upload_fields:
            raise ValueError(f"{self.page.label} has no upload field {field!r}")
        self.files[field] = (filename, stream, content_type) if content_type else (filename, stream)

    def field_errors(self, field: str) -> List[str]:
        return self.errors.get(field, [])

    def payload(self) -> Dict[str, Any]:
        data = {k: v for k, v in self.values.items() if v is not None}
        data["employee_id"] = self.employee_id
        return data

    def submit(self) -> bool:
        """Send the form. True on success; errors land in ``errors`` or a toast."""
        if self.read_only:
            return False
        if self.no_matches:
            self.errors["employee_id"] = ["No matching employees found."]
            return False
        if self.employee_id is None:
            self.errors["employee_id"] = ["Please select an employee."]
            return False

        action = "creating" if self.mode == CREATE else "updating"
        self.submitting = True
        try:
            if self.mode == CREATE:
                self.api.create(self.page.resource, self.payload(), self.files or None)
            else:
                self.api.update(self.page.resource, self.record["id"], self.payload(), self.files or None)
        except ApiValidationError as e:
            self.errors = dict(e.errors)
            return False
        except ApiError as e:
            self.notifier.error(e.message_or(f"Error {action} {self.page.label}"))
            return False
        finally:
            self.submitting = False

        self.errors = {}
        verb = "created" if self.mode == CREATE else "updated"
        self.notifier.success(f"{self.page.label.capitalize()} {verb} successfully")
        return True


class ApprovalForm:
    """Status decision plus remarks for one workflow record."""

    def __init__(self, api: HRApiClient, page: ResourcePage, record: Mapping[str, Any], notifier: ToastNotifier):
        if page.workflow_kind is None:
            raise ValueError(f"{page.label} records have no approval workflow")
        self.api = api
        self.page = page
        self.record = dict(record)
        self.notifier = notifier
        self.status: Optional[str] = None
        self.remarks = ""
        self.errors: Dict[str, List[str]] = {}

    @property
    def choices(self) -> List[str]:
        """Statuses offered in the picker; the server decides what is allowed."""
        return sorted(workflow.allowed_targets(self.page.workflow_kind, self.record.get("status", "")))

    def submit(self) -> bool:
        if not self.status:
            self.errors["status"] = ["Please select a status."]
            return False
        try:
            self.api.update_status(self.page.resource, self.record["id"], self.status, self.remarks or None)
        except ApiValidationError as e:
            self.errors = dict(e.errors)
            self.notifier.error(e.message_or("Error updating status"))
            return False
        except ApiError as e:
            self.notifier.error(e.message_or("Error updating status"))
            return False

        self.notifier.success(f"{self.page.label.capitalize()} {self.status} successfully")
        return True
