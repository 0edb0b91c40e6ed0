from __future__ import annotations

import pytest

from hr_records.client.errors import ApiError, ApiValidationError
from hr_records.client.notifier import ERROR, INFO, SUCCESS, ConfirmModal, ToastNotifier
from hr_records.client.page import RecordPage

ROSTER = [
    {"id": 1, "Fname": "Jane", "Lname": "Doe", "idno": "E100"},
    {"id": 2, "Fname": "John", "Lname": "Smith", "idno": "E200"},
]


class FakeApi:
    """Records calls; ``fail`` maps a method name to the error it raises."""

    def __init__(self, records=None, fail=None):
        self.records = [dict(r) for r in (records or [])]
        self.fail = dict(fail or {})
        self.calls = []

    def _call(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if name in self.fail:
            raise self.fail[name]

    def list_records(self, resource, **filters):
        self._call("list_records", resource, **filters)
        return [dict(r) for r in self.records]

    def list_employees(self, *, active_only=True, search=None):
        self._call("list_employees", active_only=active_only)
        return list(ROSTER)

    def list_departments(self):
        self._call("list_departments")
        return ["Administration", "Production"]

    def list_lines(self):
        self._call("list_lines")
        return [{"id": 1, "name": "Line 1"}]

    def create(self, resource, data, files=None):
        self._call("create", resource, data, files)
        self.records.insert(0, dict(data, id=len(self.records) + 1, status="pending"))
        return {"message": "created"}

    def update(self, resource, record_id, data, files=None):
        self._call("update", resource, record_id, data, files)

    def update_status(self, resource, record_id, status, remarks=None):
        self._call("update_status", resource, record_id, status, remarks)
        record = next(r for r in self.records if r["id"] == record_id)
        if record["status"] != "pending":
            raise ApiError(409, f"Cannot change status from {record['status']} to {status}.")
        record["status"] = status

    def delete(self, resource, record_id):
        self._call("delete", resource, record_id)
        self.records = [r for r in self.records if r["id"] != record_id]


def messages(notifier, kind=None):
    return [t.message for t in notifier.history if kind is None or t.kind == kind]


def test_load_fetches_every_source():
    api = FakeApi(records=[{"id": 1, "employee_id": 1, "status": "pending"}])
    page = RecordPage(api, "transfers")
    page.load()

    assert {c[0] for c in api.calls} == {"list_records", "list_employees", "list_departments", "list_lines"}
    assert page.records == [{"id": 1, "employee_id": 1, "status": "pending"}]
    assert page.roster == ROSTER
    assert page.lookups["lines"] == [{"id": 1, "name": "Line 1"}]
    assert page.degraded == set()
    assert messages(page.notifier) == []


def test_optional_lookup_failure_degrades_only_that_feature():
    api = FakeApi(records=[{"id": 1, "status": "pending"}], fail={"list_lines": ApiError(404, "Not Found")})
    page = RecordPage(api, "transfers")
    page.load()

    assert page.records == [{"id": 1, "status": "pending"}]
    assert page.roster == ROSTER
    assert page.lookups["departments"] == ["Administration", "Production"]
    assert page.lookups["lines"] == []
    assert page.degraded == {"lines"}
    assert not page.is_available("lines")
    assert page.is_available("departments")
    assert messages(page.notifier, INFO) == ["Production line data is unavailable. Some features may be limited."]
    assert messages(page.notifier, ERROR) == []


def test_essential_failure_blanks_source_and_reports():
    api = FakeApi(records=[{"id": 1, "status": "pending"}], fail={"list_employees": ApiError(None, "")})
    page = RecordPage(api, "promotions")
    page.load()

    assert page.records == [{"id": 1, "status": "pending"}]
    assert page.roster == []
    assert page.failed == {"employees"}
    assert messages(page.notifier) == ["Error loading employees. Please try again later."]


def test_approval_then_reload_shows_new_status_and_second_decision_is_rejected():
    api = FakeApi(records=[{"id": 5, "employee_id": 1, "status": "pending"}])
    page = RecordPage(api, "promotions")
    page.load()

    assert page.decide(page.records[0], "approved", "ok")
    assert page.records[0]["status"] == "approved"
    assert not page.can_edit(page.records[0])

    assert not page.decide(page.records[0], "rejected", "changed my mind")
    assert messages(page.notifier, ERROR) == ["Cannot change status from approved to rejected."]
    assert page.records[0]["status"] == "approved"


def test_failed_submit_does_not_reload():
    api = FakeApi(fail={"create": ApiValidationError({"reason": ["The reason field is required."]})})
    page = RecordPage(api, "resignations")
    page.load()
    loads = sum(1 for c in api.calls if c[0] == "list_records")

    form = page.new_form()
    form.search_employee("doe")
    assert not page.submit(form)
    assert form.field_errors("reason") == ["The reason field is required."]
    assert sum(1 for c in api.calls if c[0] == "list_records") == loads


def test_delete_asks_for_confirmation():
    api = FakeApi(records=[{"id": 3, "status": "pending"}])
    answers = iter([False, True])
    page = RecordPage(api, "awards", confirm=ConfirmModal(lambda title, message: next(answers)))
    page.load()

    assert not page.delete(page.records[0])
    assert page.records

    assert page.delete(page.records[0])
    assert page.records == []
    assert messages(page.notifier, SUCCESS) == ["Award deleted successfully"]


def test_delete_failure_uses_server_message_or_fallback():
    api = FakeApi(records=[{"id": 3}], fail={"delete": ApiError(500, "")})
    page = RecordPage(api, "awards")
    page.load()
    assert not page.delete(page.records[0])
    assert messages(page.notifier, ERROR) == ["Error deleting award"]


def test_search_is_debounced():
    api = FakeApi()
    page = RecordPage(api, "warnings", debounce_seconds=60)
    for q in ("j", "ja", "jan"):
        page.search(q)
    assert not any(c[0] == "list_records" for c in api.calls)

    page.flush_search()
    calls = [c for c in api.calls if c[0] == "list_records"]
    assert len(calls) == 1
    assert calls[0][2] == {"search": "jan"}
    page.close()


def test_resolved_records_open_read_only():
    page = RecordPage(FakeApi(), "terminations")
    assert page.edit_form({"id": 1, "employee_id": 1, "status": "pending"}).mode == "edit"
    assert page.edit_form({"id": 1, "employee_id": 1, "status": "rejected"}).read_only
    assert not page.can_edit({"id": 2})


def test_plain_records_are_always_editable():
    page = RecordPage(FakeApi(), "awards")
    assert page.can_edit({"id": 2})


def test_unknown_resource():
    with pytest.raises(ValueError):
        RecordPage(FakeApi(), "payslips")
