from __future__ import annotations

import json

import pytest
import requests

from hr_records.client.api import HRApiClient, rows_from
from hr_records.client.errors import ApiError, ApiValidationError


class FakeResponse:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self._body = body
        self.content = b"" if body is None else json.dumps(body).encode()

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def client_with(*responses):
    session = FakeSession(*responses)
    return HRApiClient("http://hr.local/", session=session, timeout=3), session


def test_rows_from_known_list_keys():
    assert rows_from({"data": [1]}) == [1]
    assert rows_from({"travelOrders": [2], "transportationTypes": ["Bus"]}) == [2]
    assert rows_from({"schedules": [3], "total": 1}) == [3]
    assert rows_from([4]) == [4]
    assert rows_from({"data": "oops"}) == []
    assert rows_from(None) == []


def test_list_records_drops_empty_filters():
    api, session = client_with(FakeResponse(200, {"data": [{"id": 1}]}))
    rows = api.list_records("transfers", search="", status="pending", employee_id=None)

    method, url, kwargs = session.calls[0]
    assert rows == [{"id": 1}]
    assert (method, url) == ("GET", "http://hr.local/transfers/list")
    assert kwargs["params"] == {"status": "pending"}
    assert kwargs["timeout"] == 3


def test_validation_error_carries_field_messages():
    api, _ = client_with(
        FakeResponse(422, {"message": "The given data was invalid.", "errors": {"reason": "The reason field is required."}})
    )
    with pytest.raises(ApiValidationError) as exc:
        api.create("resignations", {"employee_id": 1})
    assert exc.value.status == 422
    assert exc.value.errors == {"reason": ["The reason field is required."]}


def test_server_message_is_kept_for_business_errors():
    api, _ = client_with(FakeResponse(409, {"message": "Cannot change status from approved to rejected."}))
    with pytest.raises(ApiError) as exc:
        api.update_status("promotions", 5, "rejected", "late")
    assert exc.value.status == 409
    assert exc.value.message_or("Error updating status") == "Cannot change status from approved to rejected."


def test_transport_failure_uses_fallback_message():
    api, _ = client_with(requests.ConnectionError("refused"))
    with pytest.raises(ApiError) as exc:
        api.list_departments()
    assert exc.value.status is None
    assert exc.value.message_or("Error loading departments") == "Error loading departments"


def test_update_with_files_uses_method_override():
    api, session = client_with(FakeResponse(200, {"message": "ok"}))
    api.update("warnings", 7, {"subject": "Late"}, {"document": ("notice.pdf", b"%PDF")})

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://hr.local/warnings/7")
    assert kwargs["data"] == {"subject": "Late", "_method": "PUT"}
    assert "document" in kwargs["files"]


def test_update_without_files_sends_json_put():
    api, session = client_with(FakeResponse(200, {"message": "ok"}))
    api.update("warnings", 7, {"subject": "Late"})
    method, _, kwargs = session.calls[0]
    assert method == "PUT"
    assert kwargs["json"] == {"subject": "Late"}


def test_delete_accepts_empty_204():
    api, session = client_with(FakeResponse(204))
    assert api.delete("awards", 3) is None
    assert session.calls[0][:2] == ("DELETE", "http://hr.local/awards/3")


def test_storage_url():
    api, _ = client_with()
    assert api.storage_url("/awards/a.png") == "http://hr.local/storage/awards/a.png"
