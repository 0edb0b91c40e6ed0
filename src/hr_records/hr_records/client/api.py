from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from ..core.constants import DEFAULT_API_TIMEOUT
from .errors import ApiError, ApiValidationError

logger = logging.getLogger(__name__)

# Body keys the list endpoints put their rows under.
LIST_KEYS = ("data", "travelOrders", "schedules")


def rows_from(body: Any) -> list:
    if isinstance(body, list):
        return body
    if isinstance(body, Mapping):
        for key in LIST_KEYS:
            if isinstance(body.get(key), list):
                return body[key]
    return []


class HRApiClient:
    """Thin wrapper over the HR service's JSON endpoints.

    One ``requests.Session`` keeps the login cookie. No retries: a failed call
    raises :class:`ApiError` (or :class:`ApiValidationError` for 422).
    """

    def __init__(self, base_url: str, *, session: Optional[requests.Session] = None, timeout: float = DEFAULT_API_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> Any:
        kwargs.setdefault("timeout", self.timeout)
        try:
            res = self.session.request(method, self.url(path), **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(None, "") from e

        if res.status_code == 204 or not res.content:
            body: Any = None
        else:
            try:
                body = res.json()
            except ValueError:
                body = None

        if res.status_code >= 400:
            message = body.get("message", "") if isinstance(body, Mapping) else ""
            logger.warning("%s %s -> %s %s", method, path, res.status_code, message)
            if res.status_code == 422 and isinstance(body, Mapping) and body.get("errors"):
                raise ApiValidationError(body["errors"], message or "The given data was invalid.", body)
            raise ApiError(res.status_code, message, body)
        return body

    # ---- session

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self.request("POST", "/login", json={"email": email, "password": password})

    def logout(self) -> None:
        self.request("POST", "/logout")

    # ---- lookups

    def list_employees(self, *, active_only: bool = True, search: Optional[str] = None) -> list:
        params: Dict[str, Any] = {"active_only": "1" if active_only else "0"}
        if search:
            params["search"] = search
        return rows_from(self.request("GET", "/employees/list", params=params))

    def list_departments(self) -> list:
        return rows_from(self.request("GET", "/departments"))

    def list_lines(self) -> list:
        return rows_from(self.request("GET", "/lines"))

    # ---- records

    def list_records(self, resource: str, **filters: Any) -> list:
        params = {k: v for k, v in filters.items() if v not in (None, "")}
        return rows_from(self.request("GET", f"/{resource}/list", params=params))

    def create(self, resource: str, data: Mapping[str, Any], files: Optional[Mapping[str, Any]] = None) -> Any:
        if files:
            return self.request("POST", f"/{resource}", data=dict(data), files=dict(files))
        return self.request("POST", f"/{resource}", json=dict(data))

    def update(
        self, resource: str, record_id: int, data: Mapping[str, Any], files: Optional[Mapping[str, Any]] = None
    ) -> Any:
        if files:
            # multipart bodies go through POST with a method override
            payload = dict(data)
            payload["_method"] = "PUT"
            return self.request("POST", f"/{resource}/{record_id}", data=payload, files=dict(files))
        return self.request("PUT", f"/{resource}/{record_id}", json=dict(data))

    def update_status(self, resource: str, record_id: int, status: str, remarks: Optional[str] = None) -> Any:
        return self.request("POST", f"/{resource}/{record_id}/status", json={"status": status, "remarks": remarks})

    def import_schedules(
        self, filename: str, stream: Any, *, effective_date: Optional[str] = None, overwrite: bool = False
    ) -> Dict[str, Any]:
        data = {"overwrite_existing": "1" if overwrite else "0"}
        if effective_date:
            data["effective_date"] = effective_date
        return self.request("POST", "/employee-schedules/import", data=data, files={"file": (filename, stream)})

    def delete(self, resource: str, record_id: int) -> None:
        self.request("DELETE", f"/{resource}/{record_id}")

    def storage_url(self, path: str) -> str:
        return self.url(f"/storage/{path.lstrip('/')}")
