from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from hr_records.container import wire
from hr_records.core.enums import JobStatus, Role, WorkDay
from hr_records.corehr.model import HRRecord
from hr_records.employees.model import Employee
from hr_records.organization.model import Department, Line
from hr_records.schedules.model import EmployeeSchedule
from hr_records.travel_orders.model import TravelOrder
from hr_records.uploads.storage import UploadStorage
from hr_records.users.model import User

_DAY_INDEX = {d.value: i for i, d in enumerate(WorkDay.ordered())}


class InMemoryUsers:
    def __init__(self, users):
        self.users = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)


class InMemoryEmployees:
    COLUMNS = {
        "Department": "department",
        "Line": "line",
        "Jobtitle": "job_title",
        "JobStatus": "job_status",
        "payrate": "payrate",
        "EndOfContract": "end_of_contract",
    }

    def __init__(self, employees):
        self.by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(int(employee_id))

    def get_by_idno(self, idno: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.idno == idno), None)

    def list_employees(self, *, active_only: bool = False, search: Optional[str] = None):
        rows = [e for e in self.by_id.values() if e.is_active or not active_only]
        if search:
            s = search.lower()
            rows = [e for e in rows if s in f"{e.first_name} {e.last_name} {e.idno}".lower()]
        return rows

    def update_fields(self, employee_id: int, fields) -> None:
        changes = {self.COLUMNS[k]: v for k, v in fields.items()}
        self.by_id[employee_id] = replace(self.by_id[employee_id], **changes)


class InMemoryOrganization:
    def __init__(self, departments, lines):
        self.departments = list(departments)
        self.lines = list(lines)

    def list_departments(self, *, active_only: bool = True):
        return [d for d in self.departments if d.is_active or not active_only]

    def list_lines(self, *, active_only: bool = True):
        return [ln for ln in self.lines if ln.is_active or not active_only]

    def get_department_by_name(self, name: str):
        return next((d for d in self.departments if d.name == name), None)


class InMemoryRecords:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self._lock = threading.Lock()
        self._rows = {}
        self._next_id = 0

    def _with_employee(self, record: HRRecord) -> HRRecord:
        employee = self._employees.get_by_id(record.employee_id)
        return replace(record, employee=employee.to_dict() if employee else None)

    def list_records(self, kind, flt, *, page, per_page):
        rows = [r for (resource, _), r in self._rows.items() if resource == kind.resource]
        if flt.status:
            rows = [r for r in rows if r.status == flt.status]
        if flt.employee_id:
            rows = [r for r in rows if r.employee_id == flt.employee_id]
        if flt.search:
            s = flt.search.lower()
            rows = [r for r in rows if any(s in str(r.values.get(c) or "").lower() for c in kind.search_fields)]
        rows.sort(key=lambda r: r.record_id, reverse=flt.direction == "desc")
        start = (page - 1) * per_page
        return [self._with_employee(r) for r in rows[start : start + per_page]], len(rows)

    def get(self, kind, record_id):
        record = self._rows.get((kind.resource, int(record_id)))
        return self._with_employee(record) if record else None

    def create(self, kind, *, employee_id, values, created_by):
        self._next_id += 1
        values = dict(values)
        if kind.owner_column:
            values[kind.owner_column] = created_by
        self._rows[(kind.resource, self._next_id)] = HRRecord(
            record_id=self._next_id,
            resource=kind.resource,
            employee_id=employee_id,
            values=values,
            status="pending" if kind.workflow else None,
            created_at=datetime(2026, 3, 2, 9, 0),
        )
        return self._next_id

    def update(self, kind, record_id, *, employee_id, values):
        record = self._rows[(kind.resource, record_id)]
        merged = dict(record.values)
        merged.update(values)
        self._rows[(kind.resource, record_id)] = replace(record, employee_id=employee_id, values=merged)

    def set_status(self, kind, record_id, *, from_status, status, approved_by, approved_at, remarks, employee_fields=None):
        with self._lock:
            record = self._rows[(kind.resource, record_id)]
            if record.status != from_status:
                return False
            self._rows[(kind.resource, record_id)] = replace(
                record, status=status, approved_by=approved_by, approved_at=approved_at, remarks=remarks
            )
            if employee_fields:
                self._employees.update_fields(record.employee_id, employee_fields)
            return True

    def delete(self, kind, record_id):
        self._rows.pop((kind.resource, record_id), None)


class InMemoryTravelOrders:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self._lock = threading.Lock()
        self.orders = {}
        self._next_id = 0

    def _with_employee(self, order):
        employee = self._employees.get_by_id(order.employee_id)
        return replace(order, employee=employee.to_dict() if employee else None)

    def list_orders(self, flt):
        rows = list(self.orders.values())
        if flt.status:
            rows = [o for o in rows if o.status == flt.status]
        if flt.employee_id:
            rows = [o for o in rows if o.employee_id == flt.employee_id]
        return [self._with_employee(o) for o in sorted(rows, key=lambda o: o.order_id, reverse=True)]

    def get(self, order_id):
        order = self.orders.get(int(order_id))
        return self._with_employee(order) if order else None

    def find_overlap(self, employee_id, start, end, *, exclude_id=None):
        for o in self.orders.values():
            if (
                o.employee_id == employee_id
                and o.order_id != exclude_id
                and o.status != "rejected"
                and o.start_date <= end
                and o.end_date >= start
            ):
                return o
        return None

    def create(self, values):
        self._next_id += 1
        data = dict(values)
        data["document_paths"] = tuple(data.get("document_paths") or ())
        self.orders[self._next_id] = TravelOrder(order_id=self._next_id, **data)
        return self._next_id

    def update(self, order_id, values):
        changes = dict(values)
        if "document_paths" in changes:
            changes["document_paths"] = tuple(changes["document_paths"] or ())
        self.orders[order_id] = replace(self.orders[order_id], **changes)

    def transition(self, order_id, from_status, values):
        with self._lock:
            if self.orders[order_id].status != from_status:
                return False
            self.update(order_id, values)
            return True

    def delete(self, order_id):
        self.orders.pop(order_id, None)


class InMemorySchedules:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.rows = {}
        self._next_id = 0

    def _with_employee(self, row):
        employee = self._employees.get_by_id(row.employee_id)
        return replace(row, employee=employee.to_dict() if employee else None)

    def list_rows(self, flt):
        rows = list(self.rows.values())
        if flt.employee_id:
            rows = [r for r in rows if r.employee_id == flt.employee_id]
        if flt.status:
            rows = [r for r in rows if r.status == flt.status]
        if flt.shift_type:
            rows = [r for r in rows if r.shift_type == flt.shift_type]
        if flt.work_day:
            rows = [r for r in rows if r.work_day == flt.work_day]
        rows.sort(key=lambda r: (r.employee_id, _DAY_INDEX[r.work_day], -r.effective_date.toordinal()))
        return [self._with_employee(r) for r in rows]

    def get(self, schedule_id):
        row = self.rows.get(int(schedule_id))
        return self._with_employee(row) if row else None

    def find_conflicts(self, employee_id, work_days, effective_date):
        return [
            r
            for r in self.rows.values()
            if r.employee_id == employee_id
            and r.status != "inactive"
            and r.work_day in work_days
            and r.effective_date <= effective_date
            and (r.end_date is None or r.end_date >= effective_date)
        ]

    def create_many(self, rows):
        ids = []
        for values in rows:
            self._next_id += 1
            self.rows[self._next_id] = EmployeeSchedule(schedule_id=self._next_id, **values)
            ids.append(self._next_id)
        return ids

    def _group(self, employee_id, effective_date):
        return [
            i for i, r in self.rows.items() if r.employee_id == employee_id and r.effective_date == effective_date
        ]

    def replace_group(self, employee_id, effective_date, rows):
        self.delete_group(employee_id, effective_date)
        return self.create_many(rows)

    def delete_group(self, employee_id, effective_date):
        ids = self._group(employee_id, effective_date)
        for i in ids:
            del self.rows[i]
        return len(ids)

    def set_group_status(self, employee_id, effective_date, status):
        ids = self._group(employee_id, effective_date)
        for i in ids:
            self.rows[i] = replace(self.rows[i], status=status)
        return len(ids)

    def import_rows(self, effective_date, rows, *, replace=()):
        for employee_id in replace:
            self.delete_group(employee_id, effective_date)
        return self.create_many(rows)


@pytest.fixture
def fixed_now() -> datetime:
    # a Monday
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def employees_repo() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(1, "E100", "Jane", "Doe", department="Production", line="Line 1",
                     job_title="Operator", payrate=Decimal("500.00")),
            Employee(2, "E200", "John", "Smith", department="Administration", job_title="Clerk"),
            Employee(3, "E300", "Maria", "Santos", department="Production", job_status=JobStatus.INACTIVE.value),
            Employee(4, "E400", "Pedro", "Cruz", department="Packaging", job_title="Packer"),
        ]
    )


@pytest.fixture
def organization_repo() -> InMemoryOrganization:
    return InMemoryOrganization(
        [
            Department(1, "Administration", "ADM"),
            Department(2, "Production", "PRD"),
            Department(3, "Packaging", "PKG", is_active=False),
        ],
        [Line(1, "Line 1", "L1", 2), Line(2, "Line 2", "L2", 2)],
    )


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(1, "Super Admin User", "superadmin@example.com", generate_password_hash("password"), Role.SUPERADMIN),
            User(2, "HRD User", "hrd@example.com", generate_password_hash("password"), Role.HRD),
            User(3, "Finance User", "finance@example.com", generate_password_hash("password"), Role.FINANCE),
        ]
    )


@pytest.fixture
def uploads(tmp_path) -> UploadStorage:
    return UploadStorage(tmp_path / "storage")


@pytest.fixture
def records_repo(employees_repo) -> InMemoryRecords:
    return InMemoryRecords(employees_repo)


@pytest.fixture
def travel_orders_repo(employees_repo) -> InMemoryTravelOrders:
    return InMemoryTravelOrders(employees_repo)


@pytest.fixture
def schedules_repo(employees_repo) -> InMemorySchedules:
    return InMemorySchedules(employees_repo)


@pytest.fixture
def container(users_repo, employees_repo, organization_repo, records_repo, travel_orders_repo, schedules_repo, uploads):
    return wire(
        conn=None,
        users_repo=users_repo,
        employees_repo=employees_repo,
        organization_repo=organization_repo,
        records_repo=records_repo,
        travel_orders_repo=travel_orders_repo,
        schedules_repo=schedules_repo,
        uploads=uploads,
        holidays=(date(2026, 3, 4),),
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from hr_records.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(role: Role = Role.HRD, user_id: int = 2):
        with client.session_transaction() as s:
            s["user_id"] = user_id
            s["role"] = role.value
            s["name"] = "Test User"

    return _login


@pytest.fixture
def hold_first_read(monkeypatch):
    """Patch ``repo.get`` so each of two threads waits after its first read
    until the other thread has read too."""

    def _hold(repo):
        barrier = threading.Barrier(2, timeout=5)
        seen = threading.local()
        read = repo.get

        def get(*args):
            found = read(*args)
            if not getattr(seen, "held", False):
                seen.held = True
                barrier.wait()
            return found

        monkeypatch.setattr(repo, "get", get)
        return read

    return _hold


def run_together(**calls):
    """Run each named call in its own thread; map name -> "ok" or the exception."""
    results = {}

    def run(name, fn):
        try:
            fn()
            results[name] = "ok"
        except Exception as e:
            results[name] = e

    threads = [threading.Thread(target=run, args=item) for item in calls.items()]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


@pytest.fixture
def together():
    return run_together
