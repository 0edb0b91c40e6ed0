from __future__ import annotations

import csv
import io
from datetime import date, time

import pytest
from openpyxl import Workbook
from werkzeug.datastructures import FileStorage

from hr_records.core.enums import Role
from hr_records.core.exceptions import AuthorizationError, DomainError, ValidationError
from hr_records.employees.service import EmployeeService
from hr_records.schedules.service import ScheduleService

HEADER = [
    "Employee ID", "Shift Type", "Work Days", "Start Time", "End Time",
    "Break Start", "Break End", "", "End Date", "Status", "Notes",
]


@pytest.fixture
def service(schedules_repo, employees_repo, fixed_now):
    return ScheduleService(schedules_repo, EmployeeService(employees_repo), clock=lambda: fixed_now)


def xlsx_file(rows, filename="schedules.xlsx"):
    book = Workbook()
    sheet = book.active
    for row in [HEADER, *rows]:
        sheet.append(row)
    out = io.BytesIO()
    book.save(out)
    out.seek(0)
    return FileStorage(stream=out, filename=filename)


def csv_file(rows, filename="schedules.csv"):
    text = io.StringIO()
    writer = csv.writer(text)
    for row in [HEADER, *rows]:
        writer.writerow(row)
    return FileStorage(stream=io.BytesIO(text.getvalue().encode("utf-8")), filename=filename)


def run_import(service, file, role=Role.HRD, **data):
    return service.import_file(current_role=role, user_id=2, data=data, files={"file": file})


def stored(schedules_repo, employee_id):
    rows = [r for r in schedules_repo.rows.values() if r.employee_id == employee_id]
    return sorted(rows, key=lambda r: r.schedule_id)


def test_workbook_rows_become_one_schedule_per_day(service, schedules_repo):
    result = run_import(
        service,
        xlsx_file(
            [
                ["E100", "Regular", "Monday, Wednesday", time(8, 0), time(17, 0), time(12, 0), time(13, 0),
                 None, None, None, "Day crew"],
                ["E200", "night", "friday", "22:00", "06:00", None, None, None, date(2026, 6, 30), "pending"],
            ]
        ),
    )

    assert result == {
        "success": True,
        "message": "Import completed successfully. 3 schedules imported.",
        "imported": 3,
        "skipped": 0,
        "errors": [],
        "effective_date": "2026-03-03",
    }
    jane = stored(schedules_repo, 1)
    assert [r.work_day for r in jane] == ["monday", "wednesday"]
    assert jane[0].shift_type == "regular"
    assert (jane[0].start_time, jane[0].end_time) == (time(8, 0), time(17, 0))
    assert (jane[0].break_start, jane[0].break_end) == (time(12, 0), time(13, 0))
    assert jane[0].effective_date == date(2026, 3, 3)
    assert jane[0].status == "active"
    assert jane[0].notes == "Day crew"
    assert jane[0].created_by == 2

    john = stored(schedules_repo, 2)
    assert [(r.work_day, r.status, r.end_date) for r in john] == [("friday", "pending", date(2026, 6, 30))]


def test_bad_rows_are_reported_and_the_rest_imported(service, schedules_repo):
    result = run_import(
        service,
        csv_file(
            [
                ["E100", "regular", "tuesday", "9:00 AM", "5:30 PM"],
                [],
                ["E200", "regular", "", "08:00", "17:00"],
                ["E999", "regular", "monday", "08:00", "17:00"],
                ["E200", "split", "monday", "08:00", "17:00"],
                ["E200", "regular", "monday, funday", "08:00", "17:00"],
                ["E200", "regular", "monday", "eight", "17:00"],
                ["E200", "regular", "monday", "08:00", "17:00", "noon", "13:00"],
                ["", "", "", "", ""],
            ]
        ),
        effective_date="2026-03-09",
    )

    assert result["errors"] == [
        "Row 4: Missing required fields (Employee ID, Shift Type, Work Days, Start Time, End Time)",
        "Row 5: Employee ID 'E999' not found",
        "Row 6: Invalid shift type 'split'. Must be one of: regular, night, flexible, rotating",
        "Row 7: Invalid work days: funday",
        "Row 8: Invalid time format. Use HH:MM format (e.g., 09:00, 17:30)",
        "Row 9: Invalid break time format",
    ]
    assert result["imported"] == 1
    assert result["skipped"] == 2
    assert result["message"] == (
        "Import completed successfully. 1 schedules imported. 2 empty rows skipped. 6 errors occurred."
    )
    (row,) = stored(schedules_repo, 1)
    assert (row.work_day, row.start_time, row.end_time) == ("tuesday", time(9, 0), time(17, 30))
    assert stored(schedules_repo, 2) == []


def test_existing_days_are_kept_unless_overwriting(service, schedules_repo):
    service.create(
        current_role=Role.HRD,
        user_id=2,
        data={
            "employee_ids": [1],
            "shift_type": "regular",
            "work_days": ["monday", "tuesday"],
            "start_time": "07:00",
            "end_time": "16:00",
            "effective_date": "2026-03-03",
        },
    )
    rows = [["E100", "flexible", "monday", "10:00", "19:00"]]

    result = run_import(service, csv_file(rows))
    assert result["errors"] == ["Row 2: Schedule for Jane Doe on monday already exists for 2026-03-03"]
    assert result["message"] == "Import completed successfully. 1 errors occurred."
    assert [r.shift_type for r in stored(schedules_repo, 1)] == ["regular", "regular"]

    result = run_import(service, csv_file(rows), overwrite_existing="1")
    assert result["imported"] == 1
    assert result["errors"] == []
    assert [(r.work_day, r.shift_type) for r in stored(schedules_repo, 1)] == [("monday", "flexible")]


def test_same_day_twice_in_one_file(service, schedules_repo):
    result = run_import(
        service,
        csv_file(
            [
                ["E100", "regular", "monday, tuesday", "08:00", "17:00"],
                ["E100", "night", "tuesday", "22:00", "06:00"],
                ["E100", "night", "thursday", "22:00", "06:00"],
            ]
        ),
        overwrite_existing="true",
    )
    assert result["imported"] == 3
    assert result["errors"] == ["Row 3: Schedule for Jane Doe on tuesday already exists for 2026-03-03"]
    assert [r.work_day for r in stored(schedules_repo, 1)] == ["monday", "tuesday", "thursday"]


def test_header_only_file_is_rejected(service):
    with pytest.raises(DomainError) as exc:
        run_import(service, csv_file([]))
    assert exc.value.message == "File appears to be empty or contains no data rows"
    assert exc.value.http_status == 400


def test_unreadable_workbook(service):
    file = FileStorage(stream=io.BytesIO(b"not a workbook"), filename="schedules.xlsx")
    with pytest.raises(DomainError) as exc:
        run_import(service, file)
    assert exc.value.message.startswith("Failed to read file: ")


def test_upload_and_date_are_validated(service):
    with pytest.raises(ValidationError) as exc:
        service.import_file(current_role=Role.HRD, user_id=2, data={"effective_date": "2026-03-01"}, files={})
    assert exc.value.errors == {
        "file": ["The file field is required."],
        "effective_date": ["The effective_date must be a date after or equal to today."],
    }

    legacy = FileStorage(stream=io.BytesIO(b"\xd0\xcf\x11\xe0"), filename="schedules.xls")
    with pytest.raises(ValidationError) as exc:
        run_import(service, legacy)
    assert exc.value.errors == {"file": ["The file must be a file of type: csv, xlsx."]}


def test_only_managers_import(service):
    with pytest.raises(AuthorizationError):
        run_import(service, csv_file([["E100", "regular", "monday", "08:00", "17:00"]]), role=Role.FINANCE)


def test_import_route(client, login, schedules_repo):
    login(Role.HRD)
    file = csv_file([["E400", "rotating", "saturday, sunday", "06:00", "14:00"]])
    res = client.post(
        "/employee-schedules/import",
        data={"file": (file.stream, file.filename), "effective_date": "2099-01-05"},
        content_type="multipart/form-data",
    )
    assert res.status_code == 200
    body = res.get_json()
    assert body["imported"] == 2
    assert body["effective_date"] == "2099-01-05"
    assert [r.work_day for r in stored(schedules_repo, 4)] == ["saturday", "sunday"]

    login(Role.FINANCE, user_id=3)
    res = client.post(
        "/employee-schedules/import",
        data={"file": (io.BytesIO(b"x"), "schedules.csv")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 403
