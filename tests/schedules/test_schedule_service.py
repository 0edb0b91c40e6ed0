from __future__ import annotations

from datetime import date, time

import pytest

from hr_records.core.enums import Role
from hr_records.core.exceptions import AuthorizationError, ScheduleConflictError, ValidationError
from hr_records.employees.service import EmployeeService
from hr_records.schedules.service import ScheduleService

DAY_SHIFT = {
    "shift_type": "regular",
    "work_days": ["friday", "monday", "wednesday"],
    "start_time": "08:00",
    "end_time": "17:00",
    "break_start": "12:00",
    "break_end": "13:00",
    "effective_date": "2026-03-02",
}


@pytest.fixture
def service(schedules_repo, employees_repo, fixed_now):
    return ScheduleService(schedules_repo, EmployeeService(employees_repo), clock=lambda: fixed_now)


def create(service, data, role=Role.HRD):
    return service.create(current_role=role, user_id=2, data=data)


def test_one_row_per_employee_and_day(service):
    result = create(service, dict(DAY_SHIFT, employee_ids=[1, 2]))
    assert result["total_created"] == 6
    assert [s["work_day"] for s in result["schedules"][:3]] == ["monday", "wednesday", "friday"]
    assert result["schedules"][0]["start_time"] == "08:00:00"


def test_grouped_list(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1, 2]))
    result = service.list_grouped({})
    assert result["total"] == 2
    assert result["raw_schedules_count"] == 6
    jane = result["schedules"][0]
    assert jane["employee"]["Fname"] == "Jane"
    assert jane["work_days"] == ["monday", "wednesday", "friday"]
    assert jane["work_days_formatted"] == "Mon, Wed, Fri"
    assert jane["schedules_count"] == 3


def test_conflicting_days_are_reported_per_employee(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1]))
    with pytest.raises(ScheduleConflictError) as exc:
        create(service, dict(DAY_SHIFT, employee_ids=[1, 2], work_days=["wednesday", "thursday", "friday"]))
    assert exc.value.to_dict() == {
        "message": "Conflicting schedules found for some employees",
        "conflicts": [
            {"employee_id": 1, "idno": "E100", "employee_name": "Jane Doe", "conflicts": ["wednesday", "friday"]}
        ],
    }


def test_ended_or_inactive_schedules_do_not_conflict(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1], end_date="2026-03-31"))
    result = create(service, dict(DAY_SHIFT, employee_ids=[1], effective_date="2026-04-01"))
    assert result["total_created"] == 3


def test_schedules_starting_later_do_not_conflict(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1], effective_date="2026-04-01"))
    result = create(service, dict(DAY_SHIFT, employee_ids=[1], end_date="2026-03-31"))
    assert result["total_created"] == 3


def test_night_shift_may_end_next_day(service):
    data = dict(DAY_SHIFT, employee_ids=[1], shift_type="night", start_time="22:00", end_time="07:00")
    data.pop("break_start")
    data.pop("break_end")
    assert create(service, data)["total_created"] == 3

    with pytest.raises(ValidationError) as exc:
        create(service, dict(data, shift_type="regular", employee_ids=[2]))
    assert exc.value.errors == {"end_time": ["The end_time must be after start_time."]}


def test_validation(service):
    with pytest.raises(ValidationError) as exc:
        create(
            service,
            dict(
                DAY_SHIFT,
                employee_ids=[1, 99],
                work_days=["funday"],
                break_end="11:00",
                end_date="2026-03-01",
                notes="x" * 501,
            ),
        )
    errors = exc.value.errors
    assert set(errors) == {"employee_ids.1", "work_days.0", "break_end", "end_date", "notes"}


def test_update_replaces_the_whole_group(service):
    created = create(service, dict(DAY_SHIFT, employee_ids=[1]))
    first_id = created["schedules"][0]["id"]

    result = service.update(
        current_role=Role.HRD,
        user_id=2,
        schedule_id=first_id,
        data=dict(DAY_SHIFT, work_days=["tuesday", "thursday"], start_time="09:00", end_time="18:00"),
    )
    assert result["total_updated"] == 2
    rows = service.list_grouped({"employee_id": "1"})["schedules"][0]["individual_schedules"]
    assert [(r["work_day"], r["start_time"]) for r in rows] == [("tuesday", "09:00:00"), ("thursday", "09:00:00")]


def test_status_and_delete_cover_the_group(service):
    created = create(service, dict(DAY_SHIFT, employee_ids=[1]))
    first_id = created["schedules"][0]["id"]

    result = service.update_status(current_role=Role.HRD, user_id=2, schedule_id=first_id, status="inactive")
    assert result["schedules_updated"] == 3
    assert service.list_grouped({"status": "active"})["total"] == 0

    assert service.delete(current_role=Role.HRD, user_id=2, schedule_id=first_id) == 3
    assert service.list_grouped({})["total"] == 0


def test_calendar_defaults_to_current_week(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1]))
    calendar = service.calendar({})
    assert (calendar["start"], calendar["end"]) == ("2026-03-02", "2026-03-08")
    by_day = {d["date"]: d["schedules"] for d in calendar["days"]}
    assert [e["employee_name"] for e in by_day["2026-03-02"]] == ["Doe, Jane"]
    assert by_day["2026-03-03"] == []
    assert len(by_day["2026-03-06"]) == 1


def test_calendar_span_is_limited(service):
    with pytest.raises(ValidationError):
        service.calendar({"start": "2026-03-01", "end": "2026-05-01"})


def test_schedule_for_employee_on_a_day(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1]))
    schedule = service.for_employee_on(1, date(2026, 3, 4))
    assert schedule.work_day == "wednesday"
    assert schedule.start_time == time(8, 0)
    assert service.for_employee_on(1, date(2026, 3, 5)) is None


def test_statistics(service):
    create(service, dict(DAY_SHIFT, employee_ids=[1, 2]))
    stats = service.statistics({})
    assert stats["total_schedules"] == 6
    assert stats["total_employees"] == 2
    assert stats["by_shift_type"] == {"regular": 6}
    assert stats["by_work_day"]["monday"] == 2
    assert stats["by_work_day"]["sunday"] == 0


def test_finance_cannot_create(service):
    with pytest.raises(AuthorizationError):
        create(service, dict(DAY_SHIFT, employee_ids=[1]), role=Role.FINANCE)
