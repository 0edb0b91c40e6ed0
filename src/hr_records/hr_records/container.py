from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from .corehr.mysql_record_repository import MySQLRecordRepository
from .corehr.repository import RecordRepository
from .corehr.service import RecordService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .organization.mysql_organization_repository import MySQLOrganizationRepository
from .organization.repository import OrganizationRepository
from .organization.service import OrganizationService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .travel_orders.mysql_travel_order_repository import MySQLTravelOrderRepository
from .travel_orders.repository import TravelOrderRepository
from .travel_orders.service import TravelOrderService
from .uploads.storage import UploadStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    employees_repo: EmployeeRepository
    organization_repo: OrganizationRepository
    records_repo: RecordRepository
    travel_orders_repo: TravelOrderRepository
    schedules_repo: ScheduleRepository
    uploads: UploadStorage

    auth_service: AuthService
    employee_service: EmployeeService
    organization_service: OrganizationService
    record_service: RecordService
    travel_order_service: TravelOrderService
    schedule_service: ScheduleService


def wire(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    employees_repo: EmployeeRepository,
    organization_repo: OrganizationRepository,
    records_repo: RecordRepository,
    travel_orders_repo: TravelOrderRepository,
    schedules_repo: ScheduleRepository,
    uploads: UploadStorage,
    holidays: Iterable[date] = (),
) -> Container:
    """Build the services on top of the given repositories."""
    auth_service = AuthService(users_repo)
    employee_service = EmployeeService(employees_repo)
    organization_service = OrganizationService(organization_repo)
    record_service = RecordService(records_repo, employee_service, uploads)
    travel_order_service = TravelOrderService(
        travel_orders_repo, employee_service, organization_service, uploads, holidays=holidays
    )
    schedule_service = ScheduleService(schedules_repo, employee_service)

    return Container(
        conn=conn,
        users_repo=users_repo,
        employees_repo=employees_repo,
        organization_repo=organization_repo,
        records_repo=records_repo,
        travel_orders_repo=travel_orders_repo,
        schedules_repo=schedules_repo,
        uploads=uploads,
        auth_service=auth_service,
        employee_service=employee_service,
        organization_service=organization_service,
        record_service=record_service,
        travel_order_service=travel_order_service,
        schedule_service=schedule_service,
    )


def build_container(*, db_config: dict, upload_folder: str | Path, holidays: Iterable[date] = ()) -> Container:
    conn = DatabaseConnection.shared(DBConfig.from_mapping(db_config))
    return wire(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        organization_repo=MySQLOrganizationRepository(conn),
        records_repo=MySQLRecordRepository(conn),
        travel_orders_repo=MySQLTravelOrderRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        uploads=UploadStorage(upload_folder),
        holidays=holidays,
    )
