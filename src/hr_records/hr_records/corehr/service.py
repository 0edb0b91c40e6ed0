from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from werkzeug.datastructures import FileStorage

from ..common.datetime_utils import now_local, parse_optional_date
from ..common.query import optional_int, page_args, sort_args
from ..common.validators import FieldErrors
from ..core import workflow
from ..core.enums import Role, WorkflowStatus
from ..core.exceptions import NotFoundError, ValidationError, WorkflowError
from ..employees.model import Employee
from ..employees.service import EmployeeService
from ..uploads.storage import UploadStorage
from ..users.permissions import ensure_manager
from .definitions import ALL_KINDS, DATE, DECIMAL, RecordKind
from .model import HRRecord, RecordFilter
from .repository import RecordRepository

logger = logging.getLogger(__name__)


class RecordService:
    """CRUD plus approval workflow for awards, warnings, promotions,
    resignations, terminations and transfers.

    Workflow kinds are created ``pending``; they can be edited or deleted only
    while pending and move through :data:`workflow.STANDARD`. Approving a
    promotion, transfer, resignation or termination updates the employee.
    """

    def __init__(
        self,
        records: RecordRepository,
        employees: EmployeeService,
        uploads: UploadStorage,
        *,
        kinds: Iterable[RecordKind] = ALL_KINDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._records = records
        self._employees = employees
        self._uploads = uploads
        self._kinds = {k.resource: k for k in kinds}
        self._clock = clock

    @property
    def kinds(self) -> Tuple[RecordKind, ...]:
        return tuple(self._kinds.values())

    def kind(self, resource: str) -> RecordKind:
        try:
            return self._kinds[resource]
        except KeyError:
            raise NotFoundError(f"Unknown resource {resource}.")

    # ---- reads

    def list_records(self, resource: str, args: Mapping[str, Any]) -> Dict[str, Any]:
        kind = self.kind(resource)
        page, per_page = page_args(args)
        sort, direction = sort_args(args, kind.sortable)
        status = (args.get("status") or "").strip().lower() or None
        flt = RecordFilter(
            search=(args.get("search") or "").strip() or None,
            status=status if kind.workflow and status in workflow.STATUS_VALUES[workflow.STANDARD] else None,
            employee_id=optional_int(args.get("employee_id")),
            date_from=parse_optional_date(args.get("date_from")),
            date_to=parse_optional_date(args.get("date_to")),
            sort=sort,
            direction=direction,
        )
        rows, total = self._records.list_records(kind, flt, page=page, per_page=per_page)
        return {"data": [r.to_dict() for r in rows], "total": total, "page": page, "per_page": per_page}

    def get(self, resource: str, record_id: int) -> HRRecord:
        kind = self.kind(resource)
        record = self._records.get(kind, int(record_id))
        if record is None:
            raise NotFoundError(f"{kind.label} not found.")
        return record

    # ---- writes

    def create(
        self,
        *,
        current_role: Role,
        user_id: int,
        resource: str,
        data: Mapping[str, Any],
        files: Optional[Mapping[str, FileStorage]] = None,
    ) -> HRRecord:
        kind = self.kind(resource)
        ensure_manager(current_role)
        employee, values = self._validate(kind, data)
        upload = self._pending_upload(kind, files)

        stored = self._store_upload(kind, upload)
        if stored:
            values[kind.upload.column] = stored
        try:
            record_id = self._records.create(kind, employee_id=employee.employee_id, values=values, created_by=user_id)
        except Exception:
            self._uploads.delete(stored)
            raise

        logger.info("%s %s created for employee %s by user %s", kind.label, record_id, employee.employee_id, user_id)
        return self.get(resource, record_id)

    def update(
        self,
        *,
        current_role: Role,
        user_id: int,
        resource: str,
        record_id: int,
        data: Mapping[str, Any],
        files: Optional[Mapping[str, FileStorage]] = None,
    ) -> HRRecord:
        kind = self.kind(resource)
        ensure_manager(current_role)
        existing = self.get(resource, record_id)
        if kind.workflow:
            workflow.ensure_pending(existing.status, "edited")

        employee, values = self._validate(kind, data)
        upload = self._pending_upload(kind, files)

        stored = self._store_upload(kind, upload)
        if stored:
            values[kind.upload.column] = stored
        try:
            self._records.update(kind, existing.record_id, employee_id=employee.employee_id, values=values)
        except Exception:
            self._uploads.delete(stored)
            raise
        if stored:
            self._uploads.delete(existing.values.get(kind.upload.column))

        logger.info("%s %s updated by user %s", kind.label, existing.record_id, user_id)
        return self.get(resource, existing.record_id)

    def update_status(
        self,
        *,
        current_role: Role,
        user_id: int,
        resource: str,
        record_id: int,
        status: str,
        remarks: Optional[str] = None,
    ) -> HRRecord:
        kind = self.kind(resource)
        if not kind.workflow:
            raise NotFoundError(f"{kind.label} records have no approval workflow.")
        ensure_manager(current_role)
        record = self.get(resource, record_id)

        target = workflow.ensure_transition(workflow.STANDARD, record.status, status)
        employee_fields = None
        if target == WorkflowStatus.APPROVED.value and kind.on_approved is not None:
            employee_fields = kind.on_approved(record.values) or None

        moved = self._records.set_status(
            kind,
            record.record_id,
            from_status=record.status,
            status=target,
            approved_by=int(user_id),
            approved_at=self._clock(),
            remarks=(remarks or "").strip() or None,
            employee_fields=employee_fields,
        )
        if not moved:
            current = self.get(resource, record.record_id).status
            raise WorkflowError(f"Cannot change status from {current} to {target}.")

        logger.info("%s %s: %s -> %s by user %s", kind.label, record.record_id, record.status, target, user_id)
        if employee_fields:
            logger.info("Employee %s updated: %s", record.employee_id, ", ".join(sorted(employee_fields)))
        return self.get(resource, record.record_id)

    def delete(self, *, current_role: Role, user_id: int, resource: str, record_id: int) -> None:
        kind = self.kind(resource)
        ensure_manager(current_role)
        record = self.get(resource, record_id)
        if kind.workflow:
            workflow.ensure_pending(record.status, "deleted")

        self._records.delete(kind, record.record_id)
        if kind.upload:
            self._uploads.delete(record.values.get(kind.upload.column))
        logger.info("%s %s deleted by user %s", kind.label, record.record_id, user_id)

    # ---- helpers

    def _validate(self, kind: RecordKind, data: Mapping[str, Any]) -> Tuple[Employee, Dict[str, Any]]:
        payload = dict(data.items())
        v = FieldErrors(payload)

        employee: Optional[Employee] = None
        employee_id = v.integer("employee_id", required=True)
        if employee_id is not None:
            try:
                employee = self._employees.require_active(employee_id)
            except ValidationError as e:
                for field, messages in e.errors.items():
                    for message in messages:
                        v.add(field, message)

        if employee is not None:
            snapshot = employee.to_dict()
            for column, source in kind.employee_defaults.items():
                if payload.get(column) in (None, ""):
                    payload[column] = snapshot.get(source)

        values: Dict[str, Any] = {}
        for spec in kind.fields:
            if spec.kind == DATE:
                values[spec.name] = v.date(spec.name, required=spec.required)
            elif spec.kind == DECIMAL:
                values[spec.name] = v.decimal(spec.name, required=spec.required, min_value=Decimal("0"))
            else:
                values[spec.name] = v.string(spec.name, required=spec.required, max_length=spec.max_length)

        for later, earlier in kind.date_order:
            v.after_or_equal(later, values.get(later), earlier, values.get(earlier))

        v.raise_if_any()
        if employee is None:
            raise ValidationError.for_field("employee_id", "The selected employee_id is invalid.")
        return employee, values

    def _pending_upload(self, kind: RecordKind, files: Optional[Mapping[str, FileStorage]]) -> Optional[FileStorage]:
        if not kind.upload or not files:
            return None
        file = files.get(kind.upload.field)
        if file is None or not file.filename:
            return None
        spec = kind.upload
        self._uploads.check(file, field=spec.field, extensions=spec.extensions, max_bytes=spec.max_bytes)
        return file

    def _store_upload(self, kind: RecordKind, file: Optional[FileStorage]) -> Optional[str]:
        if file is None:
            return None
        spec = kind.upload
        return self._uploads.save(
            file, folder=spec.folder, field=spec.field, extensions=spec.extensions, max_bytes=spec.max_bytes
        )
