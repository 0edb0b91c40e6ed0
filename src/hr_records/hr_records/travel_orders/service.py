from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from werkzeug.datastructures import FileStorage

from ..common.datetime_utils import now_local, parse_optional_date
from ..common.query import optional_int, sort_args
from ..common.validators import FieldErrors
from ..core import workflow
from ..core.constants import (
    FORCE_APPROVE_DEFAULT_REMARKS,
    FORCE_APPROVED,
    MAX_TRAVEL_DOCUMENT_BYTES,
    MAX_TRAVEL_DOCUMENTS,
    TRAVEL_DOCUMENT_EXTENSIONS,
)
from ..core.enums import Role, TravelOrderStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError, WorkflowError
from ..employees.model import Employee
from ..employees.service import EmployeeService
from ..organization.service import OrganizationService
from ..uploads.storage import UploadStorage
from ..users.permissions import ensure_manager, ensure_superadmin
from .model import TravelOrder, TravelOrderFilter
from .repository import TravelOrderRepository
from .rules import day_counts, is_full_day

logger = logging.getLogger(__name__)

SORTABLE = frozenset({"id", "created_at", "start_date", "end_date", "status", "destination"})
DOCUMENTS_FOLDER = "travel_orders"


class TravelOrderService:
    """Travel orders: one order per employee, extended approval workflow.

    ``pending -> approved | rejected`` and ``approved -> completed | cancelled``;
    a superadmin may force-approve a pending order, which is stored as
    ``approved`` with the force fields set.
    """

    def __init__(
        self,
        orders: TravelOrderRepository,
        employees: EmployeeService,
        organization: OrganizationService,
        uploads: UploadStorage,
        *,
        holidays: Iterable[date] = (),
        clock: Callable[[], datetime] = now_local,
    ):
        self._orders = orders
        self._employees = employees
        self._organization = organization
        self._uploads = uploads
        self._holidays = frozenset(holidays)
        self._clock = clock

    # ---- reads

    def list_orders(self, args: Mapping[str, Any]) -> Sequence[TravelOrder]:
        sort, direction = sort_args(args, SORTABLE)
        status = (args.get("status") or "").strip().lower() or None
        flt = TravelOrderFilter(
            search=(args.get("search") or "").strip() or None,
            status=status if status in workflow.STATUS_VALUES[workflow.TRAVEL_ORDER] else None,
            employee_id=optional_int(args.get("employee_id")),
            date_from=parse_optional_date(args.get("date_from")),
            date_to=parse_optional_date(args.get("date_to")),
            sort=sort,
            direction=direction,
        )
        return self._orders.list_orders(flt)

    def get(self, order_id: int) -> TravelOrder:
        order = self._orders.get(int(order_id))
        if order is None:
            raise NotFoundError("Travel order not found.")
        return order

    def document_path(self, order_id: int, index: int) -> str:
        order = self.get(order_id)
        if index < 0 or index >= len(order.document_paths):
            raise NotFoundError("Document not found.")
        return order.document_paths[index]

    # ---- writes

    def create(
        self,
        *,
        current_role: Role,
        user_id: int,
        data: Mapping[str, Any],
        files: Optional[Mapping[str, FileStorage]] = None,
    ) -> Dict[str, Any]:
        ensure_manager(current_role)

        v = FieldErrors(data)
        raw_ids = v.string_list("employee_ids") or v.string_list("employee_id")
        if not raw_ids:
            v.add("employee_ids", "The employee_ids field is required.")
        employee_ids: List[int] = []
        for i, raw in enumerate(raw_ids):
            try:
                employee_ids.append(int(raw))
            except ValueError:
                v.add(f"employee_ids.{i}", f"The employee_ids.{i} must be an integer.")
        details = self._validate_details(v)
        documents = self._documents(v, files)
        v.raise_if_any()

        created: List[TravelOrder] = []
        errors: List[str] = []
        for employee_id in employee_ids:
            employee = self._employees.get(employee_id)
            reason = self._skip_reason(employee_id, employee, details)
            if reason:
                logger.warning("Travel order skipped: %s", reason)
                errors.append(reason)
                continue

            values = self._computed(details)
            values.update(employee_id=employee_id, status=TravelOrderStatus.PENDING.value, created_by=user_id)
            values["document_paths"] = self._store_documents(documents)
            order_id = self._orders.create(values)
            logger.info("Travel order %s created for employee %s by user %s", order_id, employee_id, user_id)
            created.append(self.get(order_id))

        if not created:
            raise ValidationError("No travel orders were created.", {"employee_ids": errors})

        return {
            "message": f"{len(created)} travel order(s) created successfully.",
            "created": len(created),
            "skipped": len(errors),
            "errors": errors,
            "data": [o.to_dict() for o in created],
        }

    def update(
        self,
        *,
        current_role: Role,
        user_id: int,
        order_id: int,
        data: Mapping[str, Any],
        files: Optional[Mapping[str, FileStorage]] = None,
    ) -> TravelOrder:
        ensure_manager(current_role)
        order = self.get(order_id)
        workflow.ensure_pending(order.status, "edited")

        v = FieldErrors(data)
        details = self._validate_details(v)
        documents = self._documents(v, files)
        v.raise_if_any()

        overlap = self._orders.find_overlap(
            order.employee_id, details["start_date"], details["end_date"], exclude_id=order.order_id
        )
        if overlap is not None:
            raise ValidationError.for_field(
                "start_date",
                f"The dates overlap with existing travel from {overlap.start_date} to {overlap.end_date}.",
            )

        values = self._computed(details)
        if documents:
            values["document_paths"] = self._store_documents(documents)
        self._orders.update(order.order_id, values)
        if documents:
            for path in order.document_paths:
                self._uploads.delete(path)

        logger.info("Travel order %s updated by user %s", order.order_id, user_id)
        return self.get(order.order_id)

    def update_status(
        self,
        *,
        current_role: Role,
        user_id: int,
        order_id: int,
        status: str,
        remarks: Optional[str] = None,
    ) -> TravelOrder:
        status = (status or "").strip().lower()
        if status == FORCE_APPROVED:
            ensure_superadmin(current_role, "Only superadmin can force approve travel orders.")
        else:
            ensure_manager(current_role)

        order = self.get(order_id)
        remarks = (remarks or "").strip() or None
        now = self._clock()

        if status == FORCE_APPROVED:
            workflow.ensure_transition(workflow.TRAVEL_ORDER, order.status, TravelOrderStatus.APPROVED.value)
            changes: Dict[str, Any] = {
                "status": TravelOrderStatus.APPROVED.value,
                "approved_by": int(user_id),
                "approved_at": now,
                "remarks": remarks,
                "force_approved": True,
                "force_approved_by": int(user_id),
                "force_approved_at": now,
                "force_approve_remarks": remarks or FORCE_APPROVE_DEFAULT_REMARKS,
            }
        else:
            target = workflow.ensure_transition(workflow.TRAVEL_ORDER, order.status, status)
            changes = {"status": target, "remarks": remarks}
            if target in (TravelOrderStatus.APPROVED.value, TravelOrderStatus.REJECTED.value):
                changes.update(approved_by=int(user_id), approved_at=now)

        if not self._orders.transition(order.order_id, order.status, changes):
            current = self.get(order.order_id).status
            raise WorkflowError(f"Cannot change status from {current} to {changes['status']}.")
        logger.info("Travel order %s: %s -> %s by user %s", order.order_id, order.status, status, user_id)
        return self.get(order.order_id)

    def bulk_update(
        self,
        *,
        current_role: Role,
        user_id: int,
        order_ids: Sequence[Any],
        status: str,
        remarks: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Apply one decision to many orders; a failing id does not stop the rest."""
        status = (status or "").strip().lower()
        if status == FORCE_APPROVED:
            ensure_superadmin(current_role, "Only superadmin can force approve travel orders.")
        else:
            ensure_manager(current_role)
            if status not in workflow.STATUS_VALUES[workflow.TRAVEL_ORDER]:
                raise ValidationError.for_field("status", "The selected status is invalid.")

        ids = self._ids(order_ids)
        updated: List[int] = []
        failed: List[Dict[str, Any]] = []
        for order_id in ids:
            try:
                self.update_status(
                    current_role=current_role, user_id=user_id, order_id=order_id, status=status, remarks=remarks
                )
                updated.append(order_id)
            except DomainError as e:
                failed.append({"id": order_id, "message": e.message})

        verb = "force approved" if status == FORCE_APPROVED else "updated"
        message = f"{len(updated)} travel orders {verb} successfully."
        if failed:
            message += f" {len(failed)} failed."
        return {"message": message, "updated": updated, "failed": failed}

    def force_approve(
        self, *, current_role: Role, user_id: int, order_ids: Sequence[Any], remarks: Optional[str]
    ) -> Dict[str, Any]:
        ensure_superadmin(current_role, "Only superadmin can force approve travel orders.")
        if not (remarks or "").strip():
            raise ValidationError.for_field("remarks", "The remarks field is required.")
        logger.info("Force approval of %d travel orders by user %s", len(order_ids or []), user_id)
        return self.bulk_update(
            current_role=current_role, user_id=user_id, order_ids=order_ids, status=FORCE_APPROVED, remarks=remarks
        )

    def delete(self, *, current_role: Role, user_id: int, order_id: int) -> None:
        ensure_manager(current_role)
        order = self.get(order_id)
        workflow.ensure_pending(order.status, "deleted")
        self._orders.delete(order.order_id)
        for path in order.document_paths:
            self._uploads.delete(path)
        logger.info("Travel order %s deleted by user %s", order.order_id, user_id)

    # ---- helpers

    @staticmethod
    def _ids(order_ids: Sequence[Any]) -> List[int]:
        if isinstance(order_ids, str):
            order_ids = [p for p in order_ids.split(",") if p.strip()]
        ids: List[int] = []
        for raw in order_ids or []:
            try:
                ids.append(int(raw))
            except (TypeError, ValueError):
                raise ValidationError.for_field("travel_order_ids", "The travel_order_ids must be integers.")
        if not ids:
            raise ValidationError.for_field("travel_order_ids", "The travel_order_ids field is required.")
        return ids

    def _validate_details(self, v: FieldErrors) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "start_date": v.date("start_date", required=True),
            "end_date": v.date("end_date", required=True),
            "departure_time": v.time("departure_time"),
            "return_time": v.time("return_time"),
            "destination": v.string("destination", required=True, max_length=255),
            "transportation_type": v.string("transportation_type", required=True, max_length=100),
            "purpose": v.string("purpose", required=True, max_length=1000),
            "accommodation_required": v.boolean("accommodation_required"),
            "meal_allowance": v.boolean("meal_allowance"),
            "other_expenses": v.string("other_expenses", max_length=500),
            "estimated_cost": v.decimal("estimated_cost", min_value=0),
            "return_to_office": v.boolean("return_to_office"),
            "office_return_time": v.time("office_return_time"),
        }
        v.after_or_equal("end_date", d["end_date"], "start_date", d["start_date"])
        if d["return_to_office"] and d["office_return_time"] is None and "office_return_time" not in v.errors:
            v.add("office_return_time", 'Office return time is required when "Return to Office" is checked.')
        return d

    def _computed(self, d: Mapping[str, Any]) -> Dict[str, Any]:
        start: date = d["start_date"]
        end: date = d["end_date"]
        departure: Optional[time] = d["departure_time"]
        return_: Optional[time] = d["return_time"]
        office: Optional[time] = d["office_return_time"] if d["return_to_office"] else None

        total_days, working_days = day_counts(start, end, self._holidays)
        return {
            "start_date": start,
            "end_date": end,
            "departure_time": datetime.combine(start, departure) if departure else None,
            "return_time": datetime.combine(end, return_) if return_ else None,
            "destination": d["destination"],
            "transportation_type": d["transportation_type"],
            "purpose": d["purpose"],
            "accommodation_required": d["accommodation_required"],
            "meal_allowance": d["meal_allowance"],
            "other_expenses": d["other_expenses"],
            "estimated_cost": d["estimated_cost"],
            "return_to_office": d["return_to_office"],
            "office_return_time": datetime.combine(end, office) if office else None,
            "total_days": total_days,
            "working_days": working_days,
            "is_full_day": is_full_day(departure, return_, d["return_to_office"], office),
        }

    def _skip_reason(self, employee_id: int, employee: Optional[Employee], d: Mapping[str, Any]) -> Optional[str]:
        if employee is None:
            return f"Employee ID {employee_id} not found"
        name = f"{employee.first_name} {employee.last_name}"
        if not employee.is_active:
            return f"Employee {name} is not active"
        if not self._organization.is_department_active(employee.department):
            return f"Employee {name} belongs to an inactive department"
        overlap = self._orders.find_overlap(employee_id, d["start_date"], d["end_date"])
        if overlap is not None:
            return (
                f"Travel order for {name} overlaps with existing travel "
                f"from {overlap.start_date} to {overlap.end_date}"
            )
        return None

    def _documents(self, v: FieldErrors, files: Optional[Mapping[str, FileStorage]]) -> List[FileStorage]:
        if not files:
            return []
        getlist = getattr(files, "getlist", None)
        if getlist is not None:
            candidates = list(getlist("documents")) + list(getlist("documents[]"))
        else:
            single = files.get("documents")
            candidates = list(single) if isinstance(single, (list, tuple)) else [single] if single else []
        documents = [f for f in candidates if f is not None and f.filename]

        if len(documents) > MAX_TRAVEL_DOCUMENTS:
            v.add("documents", f"The documents may not have more than {MAX_TRAVEL_DOCUMENTS} items.")
            return []
        for i, file in enumerate(documents):
            try:
                self._uploads.check(
                    file,
                    field=f"documents.{i}",
                    extensions=TRAVEL_DOCUMENT_EXTENSIONS,
                    max_bytes=MAX_TRAVEL_DOCUMENT_BYTES,
                )
            except ValidationError as e:
                for field, messages in e.errors.items():
                    for message in messages:
                        v.add(field, message)
        return documents

    def _store_documents(self, documents: Sequence[FileStorage]) -> List[str]:
        return [
            self._uploads.save(
                f,
                folder=DOCUMENTS_FOLDER,
                field="documents",
                extensions=TRAVEL_DOCUMENT_EXTENSIONS,
                max_bytes=MAX_TRAVEL_DOCUMENT_BYTES,
            )
            for f in documents
        ]
