"""Record kinds handled by the generic corehr service.

A kind lists its columns and how each is validated, which date column drives
``date_from``/``date_to`` filtering, what the list search covers, where its
attachment goes, and what approving it changes on the employee.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..core.constants import DOCUMENT_EXTENSIONS, MAX_DOCUMENT_BYTES, MAX_PHOTO_BYTES, PHOTO_EXTENSIONS
from ..core.enums import JobStatus

STRING = "string"
TEXT = "text"
DATE = "date"
DECIMAL = "decimal"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str = STRING
    required: bool = False
    max_length: Optional[int] = None


@dataclass(frozen=True)
class UploadSpec:
    field: str
    column: str
    folder: str
    extensions: frozenset
    max_bytes: int


@dataclass(frozen=True)
class RecordKind:
    resource: str
    table: str
    label: str
    fields: Tuple[FieldSpec, ...]
    date_field: str
    search_fields: Tuple[str, ...]
    workflow: bool = False
    upload: Optional[UploadSpec] = None
    owner_column: Optional[str] = None
    # (later, earlier) pairs checked with after_or_equal
    date_order: Tuple[Tuple[str, str], ...] = ()
    # record column -> employees column, used when the payload leaves it empty
    employee_defaults: Mapping[str, str] = field(default_factory=dict)
    on_approved: Optional[Callable[[Mapping[str, Any]], Dict[str, Any]]] = None

    @property
    def columns(self) -> Tuple[str, ...]:
        cols = tuple(f.name for f in self.fields)
        if self.upload:
            cols += (self.upload.column,)
        return cols

    @property
    def sortable(self) -> frozenset:
        extra = {"id", "created_at"} | ({"status"} if self.workflow else set())
        return frozenset(self.columns) | extra


def _document(folder: str) -> UploadSpec:
    return UploadSpec("document", "document_path", folder, DOCUMENT_EXTENSIONS, MAX_DOCUMENT_BYTES)


def _promotion_approved(values: Mapping[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {"Jobtitle": values["new_position"]}
    if values.get("new_salary") is not None:
        changes["payrate"] = values["new_salary"]
    return changes


def _transfer_approved(values: Mapping[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {"Department": values["to_department"]}
    if values.get("to_line"):
        changes["Line"] = values["to_line"]
    return changes


def _resignation_approved(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {"JobStatus": JobStatus.INACTIVE.value, "EndOfContract": values["resignation_date"]}


def _termination_approved(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {"JobStatus": JobStatus.TERMINATED.value, "EndOfContract": values["termination_date"]}


AWARDS = RecordKind(
    resource="awards",
    table="awards",
    label="Award",
    fields=(
        FieldSpec("award_name", required=True, max_length=255),
        FieldSpec("award_type", required=True, max_length=255),
        FieldSpec("gift", max_length=255),
        FieldSpec("cash_price", DECIMAL),
        FieldSpec("award_date", DATE, required=True),
        FieldSpec("description", TEXT),
    ),
    date_field="award_date",
    search_fields=("award_name", "award_type", "gift"),
    upload=UploadSpec("photo", "photo_path", "awards", PHOTO_EXTENSIONS, MAX_PHOTO_BYTES),
    owner_column="created_by",
)

WARNINGS = RecordKind(
    resource="warnings",
    table="warnings",
    label="Warning",
    fields=(
        FieldSpec("warning_type", required=True, max_length=255),
        FieldSpec("subject", required=True, max_length=255),
        FieldSpec("warning_description", TEXT, required=True),
        FieldSpec("warning_date", DATE, required=True),
        FieldSpec("acknowledgement_date", DATE),
        FieldSpec("employee_response", TEXT),
    ),
    date_field="warning_date",
    search_fields=("warning_type", "subject"),
    upload=_document("warnings"),
    owner_column="issued_by",
    date_order=(("acknowledgement_date", "warning_date"),),
)

PROMOTIONS = RecordKind(
    resource="promotions",
    table="promotions",
    label="Promotion",
    fields=(
        FieldSpec("promotion_title", required=True, max_length=255),
        FieldSpec("previous_position", required=True, max_length=255),
        FieldSpec("new_position", required=True, max_length=255),
        FieldSpec("previous_salary", DECIMAL),
        FieldSpec("new_salary", DECIMAL),
        FieldSpec("promotion_date", DATE, required=True),
        FieldSpec("description", TEXT),
    ),
    date_field="promotion_date",
    search_fields=("promotion_title", "previous_position", "new_position"),
    workflow=True,
    employee_defaults={"previous_position": "Jobtitle", "previous_salary": "payrate"},
    on_approved=_promotion_approved,
)

RESIGNATIONS = RecordKind(
    resource="resignations",
    table="resignations",
    label="Resignation",
    fields=(
        FieldSpec("notice_date", DATE, required=True),
        FieldSpec("resignation_date", DATE, required=True),
        FieldSpec("reason", TEXT, required=True),
    ),
    date_field="resignation_date",
    search_fields=("reason",),
    workflow=True,
    upload=_document("resignations"),
    date_order=(("resignation_date", "notice_date"),),
    on_approved=_resignation_approved,
)

TERMINATIONS = RecordKind(
    resource="terminations",
    table="terminations",
    label="Termination",
    fields=(
        FieldSpec("termination_type", required=True, max_length=255),
        FieldSpec("notice_date", DATE, required=True),
        FieldSpec("termination_date", DATE, required=True),
        FieldSpec("reason", TEXT, required=True),
    ),
    date_field="termination_date",
    search_fields=("termination_type", "reason"),
    workflow=True,
    upload=_document("terminations"),
    date_order=(("termination_date", "notice_date"),),
    on_approved=_termination_approved,
)

TRANSFERS = RecordKind(
    resource="transfers",
    table="transfers",
    label="Transfer",
    fields=(
        FieldSpec("from_department", required=True, max_length=255),
        FieldSpec("to_department", required=True, max_length=255),
        FieldSpec("from_line", max_length=255),
        FieldSpec("to_line", max_length=255),
        FieldSpec("transfer_date", DATE, required=True),
        FieldSpec("reason", TEXT, required=True),
    ),
    date_field="transfer_date",
    search_fields=("from_department", "to_department", "from_line", "to_line"),
    workflow=True,
    employee_defaults={"from_department": "Department", "from_line": "Line"},
    on_approved=_transfer_approved,
)

ALL_KINDS: Tuple[RecordKind, ...] = (AWARDS, WARNINGS, PROMOTIONS, RESIGNATIONS, TERMINATIONS, TRANSFERS)
KINDS_BY_RESOURCE: Dict[str, RecordKind] = {k.resource: k for k in ALL_KINDS}
