from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from ..core import workflow
from .api import HRApiClient
from .debounce import Debouncer
from .errors import ApiError
from .forms import CREATE, EDIT, VIEW, ApprovalForm, RecordForm
from .notifier import ConfirmModal, ToastNotifier
from .resources import ResourcePage, page_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataSource:
    name: str
    label: str
    fetch: Callable[[], list]
    essential: bool = True


class RecordPage:
    """State of one record page: the list, the roster and the lookups.

    ``load`` issues every request at once and applies the outcomes after all
    have finished. A failed essential source is blanked and reported; a failed
    optional source (lines) only marks its feature as degraded.
    """

    def __init__(
        self,
        api: HRApiClient,
        resource: str,
        *,
        notifier: Optional[ToastNotifier] = None,
        confirm: Optional[ConfirmModal] = None,
        filters: Optional[Mapping[str, Any]] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.api = api
        self.page: ResourcePage = page_for(resource)
        self.notifier = notifier or ToastNotifier()
        self.confirm = confirm
        self.filters: Dict[str, Any] = dict(filters or {})

        self.records: List[Mapping[str, Any]] = []
        self.roster: List[Mapping[str, Any]] = []
        self.lookups: Dict[str, list] = {lookup.name: [] for lookup in self.page.lookups}
        self.degraded: Set[str] = set()
        self.failed: Set[str] = set()

        wait = {} if debounce_seconds is None else {"wait": debounce_seconds}
        self._search = Debouncer(self._apply_search, **wait)

    # ---- loading

    def sources(self) -> List[DataSource]:
        sources = [
            DataSource("records", f"{self.page.label}s", lambda: self.api.list_records(self.page.resource, **self.filters)),
            DataSource("employees", "employees", lambda: self.api.list_employees(active_only=True)),
        ]
        fetchers = {"departments": self.api.list_departments, "lines": self.api.list_lines}
        for lookup in self.page.lookups:
            sources.append(DataSource(lookup.name, lookup.label, fetchers[lookup.name], lookup.essential))
        return sources

    def load(self) -> None:
        sources = self.sources()
        with ThreadPoolExecutor(max_workers=len(sources)) as pool:
            futures = [(src, pool.submit(src.fetch)) for src in sources]
            outcomes = []
            for src, future in futures:
                try:
                    outcomes.append((src, future.result(), None))
                except ApiError as e:
                    outcomes.append((src, [], e))

        self.degraded.clear()
        self.failed.clear()
        for src, rows, error in outcomes:
            self._store(src.name, rows if isinstance(rows, list) else [])
            if error is None:
                continue
            logger.warning("Loading %s failed: %s", src.name, error)
            if src.essential:
                self.failed.add(src.name)
                self.notifier.error(f"Error loading {src.label}. Please try again later.")
            else:
                self.degraded.add(src.name)

        if self.degraded and not self.failed:
            for src in sources:
                if src.name in self.degraded:
                    self.notifier.info(f"{src.label} data is unavailable. Some features may be limited.")

    def _store(self, name: str, rows: list) -> None:
        if name == "records":
            self.records = rows
        elif name == "employees":
            self.roster = rows
        else:
            self.lookups[name] = rows

    def reload_records(self) -> bool:
        try:
            rows = self.api.list_records(self.page.resource, **self.filters)
        except ApiError as e:
            self.notifier.error(e.message_or(f"Error loading {self.page.label}s. Please try again later."))
            return False
        self.records = rows
        return True

    def is_available(self, feature: str) -> bool:
        return feature not in self.degraded and feature not in self.failed

    # ---- search / filters

    def search(self, query: str) -> None:
        """Debounced: only the last query of a typing burst reloads the list."""
        self._search(query)

    def flush_search(self) -> None:
        self._search.flush()

    def _apply_search(self, query: str) -> None:
        self.filters["search"] = query.strip() or None
        self.reload_records()

    def set_filter(self, name: str, value: Any) -> None:
        self.filters[name] = value
        self.reload_records()

    # ---- forms and actions

    def can_edit(self, record: Mapping[str, Any]) -> bool:
        """Workflow records are editable (and deletable) only while pending."""
        if self.page.workflow_kind is None:
            return True
        return workflow.is_editable(record.get("status", ""))

    def new_form(self) -> RecordForm:
        return RecordForm(self.api, self.page, self.roster, self.notifier, mode=CREATE)

    def edit_form(self, record: Mapping[str, Any]) -> RecordForm:
        mode = EDIT if self.can_edit(record) else VIEW
        return RecordForm(self.api, self.page, self.roster, self.notifier, mode=mode, record=record)

    def view_form(self, record: Mapping[str, Any]) -> RecordForm:
        return RecordForm(self.api, self.page, self.roster, self.notifier, mode=VIEW, record=record)

    def approval_form(self, record: Mapping[str, Any]) -> ApprovalForm:
        return ApprovalForm(self.api, self.page, record, self.notifier)

    def submit(self, form: Any) -> bool:
        """Submit a record or approval form; the list reloads only on success."""
        if not form.submit():
            return False
        self.reload_records()
        return True

    def decide(self, record: Mapping[str, Any], status: str, remarks: str = "") -> bool:
        form = self.approval_form(record)
        form.status = status
        form.remarks = remarks
        return self.submit(form)

    def delete(self, record: Mapping[str, Any]) -> bool:
        if self.confirm is not None and not self.confirm.confirm(
            f"Delete {self.page.label}", f"Are you sure you want to delete this {self.page.label}?"
        ):
            return False
        try:
            self.api.delete(self.page.resource, record["id"])
        except ApiError as e:
            self.notifier.error(e.message_or(f"Error deleting {self.page.label}"))
            return False
        self.notifier.success(f"{self.page.label.capitalize()} deleted successfully")
        self.reload_records()
        return True

    def close(self) -> None:
        self._search.cancel()
